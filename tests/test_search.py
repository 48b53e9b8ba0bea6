"""Tests for series search and id lookups."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from tvdbkit.cache import ONE_DAY, ONE_MONTH, ONE_WEEK
from tvdbkit.client import TVDBClient
from tvdbkit.errors import InvalidArgumentError
from tvdbkit.models import SearchResult
from tvdbkit.search import SearchResolver, is_placeholder_name, parse_imdb_id
from tvdbkit.series import SeriesAggregator


def stub_client(response: Any) -> MagicMock:
    client = MagicMock(spec=TVDBClient)
    client.request_json.return_value = response
    return client


def resolver(client: MagicMock) -> SearchResolver:
    return SearchResolver(client, SeriesAggregator(client))


SEARCH_RESPONSE = {
    "data": [
        {"id": 81189, "seriesName": "Breaking Bad", "aliases": ["BB", "BB"], "status": "Ended"},
        {"id": 999, "seriesName": "**Duplicate of 81189**", "aliases": []},
        {"id": 273181, "seriesName": "Breaking Bad: Original Minisodes", "aliases": None},
        {"seriesName": "No id"},
    ]
}


class TestSearch:
    """Tests for name search."""

    def test_fetch_by_name(self) -> None:
        client = stub_client(SEARCH_RESPONSE)

        results = resolver(client).fetch_by_name("Breaking Bad", "en")

        assert [r.id for r in results] == [81189, 273181]
        assert results[0].name == "Breaking Bad"
        assert results[0].alias_names == ("BB",)
        assert results[1].alias_names == ()
        client.request_json.assert_called_once_with("search/series?name=Breaking+Bad", "en", ONE_DAY)

    def test_placeholder_records_are_dropped(self, caplog) -> None:
        client = stub_client(
            {
                "data": [
                    {"id": 1, "seriesName": "**"},
                    {"id": 2, "seriesName": "**Deleted Series**"},
                    {"id": 3, "seriesName": "Real ** Series"},
                ]
            }
        )

        with caplog.at_level("DEBUG", logger="tvdbkit.search"):
            results = resolver(client).fetch_by_name("series")

        assert [r.id for r in results] == [3]
        assert "Invalid series: **Deleted Series** [2]" in caplog.text

    def test_empty_response(self) -> None:
        client = stub_client({"Error": "Resource not found"})
        assert resolver(client).fetch_by_name("nothing") == []


class TestImdbLookup:
    """Tests for IMDb id lookups."""

    def test_returns_first_match(self) -> None:
        client = stub_client(SEARCH_RESPONSE)

        result = resolver(client).fetch_by_imdb_id("tt0903747", "en")

        assert result == SearchResult(id=81189)
        client.request_json.assert_called_once_with("search/series?imdbId=tt0903747", "en", ONE_MONTH)

    def test_accepts_numeric_id(self) -> None:
        client = stub_client(SEARCH_RESPONSE)

        resolver(client).fetch_by_imdb_id(903747)

        client.request_json.assert_called_once_with("search/series?imdbId=tt0903747", None, ONE_MONTH)

    def test_no_match_returns_none(self) -> None:
        client = stub_client({"data": []})
        assert resolver(client).fetch_by_imdb_id("tt0000001") is None

    def test_only_placeholder_match_returns_none(self) -> None:
        client = stub_client({"data": [{"id": 5, "seriesName": "**Removed**"}]})
        assert resolver(client).fetch_by_imdb_id(1) is None

    @pytest.mark.parametrize("value", [0, -3, "tt0000000", "abc", "", True])
    def test_invalid_ids(self, value) -> None:
        client = stub_client({"data": []})

        with pytest.raises(InvalidArgumentError):
            resolver(client).fetch_by_imdb_id(value)

        client.request_json.assert_not_called()


class TestLookupById:
    """Tests for TheTVDB id lookups."""

    @pytest.mark.parametrize("series_id", [0, -5])
    def test_non_positive_id(self, series_id) -> None:
        client = stub_client({})

        with pytest.raises(InvalidArgumentError):
            resolver(client).lookup_by_id(series_id, "en")

        client.request_json.assert_not_called()

    def test_wraps_series_info(self) -> None:
        client = stub_client({"data": {"id": 12345, "seriesName": "Test Show", "aliases": ["TS"]}})

        result = resolver(client).lookup_by_id(12345, "en")

        assert result.id == 12345
        assert result.name == "Test Show"
        assert result.alias_names == ("TS",)
        client.request_json.assert_called_once_with("series/12345", "en", ONE_WEEK)

    def test_placeholder_names_are_not_filtered(self) -> None:
        client = stub_client({"data": {"id": 7, "seriesName": "**Placeholder**"}})

        result = resolver(client).lookup_by_id(7)

        assert result.name == "**Placeholder**"


class TestHelpers:
    """Tests for placeholder and IMDb id helpers."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("**Foo**", True), ("**", True), ("Foo", False), ("**Foo", False), (None, False), ("", False)],
    )
    def test_is_placeholder_name(self, name, expected) -> None:
        assert is_placeholder_name(name) is expected

    @pytest.mark.parametrize(("value", "expected"), [(42, 42), ("tt0000042", 42), ("TT42", 42), (" 42 ", 42)])
    def test_parse_imdb_id(self, value, expected) -> None:
        assert parse_imdb_id(value) == expected
