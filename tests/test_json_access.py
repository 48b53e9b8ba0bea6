"""Tests for null-tolerant JSON field extraction."""

from __future__ import annotations

import datetime as dt

import pytest

from tvdbkit.json_access import (
    get_array,
    get_date,
    get_decimal,
    get_integer,
    get_map,
    get_string,
    match_integer,
    stream_objects,
)


class TestGetString:
    """Tests for text extraction."""

    def test_returns_stripped_text(self) -> None:
        assert get_string({"name": "  Lost  "}, "name") == "Lost"

    @pytest.mark.parametrize("value", [None, "", "   ", [], {}])
    def test_blank_or_structured_values_are_none(self, value) -> None:
        assert get_string({"name": value}, "name") is None

    def test_numbers_become_text(self) -> None:
        assert get_string({"runtime": 45}, "runtime") == "45"

    def test_non_mapping_node(self) -> None:
        assert get_string(None, "name") is None
        assert get_string(["a"], "name") is None


class TestGetInteger:
    """Tests for integer extraction."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (3, 3),
            (0, 0),
            (-1, -1),
            (2.0, 2),
            ("12", 12),
            (" 7 ", 7),
            ("4.0", 4),
        ],
    )
    def test_converts_numeric_values(self, value, expected) -> None:
        assert get_integer({"n": value}, "n") == expected

    @pytest.mark.parametrize("value", [None, "", "abc", True, False, float("nan"), 2.7, "1.5", [], {}])
    def test_rejects_malformed_values(self, value) -> None:
        assert get_integer({"n": value}, "n") is None

    def test_missing_key(self) -> None:
        assert get_integer({}, "n") is None


class TestGetDecimal:
    """Tests for decimal extraction."""

    def test_numbers_and_numeric_strings(self) -> None:
        assert get_decimal({"r": 8.5}, "r") == 8.5
        assert get_decimal({"r": 9}, "r") == 9.0
        assert get_decimal({"r": "7.25"}, "r") == 7.25

    @pytest.mark.parametrize("value", [None, "n/a", True, float("inf"), {"average": 1}])
    def test_malformed_values(self, value) -> None:
        assert get_decimal({"r": value}, "r") is None


class TestGetDate:
    """Tests for date extraction."""

    def test_parses_iso_date(self) -> None:
        assert get_date({"firstAired": "2008-01-20"}, "firstAired") == dt.date(2008, 1, 20)

    def test_empty_string_is_none(self) -> None:
        assert get_date({"firstAired": ""}, "firstAired") is None

    def test_malformed_date_is_none(self) -> None:
        assert get_date({"firstAired": "2008-13-45"}, "firstAired") is None
        assert get_date({"firstAired": "soon"}, "firstAired") is None


class TestContainers:
    """Tests for map, array and object stream extraction."""

    def test_get_map(self) -> None:
        assert get_map({"links": {"last": 3}}, "links") == {"last": 3}
        assert get_map({"links": None}, "links") == {}
        assert get_map({"links": [1]}, "links") == {}

    def test_get_array(self) -> None:
        assert get_array({"aliases": ["A", "B"]}, "aliases") == ["A", "B"]
        assert get_array({"aliases": None}, "aliases") == []
        assert get_array({"aliases": "A"}, "aliases") == []

    def test_stream_objects_skips_non_mappings(self) -> None:
        document = {"data": [{"id": 1}, None, "x", {"id": 2}]}
        assert list(stream_objects(document, "data")) == [{"id": 1}, {"id": 2}]

    def test_stream_objects_without_data(self) -> None:
        assert list(stream_objects({"data": None}, "data")) == []


class TestMatchInteger:
    """Tests for the first integer in a string."""

    def test_first_digit_run(self) -> None:
        assert match_integer("45") == 45
        assert match_integer("approx. 30 min (60 with ads)") == 30

    def test_no_digits(self) -> None:
        assert match_integer("unknown") is None
        assert match_integer(None) is None
        assert match_integer("") is None
