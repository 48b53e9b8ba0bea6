"""Tests for the tvdbkit command line interface."""

from __future__ import annotations

import datetime as dt
import io
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from tvdbkit import cli
from tvdbkit.errors import TransportError
from tvdbkit.models import Episode, Image, SearchResult, SeriesData, SeriesInfo, SortOrder


@pytest.fixture(autouse=True)
def api_key(monkeypatch) -> None:
    monkeypatch.setenv("TVDB_API_KEY", "test-key")
    monkeypatch.delenv("TVDB_LANGUAGE", raising=False)
    monkeypatch.delenv("TVDB_CACHE_DIR", raising=False)
    monkeypatch.delenv("TVDB_BASE_URL", raising=False)


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=160, color_system=None)


@pytest.fixture
def provider() -> MagicMock:
    mock = MagicMock()
    mock.__enter__.return_value = mock
    return mock


def run(argv, provider, console) -> int:
    return cli.main(argv, console=console, provider_factory=lambda settings: provider)


def output(console: Console) -> str:
    return console.file.getvalue()


def test_search(provider, console) -> None:
    provider.fetch_search_result.return_value = [
        SearchResult(id=81189, name="Breaking Bad", alias_names=["BB"]),
    ]

    assert run(["--language", "en", "search", "Breaking Bad"], provider, console) == cli.EXIT_OK

    provider.fetch_search_result.assert_called_once_with("Breaking Bad", "en")
    assert "81189" in output(console)
    assert "Breaking Bad" in output(console)


def test_episodes_with_order(provider, console) -> None:
    info = SeriesInfo(id=1, name="Lost", order=SortOrder.DVD)
    provider.get_series_data.return_value = SeriesData(
        info,
        [
            Episode(series_name="Lost", season=1, episode=1, title="Pilot", airdate=dt.date(2004, 9, 22)),
            Episode(series_name="Lost", special=1, title="Recap"),
        ],
    )

    assert run(["episodes", "1", "--order", "dvd"], provider, console) == cli.EXIT_OK

    provider.get_series_data.assert_called_once_with(1, SortOrder.DVD, None)
    text = output(console)
    assert "Pilot" in text
    assert "Recap" in text
    assert "dvd order" in text


def test_invalid_order_is_rejected(provider, console) -> None:
    with pytest.raises(SystemExit):
        run(["episodes", "1", "--order", "production"], provider, console)


def test_lookup(provider, console) -> None:
    provider.lookup_by_id.return_value = SearchResult(id=12345, name="Test Show")
    provider.get_series_info.return_value = SeriesInfo(id=12345, name="Test Show", network="HBO")
    provider.get_episode_list_link.return_value = "http://www.thetvdb.com/?tab=seasonall&id=12345"

    assert run(["lookup", "12345"], provider, console) == cli.EXIT_OK

    assert "Test Show" in output(console)
    assert "HBO" in output(console)


def test_imdb_without_match(provider, console) -> None:
    provider.lookup_by_imdb_id.return_value = None

    assert run(["imdb", "tt0000001"], provider, console) == cli.EXIT_OK

    assert "No series found" in output(console)


def test_images(provider, console) -> None:
    provider.get_images.return_value = [Image(id=5, key_type="poster", file_name="posters/1.jpg", rating=7.5)]

    assert run(["images", "1", "poster"], provider, console) == cli.EXIT_OK

    assert "posters/1.jpg" in output(console)
    assert "7.50" in output(console)


def test_languages(provider, console) -> None:
    provider.languages.return_value = ["en", "de"]

    assert run(["languages"], provider, console) == cli.EXIT_OK

    assert "en de" in output(console)


def test_language_from_environment(provider, console, monkeypatch) -> None:
    monkeypatch.setenv("TVDB_LANGUAGE", "fr")
    provider.fetch_search_result.return_value = []

    run(["search", "Dix pour cent"], provider, console)

    provider.fetch_search_result.assert_called_once_with("Dix pour cent", "fr")


def test_missing_api_key(provider, console, monkeypatch) -> None:
    monkeypatch.delenv("TVDB_API_KEY")

    assert run(["languages"], provider, console) == cli.EXIT_CONFIG_ERROR
    provider.languages.assert_not_called()


def test_api_error_exit_code(provider, console) -> None:
    provider.languages.side_effect = TransportError("offline")

    assert run(["languages"], provider, console) == cli.EXIT_API_ERROR


def test_provider_is_closed(provider, console) -> None:
    provider.languages.return_value = []

    run(["languages"], provider, console)

    provider.__exit__.assert_called_once()


def test_malformed_config_file(provider, console, tmp_path) -> None:
    config = tmp_path / "tvdbkit.yaml"
    config.write_text("tvdb: [unclosed\n", encoding="utf-8")

    assert run(["--config", str(config), "languages"], provider, console) == cli.EXIT_CONFIG_ERROR
    provider.languages.assert_not_called()


def test_missing_config_file(provider, console, tmp_path) -> None:
    assert run(["--config", str(tmp_path / "absent.yaml"), "languages"], provider, console) == cli.EXIT_CONFIG_ERROR
