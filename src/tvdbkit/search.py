"""Series search and id lookups."""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union
from urllib.parse import urlencode

from .cache import ONE_DAY, ONE_MONTH
from .errors import InvalidArgumentError
from .json_access import get_array, get_integer, get_string, stream_objects
from .models import SearchResult

if TYPE_CHECKING:  # pragma: no cover
    from .client import TVDBClient
    from .series import SeriesAggregator

LOGGER = logging.getLogger(__name__)

SEARCH_PATH = "search/series"
IMDB_ID_PATTERN = re.compile(r"^(?:tt)?(\d+)$", re.IGNORECASE)
PLACEHOLDER_MARKER = "**"


def is_placeholder_name(name: Optional[str]) -> bool:
    """Placeholder records are listed with names like ``**Series Name**``."""
    if not name:
        return False
    return name.startswith(PLACEHOLDER_MARKER) and name.endswith(PLACEHOLDER_MARKER)


def parse_imdb_id(value: Union[int, str]) -> int:
    """Return the numeric part of an IMDb id given as ``123`` or ``"tt0000123"``."""
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Illegal IMDb ID: {value!r}")
    if isinstance(value, int):
        number = value
    else:
        match = IMDB_ID_PATTERN.match(str(value).strip())
        if match is None:
            raise InvalidArgumentError(f"Illegal IMDb ID: {value!r}")
        number = int(match.group(1))
    if number <= 0:
        raise InvalidArgumentError(f"Illegal IMDb ID: {value!r}")
    return number


class SearchResolver:
    """Maps name, IMDb and TheTVDB id queries to :class:`SearchResult` records."""

    def __init__(self, client: TVDBClient, series: SeriesAggregator) -> None:
        self.client = client
        self.series = series

    def search(
        self,
        path: str,
        query: Mapping[str, Any],
        locale: Optional[str],
        ttl: timedelta,
    ) -> list[SearchResult]:
        response = self.client.request_json(f"{path}?{urlencode(query)}", locale, ttl)

        results: list[SearchResult] = []
        for record in stream_objects(response, "data"):
            series_id = get_integer(record, "id")
            name = get_string(record, "seriesName")
            if series_id is None:
                LOGGER.debug("Ignoring search record without id: %s", name)
                continue
            if is_placeholder_name(name):
                LOGGER.debug("Invalid series: %s [%d]", name, series_id)
                continue
            results.append(SearchResult(id=series_id, name=name, alias_names=get_array(record, "aliases")))
        return results

    def fetch_by_name(self, query: str, locale: Optional[str] = None) -> list[SearchResult]:
        return self.search(SEARCH_PATH, {"name": query}, locale, ONE_DAY)

    def fetch_by_imdb_id(self, imdb_id: Union[int, str], locale: Optional[str] = None) -> Optional[SearchResult]:
        """Return the first series matching an IMDb id, or None.

        Raises:
            InvalidArgumentError: If the id is malformed or not positive
        """
        number = parse_imdb_id(imdb_id)
        results = self.search(SEARCH_PATH, {"imdbId": f"tt{number:07d}"}, locale, ONE_MONTH)
        return results[0] if results else None

    def lookup_by_id(self, series_id: int, locale: Optional[str] = None) -> SearchResult:
        """Resolve a TheTVDB id through the series record. No placeholder filtering.

        Raises:
            InvalidArgumentError: If the id is not positive
        """
        if series_id <= 0:
            raise InvalidArgumentError(f"Illegal TheTVDB ID: {series_id}")

        info = self.series.get_series_info(SearchResult(id=series_id), locale)
        return SearchResult(id=series_id, name=info.name, alias_names=info.alias_names)
