"""Episode list provider backed by TheTVDB."""

from __future__ import annotations

from typing import Optional, Union

from .cache import ONE_MONTH, CacheGateway
from .client import TVDBClient
from .config import Settings, build_cache_store
from .images import ImageResolver
from .json_access import get_string, stream_objects
from .models import DATABASE_NAME, Episode, Image, SearchResult, SeriesData, SeriesInfo, SortOrder
from .search import SearchResolver
from .series import SeriesAggregator

EPISODE_LIST_LINK = "http://www.thetvdb.com/?tab=seasonall&id={id}"

SeriesRef = Union[SearchResult, int]


def _as_search_result(series: SeriesRef) -> SearchResult:
    if isinstance(series, SearchResult):
        return series
    return SearchResult(id=int(series))


class TheTVDBProvider:
    """Search, series, episode and artwork access through one object.

    Holds a single :class:`TVDBClient` so all lookups share one token and
    one response cache.
    """

    name = DATABASE_NAME

    def __init__(self, api_key: Optional[str] = None, *, client: Optional[TVDBClient] = None) -> None:
        if client is None:
            if api_key is None:
                raise ValueError("Either api_key or client is required")
            client = TVDBClient(api_key)
        self.client = client
        self.series = SeriesAggregator(client)
        self.search = SearchResolver(client, self.series)
        self.images = ImageResolver(client)

    @classmethod
    def from_settings(cls, settings: Settings) -> TheTVDBProvider:
        client = TVDBClient(
            settings.api_key,
            base_url=settings.base_url,
            cache=CacheGateway(build_cache_store(settings)),
            timeout=settings.timeout,
            transport_retries=settings.transport_retries,
        )
        return cls(client=client)

    def has_season_support(self) -> bool:
        return True

    def fetch_search_result(self, query: str, locale: Optional[str] = None) -> list[SearchResult]:
        return self.search.fetch_by_name(query, locale)

    def lookup_by_id(self, series_id: int, locale: Optional[str] = None) -> SearchResult:
        return self.search.lookup_by_id(series_id, locale)

    def lookup_by_imdb_id(self, imdb_id: Union[int, str], locale: Optional[str] = None) -> Optional[SearchResult]:
        return self.search.fetch_by_imdb_id(imdb_id, locale)

    def get_series_info(self, series: SeriesRef, locale: Optional[str] = None) -> SeriesInfo:
        return self.series.get_series_info(_as_search_result(series), locale)

    def get_series_data(
        self,
        series: SeriesRef,
        sort_order: SortOrder = SortOrder.AIRED,
        locale: Optional[str] = None,
    ) -> SeriesData:
        return self.series.fetch_series_data(_as_search_result(series), sort_order, locale)

    def get_episode_list(
        self,
        series: SeriesRef,
        sort_order: SortOrder = SortOrder.AIRED,
        locale: Optional[str] = None,
    ) -> list[Episode]:
        return self.get_series_data(series, sort_order, locale).episodes

    def get_images(self, series: SeriesRef, key_type: str) -> list[Image]:
        return self.images.get_images(_as_search_result(series), key_type)

    def languages(self) -> list[str]:
        """Language abbreviations supported by the service."""
        response = self.client.request_json("languages", None, ONE_MONTH)
        codes = (get_string(record, "abbreviation") for record in stream_objects(response, "data"))
        return [code for code in codes if code]

    def get_episode_list_link(self, series: SeriesRef) -> str:
        return EPISODE_LIST_LINK.format(id=_as_search_result(series).id)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> TheTVDBProvider:
        return self

    def __exit__(self, *args) -> None:
        self.close()
