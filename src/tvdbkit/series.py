"""Series metadata and episode listings.

Episode listings are paginated; the page count comes from ``links.last`` of
the first page. Each episode record is renumbered for the requested
:class:`SortOrder`, then split into regular episodes (sorted) and specials
(kept in the order the service returned them).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Dict, Optional

from .cache import ONE_DAY, ONE_WEEK
from .json_access import (
    get_array,
    get_date,
    get_decimal,
    get_integer,
    get_map,
    get_string,
    match_integer,
    stream_objects,
)
from .models import Episode, SearchResult, SeriesData, SeriesInfo, SortOrder, distinct_names, episode_sort_key

if TYPE_CHECKING:  # pragma: no cover
    from .client import TVDBClient

LOGGER = logging.getLogger(__name__)


def reconcile_numbering(record: Dict[str, Any], sort_order: SortOrder) -> tuple[Optional[int], Optional[int]]:
    """Return ``(season, episode)`` of an episode record for ``sort_order``.

    Aired numbering is the default. DVD numbering is used only when both DVD
    fields are valid numbers; absolute numbering only when the absolute number
    is positive, and it clears the season.
    """
    season = get_integer(record, "airedSeason")
    episode = get_integer(record, "airedEpisodeNumber")

    if sort_order is SortOrder.DVD:
        dvd_season = get_integer(record, "dvdSeason")
        dvd_episode = get_integer(record, "dvdEpisodeNumber")
        if dvd_season is not None and dvd_episode is not None:
            season, episode = dvd_season, dvd_episode
    elif sort_order is SortOrder.ABSOLUTE:
        absolute = get_integer(record, "absoluteNumber")
        if absolute is not None and absolute > 0:
            season, episode = None, absolute

    return season, episode


def build_episode(record: Dict[str, Any], info: SeriesInfo, sort_order: SortOrder) -> tuple[Episode, bool]:
    """Build an episode from a listing record.

    A special without an episode number keeps ``special=None``; it carries no
    numbering at all, so the returned flag rather than
    :attr:`Episode.is_special` decides where it is listed.

    Returns:
        The episode and whether it is a special (season zero or below)
    """
    title = get_string(record, "episodeName")
    airdate = get_date(record, "firstAired")
    season, number = reconcile_numbering(record, sort_order)

    if season is None or season > 0:
        episode = Episode(
            series_name=info.name,
            season=season,
            episode=number,
            title=title,
            absolute=get_integer(record, "absoluteNumber"),
            airdate=airdate,
            series_info=info.snapshot(),
        )
        return episode, False

    special = Episode(
        series_name=info.name,
        title=title,
        special=number,
        airdate=airdate,
        series_info=info.snapshot(),
    )
    return special, True


class SeriesAggregator:
    """Fetches series metadata and complete, renumbered episode lists."""

    def __init__(self, client: TVDBClient) -> None:
        self.client = client

    def get_series_info(
        self,
        series: SearchResult,
        locale: Optional[str] = None,
        order: Optional[SortOrder] = None,
    ) -> SeriesInfo:
        """Fetch series metadata, merging the search result's aliases with the record's."""
        response = self.client.request_json(f"series/{series.id}", locale, ONE_WEEK)
        data = get_map(response, "data")

        return SeriesInfo(
            id=series.id,
            locale=locale,
            order=order,
            name=get_string(data, "seriesName"),
            alias_names=distinct_names(series.alias_names, get_array(data, "aliases")),
            certification=get_string(data, "rating"),
            network=get_string(data, "network"),
            status=get_string(data, "status"),
            rating=get_decimal(data, "siteRating"),
            rating_count=get_integer(data, "siteRatingCount"),
            runtime=match_integer(get_string(data, "runtime")),
            genres=tuple(str(genre) for genre in get_array(data, "genre") if genre),
            start_date=get_date(data, "firstAired"),
        )

    def _episode_pages(self, series_id: int, locale: Optional[str]) -> Iterator[Any]:
        first = self.client.request_json(f"series/{series_id}/episodes?page=1", locale, ONE_DAY)
        last_page = get_integer(get_map(first, "links"), "last") or 1
        LOGGER.debug("Episode listing for series %d spans %d page(s)", series_id, last_page)
        yield first

        for page in range(2, last_page + 1):
            yield self.client.request_json(f"series/{series_id}/episodes?page={page}", locale, ONE_DAY)

    def fetch_series_data(
        self,
        series: SearchResult,
        sort_order: SortOrder = SortOrder.AIRED,
        locale: Optional[str] = None,
    ) -> SeriesData:
        """Fetch series info and every episode, numbered for ``sort_order``.

        Regular episodes are sorted by season and episode number; specials
        follow in the order they were listed.

        Raises:
            TVDBError: If any request fails
        """
        info = self.get_series_info(series, locale, order=sort_order)

        episodes: list[Episode] = []
        specials: list[Episode] = []
        for document in self._episode_pages(series.id, locale):
            for record in stream_objects(document, "data"):
                episode, is_special = build_episode(record, info, sort_order)
                (specials if is_special else episodes).append(episode)

        # DVD and absolute numbers are not necessarily listed in order
        episodes.sort(key=episode_sort_key)
        episodes.extend(specials)

        LOGGER.debug(
            "Fetched %d episodes (%d specials) for %s [%d]",
            len(episodes),
            len(specials),
            info.name,
            series.id,
        )
        return SeriesData(info, episodes)
