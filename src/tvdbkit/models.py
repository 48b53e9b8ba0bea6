"""Pydantic models for TheTVDB series, episodes and images."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from enum import Enum
from typing import NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .errors import InvalidArgumentError

DATABASE_NAME = "TheTVDB"


def distinct_names(*groups: Iterable[object]) -> tuple[str, ...]:
    """Merge name groups, dropping blanks and duplicates while keeping first-seen order."""
    merged: dict[str, None] = {}
    for group in groups:
        for item in group or ():
            if item is None:
                continue
            name = str(item).strip()
            if name:
                merged.setdefault(name, None)
    return tuple(merged)


class SortOrder(str, Enum):
    """Episode numbering regime requested by the caller."""

    AIRED = "aired"
    DVD = "dvd"
    ABSOLUTE = "absolute"

    @classmethod
    def parse(cls, name: str) -> SortOrder:
        normalized = (name or "").strip().lower()
        if normalized in ("airdate", "airedorder", "default"):
            return cls.AIRED
        for order in cls:
            if order.value == normalized or order.name.lower() == normalized:
                return order
        raise InvalidArgumentError(f"Unknown sort order: {name!r}")


class SearchResult(BaseModel):
    """A series candidate returned by a search or lookup. Identity is the id."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: Optional[str] = None
    alias_names: tuple[str, ...] = ()

    @field_validator("alias_names", mode="before")
    @classmethod
    def _dedupe_aliases(cls, value: object) -> tuple[str, ...]:
        if value is None:
            return ()
        return distinct_names(value)  # type: ignore[arg-type]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SearchResult):
            return self.id == other.id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.name or str(self.id)


class SeriesInfo(BaseModel):
    """Series-level metadata for one series, locale and sort order."""

    model_config = ConfigDict(frozen=True)

    id: int
    database: str = DATABASE_NAME
    locale: Optional[str] = None
    order: Optional[SortOrder] = None
    name: Optional[str] = None
    alias_names: tuple[str, ...] = ()
    certification: Optional[str] = None
    network: Optional[str] = None
    status: Optional[str] = None
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    runtime: Optional[int] = None
    genres: tuple[str, ...] = ()
    start_date: Optional[date] = None

    @field_validator("alias_names", mode="before")
    @classmethod
    def _dedupe_aliases(cls, value: object) -> tuple[str, ...]:
        if value is None:
            return ()
        return distinct_names(value)  # type: ignore[arg-type]

    def snapshot(self) -> SeriesInfo:
        """Return an equal snapshot with its own identity."""
        return self.model_copy(deep=True)


class Episode(BaseModel):
    """A single episode. Specials carry ``special`` instead of season/episode."""

    model_config = ConfigDict(frozen=True)

    series_name: Optional[str] = None
    season: Optional[int] = None
    episode: Optional[int] = None
    title: Optional[str] = None
    absolute: Optional[int] = None
    special: Optional[int] = None
    airdate: Optional[date] = None
    series_info: Optional[SeriesInfo] = None

    @model_validator(mode="after")
    def _check_numbering(self) -> Episode:
        if self.special is not None and (self.season is not None or self.episode is not None):
            raise ValueError("special episodes cannot carry season or episode numbers")
        return self

    @property
    def is_special(self) -> bool:
        return self.special is not None

    def __str__(self) -> str:
        if self.is_special:
            numbering = f"Special {self.special}"
        elif self.season is not None:
            numbering = f"{self.season}x{self.episode:02d}" if self.episode is not None else f"Season {self.season}"
        else:
            numbering = str(self.episode) if self.episode is not None else "?"
        return f"{self.series_name} - {numbering} - {self.title}"


def episode_sort_key(episode: Episode) -> tuple[bool, int, bool, int]:
    """Order by season, then episode number, unknown numbers last.

    Used with the stable ``sorted``/``list.sort`` so ties keep their input order.
    """
    return (
        episode.season is None,
        episode.season if episode.season is not None else 0,
        episode.episode is None,
        episode.episode if episode.episode is not None else 0,
    )


class Image(BaseModel):
    """Artwork record from the image query endpoint."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    key_type: str
    sub_key: Optional[str] = None
    file_name: Optional[str] = None
    resolution: Optional[str] = None
    rating: Optional[float] = None


class SeriesData(NamedTuple):
    series_info: SeriesInfo
    episodes: list[Episode]
