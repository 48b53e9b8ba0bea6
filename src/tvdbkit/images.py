"""Series artwork queries."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from .cache import ONE_WEEK
from .json_access import get_decimal, get_integer, get_map, get_string, stream_objects
from .models import Image, SearchResult

if TYPE_CHECKING:  # pragma: no cover
    from .client import TVDBClient


class ImageResolver:
    def __init__(self, client: TVDBClient) -> None:
        self.client = client

    def get_images(self, series: SearchResult, key_type: str) -> list[Image]:
        """Fetch artwork of one key type (``poster``, ``fanart``, ``season``, ...)."""
        path = f"series/{series.id}/images/query?keyType={quote(key_type)}"
        response = self.client.request_json(path, None, ONE_WEEK)

        return [
            Image(
                id=get_integer(record, "id"),
                key_type=key_type,
                sub_key=get_string(record, "subKey"),
                file_name=get_string(record, "fileName"),
                resolution=get_string(record, "resolution"),
                rating=get_decimal(get_map(record, "ratingsInfo"), "average"),
            )
            for record in stream_objects(response, "data")
        ]
