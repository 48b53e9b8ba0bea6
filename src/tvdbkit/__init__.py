"""TheTVDB client package.

The package is organized into focused modules:

- **client**: authenticated, cached JSON requests (``TVDBClient``)
- **auth**: single-flight bearer token acquisition
- **cache**: TTL response cache with conditional refresh
- **search**: name, IMDb and id lookups
- **series**: series metadata, episode pagination and renumbering
- **images**: artwork queries
- **json_access**: null-tolerant field extraction
- **provider**: ``TheTVDBProvider``, one object wiring all of the above

Most callers only need ``TheTVDBProvider``.
"""

from .errors import AuthError, DecodeError, InvalidArgumentError, NotFoundError, TransportError, TVDBError
from .models import Episode, Image, SearchResult, SeriesData, SeriesInfo, SortOrder
from .provider import TheTVDBProvider
from .version import __version__

__all__ = [
    "__version__",
    "AuthError",
    "DecodeError",
    "Episode",
    "Image",
    "InvalidArgumentError",
    "NotFoundError",
    "SearchResult",
    "SeriesData",
    "SeriesInfo",
    "SortOrder",
    "TheTVDBProvider",
    "TransportError",
    "TVDBError",
]
