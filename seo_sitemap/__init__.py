"""Generate sitemaps.org sitemaps that split across files at the protocol limits."""

from .config import FILE_EXT, FILE_GZ_EXT, MAX_FILE_SIZE, MAX_URLS_COUNT, SitemapOptions
from .errors import NotificationError, OutputError, SerializationError, SitemapError
from .loc import ChangeFreq, SitemapIndexLoc, SitemapLoc, join_url
from .sitemap import Sitemap
from .sitemap_index import SitemapIndex

__version__ = "1.0.0"

__all__ = [
    "FILE_EXT",
    "FILE_GZ_EXT",
    "MAX_FILE_SIZE",
    "MAX_URLS_COUNT",
    "ChangeFreq",
    "NotificationError",
    "OutputError",
    "SerializationError",
    "Sitemap",
    "SitemapError",
    "SitemapIndex",
    "SitemapIndexLoc",
    "SitemapLoc",
    "SitemapOptions",
    "join_url",
]
