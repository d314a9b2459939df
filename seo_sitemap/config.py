"""
Protocol limits and per-run settings for sitemap generation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .errors import SitemapError

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
FILE_EXT = ".xml"
FILE_GZ_EXT = ".xml.gz"
MAX_FILE_SIZE = 52_428_800
MAX_URLS_COUNT = 50_000
DEFAULT_INDEX_NAME = "sitemap_index"
DEFAULT_SITEMAP_NAME = "sitemap"


@dataclass
class SitemapOptions:
    hostname: str = ""
    output_path: str = "."
    compress: bool = True
    pretty_print: bool = False
    max_file_size: int = MAX_FILE_SIZE
    max_urls: int = MAX_URLS_COUNT

    def copy(self) -> SitemapOptions:
        return replace(self)

    def validate(self) -> SitemapOptions:
        if self.max_file_size <= 0:
            raise SitemapError(f"max_file_size must be positive, got {self.max_file_size}")
        if self.max_urls <= 0:
            raise SitemapError(f"max_urls must be positive, got {self.max_urls}")
        return self

    @property
    def file_ext(self) -> str:
        return FILE_GZ_EXT if self.compress else FILE_EXT
