"""
Sitemap index: owns several sitemap chains and writes the index that lists every file.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterator
from datetime import UTC, date, datetime

from .config import DEFAULT_INDEX_NAME, MAX_FILE_SIZE, MAX_URLS_COUNT, SitemapOptions
from .encoding import SITEMAPINDEX, document_size, encode_sitemap_ref, write_document
from .errors import SitemapError
from .loc import SitemapIndexLoc, join_url
from .ping import DEFAULT_TIMEOUT, SEARCH_ENGINES, ping_search_engines
from .sitemap import Sitemap
from .storage import ensure_dir, write_file

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class SitemapIndex:
    """Creates named sitemaps, saves them all and writes the index referencing them.

    Settings given here are defaults: ``new_sitemap`` copies them into each
    sitemap it creates, and changing them afterwards does not reach sitemaps
    that already exist. ``compress`` is the exception and applies to every
    registered sitemap, since a run is written either compressed or not.
    """

    def __init__(
        self,
        hostname: str = "",
        output_path: str = ".",
        server_uri: str = "",
        name: str = DEFAULT_INDEX_NAME,
        compress: bool = True,
        pretty_print: bool = False,
        max_file_size: int = MAX_FILE_SIZE,
        max_urls: int = MAX_URLS_COUNT,
        clock: Callable[[], date | datetime] | None = None,
        search_engines: tuple[str, ...] | list[str] | None = None,
    ) -> None:
        self.options = SitemapOptions(
            hostname=hostname,
            output_path=output_path,
            compress=compress,
            pretty_print=pretty_print,
            max_file_size=max_file_size,
            max_urls=max_urls,
        ).validate()
        self.server_uri = server_uri
        self.name = name
        self.clock = clock or utc_now
        self.search_engines = SEARCH_ENGINES if search_engines is None else tuple(search_engines)
        self.sitemaps: list[Sitemap] = []
        self.filename: str | None = None

    @property
    def hostname(self) -> str:
        return self.options.hostname

    @hostname.setter
    def hostname(self, value: str) -> None:
        self.options.hostname = value

    @property
    def output_path(self) -> str:
        return self.options.output_path

    @output_path.setter
    def output_path(self, value: str) -> None:
        self.options.output_path = value

    @property
    def pretty_print(self) -> bool:
        return self.options.pretty_print

    @pretty_print.setter
    def pretty_print(self, value: bool) -> None:
        self.options.pretty_print = value

    @property
    def compress(self) -> bool:
        return self.options.compress

    @compress.setter
    def compress(self, value: bool) -> None:
        self.options.compress = value
        for sitemap in self.sitemaps:
            sitemap.compress = value

    def new_sitemap(self, name: str = "") -> Sitemap:
        sitemap = Sitemap(name=name, options=self.options, last_modified=self.clock())
        self.sitemaps.append(sitemap)
        return sitemap

    def resolved_names(self) -> list[str]:
        """Base filenames of the registered sitemaps, numbering unnamed ones by creation order."""
        return [sitemap.name or f"sitemap{position}" for position, sitemap in enumerate(self.sitemaps, start=1)]

    def _index_locs(self, saved: list[tuple[Sitemap, list[str]]]) -> Iterator[SitemapIndexLoc]:
        for sitemap, filenames in saved:
            for filename in filenames:
                # Continuations are listed with their head's lastmod.
                yield SitemapIndexLoc(
                    location=join_url(self.options.hostname, self.server_uri, filename),
                    last_modified=sitemap.last_modified,
                )

    def save(self) -> str:
        """Save every sitemap chain, then the index; returns the index filename."""
        names = self.resolved_names()
        for name, count in Counter(names).items():
            if count > 1:
                logger.warning("%d sitemaps share the name %r; their files overwrite each other", count, name)

        saved: list[tuple[Sitemap, list[str]]] = []
        for sitemap, name in zip(self.sitemaps, names):
            saved.append((sitemap, sitemap.save(default_name=name)))

        index_locs = list(self._index_locs(saved))
        if len(index_locs) > self.options.max_urls:
            logger.warning(
                "Sitemap index lists %d sitemaps, above the protocol limit of %d",
                len(index_locs),
                self.options.max_urls,
            )

        pretty_print = self.options.pretty_print
        records = [encode_sitemap_ref(item.location, item.last_modified, pretty_print) for item in index_locs]
        size = document_size(SITEMAPINDEX, sum(len(record) for record in records), len(records), pretty_print)
        if size >= self.options.max_file_size:
            logger.warning("Sitemap index is %d bytes, above the limit of %d", size, self.options.max_file_size)
        out_dir = ensure_dir(self.options.output_path)
        filename = (self.name or DEFAULT_INDEX_NAME) + self.options.file_ext
        write_file(
            out_dir / filename,
            lambda stream: write_document(stream, SITEMAPINDEX, records, pretty_print),
            self.options.compress,
        )
        logger.info("Saved sitemap index %s listing %d sitemap files", filename, len(records))
        self.filename = filename
        return filename

    def index_url(self) -> str:
        if self.filename is None:
            raise SitemapError("Sitemap index has not been saved yet")
        return join_url(self.options.hostname, self.server_uri, self.filename)

    def ping_search_engines(self, timeout: int = DEFAULT_TIMEOUT) -> list[str]:
        return ping_search_engines(self.index_url(), engines=self.search_engines, timeout=timeout)
