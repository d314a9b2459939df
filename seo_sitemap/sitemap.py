"""
A logical sitemap that spans as many physical files as the protocol limits require.

Entries are appended to the tail of a chain of ``Sitemap`` objects. When the
tail would exceed ``max_urls`` entries or ``max_file_size`` bytes of XML, a
continuation is linked behind it and the entry goes there instead. On save,
the head is written as ``<name>.xml`` and continuation N as ``<name>N.xml``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from dataclasses import replace
from datetime import date, datetime
from typing import BinaryIO

from .config import DEFAULT_SITEMAP_NAME, SitemapOptions
from .encoding import URLSET, CountingWriter, document_size, encode_url, write_document
from .errors import SerializationError, SitemapError
from .loc import SitemapLoc, join_url
from .storage import ensure_dir, write_file

logger = logging.getLogger(__name__)


class Sitemap:
    """An ordered, size-bounded set of URLs, split into continuations on overflow.

    ``options`` is copied, so later changes to the object passed in do not
    affect this sitemap. All links of one chain share a single lock, which
    ``add`` and ``save`` hold for the whole traversal.
    """

    def __init__(
        self,
        name: str = "",
        options: SitemapOptions | None = None,
        last_modified: date | datetime | None = None,
    ) -> None:
        self.name = name
        self.options = (options or SitemapOptions()).copy().validate()
        self.last_modified = last_modified
        self.next_sitemap: Sitemap | None = None
        self.sequence = 0
        self._locs: list[SitemapLoc] = []
        self._body_size = 0
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"<Sitemap name={self.name!r} sequence={self.sequence} urls={len(self._locs)}>"

    def __len__(self) -> int:
        return len(self._locs)

    @property
    def hostname(self) -> str:
        return self.options.hostname

    @hostname.setter
    def hostname(self, value: str) -> None:
        for link in self.links():
            link.options.hostname = value

    @property
    def output_path(self) -> str:
        return self.options.output_path

    @output_path.setter
    def output_path(self, value: str) -> None:
        for link in self.links():
            link.options.output_path = value

    @property
    def compress(self) -> bool:
        return self.options.compress

    @compress.setter
    def compress(self, value: bool) -> None:
        for link in self.links():
            link.options.compress = value

    @property
    def pretty_print(self) -> bool:
        return self.options.pretty_print

    @pretty_print.setter
    def pretty_print(self, value: bool) -> None:
        self._reconfigure("pretty_print", value)

    @property
    def max_file_size(self) -> int:
        return self.options.max_file_size

    @max_file_size.setter
    def max_file_size(self, value: int) -> None:
        self._reconfigure("max_file_size", value)

    @property
    def max_urls(self) -> int:
        return self.options.max_urls

    @max_urls.setter
    def max_urls(self, value: int) -> None:
        self._reconfigure("max_urls", value)

    def _reconfigure(self, field: str, value: object) -> None:
        # These settings are baked into the byte totals of accepted entries.
        if self.total_url_count:
            raise SitemapError(f"Cannot change {field} after URLs have been added")
        for link in self.links():
            link.options = replace(link.options, **{field: value}).validate()

    @property
    def locs(self) -> tuple[SitemapLoc, ...]:
        return tuple(self._locs)

    @property
    def url_count(self) -> int:
        """Number of URLs held by this file, excluding continuations."""
        return len(self._locs)

    @property
    def total_url_count(self) -> int:
        return sum(link.url_count for link in self.links())

    @property
    def xml_size(self) -> int:
        """Serialized size in bytes of this file, kept current as URLs are accepted."""
        return document_size(URLSET, self._body_size, len(self._locs), self.options.pretty_print)

    def links(self) -> Iterator[Sitemap]:
        link: Sitemap | None = self
        while link is not None:
            yield link
            link = link.next_sitemap

    def _tail(self) -> Sitemap:
        link = self
        while link.next_sitemap is not None:
            link = link.next_sitemap
        return link

    def _fits(self, record: bytes) -> bool:
        if len(self._locs) >= self.options.max_urls:
            return False
        size = document_size(URLSET, self._body_size + len(record), len(self._locs) + 1, self.options.pretty_print)
        return size < self.options.max_file_size

    def add(self, loc: SitemapLoc) -> None:
        """Append ``loc`` to the chain, starting a continuation when the tail is full.

        The record is serialized with its final, hostname-joined location and
        measured before anything is changed; only once it is accepted is
        ``loc.location`` rewritten in place to that absolute URL.
        """
        with self._lock:
            sitemap = self._tail()
            location = join_url(sitemap.options.hostname, loc.location)
            record = encode_url(loc, location, sitemap.options.pretty_print)
            while not sitemap._fits(record):
                if not sitemap._locs:
                    raise SerializationError(
                        f"URL {location} does not fit in an empty sitemap "
                        f"(max file size {sitemap.options.max_file_size} bytes)"
                    )
                sitemap = sitemap._build_next_sitemap()
            sitemap._locs.append(loc)
            sitemap._body_size += len(record)
            loc.location = location

    def _build_next_sitemap(self) -> Sitemap:
        next_sitemap = Sitemap(name=self.name, options=self.options, last_modified=self.last_modified)
        next_sitemap.sequence = self.sequence + 1
        next_sitemap._lock = self._lock
        self.next_sitemap = next_sitemap
        logger.debug(
            "Sitemap %r is full at %d URLs / %d bytes, continuing in part %d",
            self.name,
            len(self._locs),
            self.xml_size,
            next_sitemap.sequence,
        )
        return next_sitemap

    def _records(self) -> Iterator[bytes]:
        for loc in self._locs:
            yield encode_url(loc, loc.location, self.options.pretty_print)

    def write_to(self, stream: BinaryIO | CountingWriter) -> int:
        """Write the XML of this file (not its continuations) to ``stream``."""
        return write_document(stream, URLSET, self._records(), self.options.pretty_print)

    def count_xml_bytes(self) -> int:
        writer = CountingWriter()
        self.write_to(writer)
        return writer.count

    def filename(self, base_name: str) -> str:
        if self.sequence > 0:
            base_name = f"{base_name}{self.sequence}"
        return base_name + self.options.file_ext

    def save(self, default_name: str = DEFAULT_SITEMAP_NAME) -> list[str]:
        """Write every file of the chain; returns their filenames head first.

        Continuation files take their base name from this sitemap, so renaming
        the head after a split renames the whole chain.
        """
        base_name = self.name or default_name
        filenames: list[str] = []
        with self._lock:
            for link in self.links():
                out_dir = ensure_dir(link.options.output_path)
                filename = link.filename(base_name)
                write_file(out_dir / filename, link.write_to, link.options.compress)
                filenames.append(filename)
        return filenames
