"""Exceptions raised while building, writing and announcing sitemaps."""

from __future__ import annotations


class SitemapError(Exception):
    pass


class SerializationError(SitemapError, ValueError):
    """A record or document could not be encoded as sitemap XML."""


class OutputError(SitemapError, OSError):
    """The output directory or a sitemap file could not be written."""


class NotificationError(SitemapError):
    """One or more search engine pings failed.

    Advisory only: files written before the ping are left untouched.
    """

    def __init__(self, failures: list[tuple[str, str]]) -> None:
        self.failures = failures
        detail = "; ".join(f"{url}: {reason}" for url, reason in failures)
        super().__init__(f"{len(failures)} search engine ping(s) failed: {detail}")
