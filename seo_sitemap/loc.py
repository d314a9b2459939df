"""
URL records placed in a sitemap and in a sitemap index.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class ChangeFreq(str, Enum):
    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"


@dataclass
class SitemapLoc:
    """One page to publish.

    ``location`` is relative to the sitemap hostname until the entry is
    accepted by ``Sitemap.add``, which rewrites it in place to the absolute URL.
    """

    location: str
    last_modified: date | datetime | None = None
    change_frequency: ChangeFreq | str | None = None
    priority: float | None = None


@dataclass
class SitemapIndexLoc:
    location: str
    last_modified: date | datetime | None = None


def join_url(base: str, *parts: str) -> str:
    url = base
    for part in parts:
        if not part:
            continue
        url = f"{url.rstrip('/')}/{part.lstrip('/')}"
    return url
