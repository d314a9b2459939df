"""
Best-effort notification of search engines about a freshly written sitemap index.
"""

from __future__ import annotations

import concurrent.futures
import logging
from urllib.parse import quote

import requests

from .errors import NotificationError

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; SeoSitemap/1.0; +https://www.sitemaps.org/protocol.html)",
    "Accept": "*/*",
}
SEARCH_ENGINES = (
    "http://www.google.com/webmasters/tools/ping?sitemap=%s",
    "http://www.bing.com/webmaster/ping.aspx?sitemap=%s",
)
DEFAULT_TIMEOUT = 60


def ping_url(template: str, index_url: str) -> str:
    return template % quote(index_url, safe="")


def ping_one(url: str, timeout: int) -> str | None:
    """Return ``None`` on success, otherwise the reason the ping failed."""
    try:
        response = requests.get(url, headers=HEADERS, timeout=timeout, allow_redirects=True)
    except requests.exceptions.RequestException as exc:
        return str(exc)
    try:
        if not 200 <= response.status_code < 300:
            return f"HTTP {response.status_code}"
        return None
    finally:
        response.close()


def ping_search_engines(
    index_url: str,
    engines: tuple[str, ...] | list[str] = SEARCH_ENGINES,
    timeout: int = DEFAULT_TIMEOUT,
) -> list[str]:
    # Failures are keyed by template so they are reported in configured order.
    reasons: dict[str, str] = {}
    urls: dict[str, str] = {}
    for template in engines:
        try:
            urls[template] = ping_url(template, index_url)
        except (TypeError, ValueError):
            reasons[template] = "ping URL template must contain exactly one %s placeholder"
            logger.warning("Ping template %r is invalid", template)
    if urls:
        with concurrent.futures.ThreadPoolExecutor(max_workers=len(urls)) as pool:
            futures = {pool.submit(ping_one, url, timeout): template for template, url in urls.items()}
            for fut in concurrent.futures.as_completed(futures):
                template = futures[fut]
                reason = fut.result()
                if reason is None:
                    logger.info("Pinged %s", urls[template])
                else:
                    logger.warning("Ping to %s failed: %s", urls[template], reason)
                    reasons[template] = reason
    if reasons:
        raise NotificationError(
            [(urls.get(template, template), reasons[template]) for template in engines if template in reasons]
        )
    return list(urls.values())
