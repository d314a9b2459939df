"""
Command line front end: generate sitemap files and a sitemap index from URL lists.
"""

from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path
from urllib.parse import urlparse, urlunparse

from .config import DEFAULT_INDEX_NAME, MAX_FILE_SIZE, MAX_URLS_COUNT
from .errors import NotificationError, SitemapError
from .loc import ChangeFreq, SitemapLoc
from .ping import DEFAULT_TIMEOUT
from .sitemap_index import SitemapIndex

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def canonical_host(host: str | None) -> str:
    value = (host or "").strip().lower().rstrip(".")
    if value.startswith("www."):
        return value[4:]
    return value


def normalize_hostname(raw: str) -> str:
    value = raw.strip()
    parsed = urlparse(value)
    if not parsed.scheme:
        value = f"https://{value}"
        parsed = urlparse(value)
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"Unsupported URL scheme: {parsed.scheme}")
    if not parsed.netloc:
        raise ValueError("Hostname is missing host")
    return urlunparse((parsed.scheme, parsed.netloc, parsed.path.rstrip("/"), "", "", ""))


def load_url_list(path: str) -> list[str]:
    values = []
    for raw in Path(path).read_text(encoding="utf-8").splitlines():
        value = raw.strip()
        if not value or value.startswith("#"):
            continue
        values.append(value)
    return values


def relative_location(raw: str, base_host: str, base_path: str = "") -> str | None:
    """Reduce ``raw`` to a location relative to the hostname, or ``None`` if it is off-site.

    ``base_path`` is the path part of the hostname; absolute URLs must lie under it
    and have it removed, since the hostname is joined back on when the URL is added.
    """
    parsed = urlparse(raw)
    if not parsed.scheme and not parsed.netloc:
        return raw
    if canonical_host(parsed.hostname) != base_host:
        return None
    path = parsed.path or "/"
    base_path = base_path.rstrip("/")
    if base_path:
        if path != base_path and not path.startswith(base_path + "/"):
            return None
        path = path[len(base_path) :] or "/"
    return urlunparse(("", "", path, "", parsed.query, ""))


def run_generate(args: argparse.Namespace) -> int:
    try:
        hostname = normalize_hostname(args.hostname)
    except ValueError as exc:
        print(f"Error: {exc}")
        return 2

    lastmod: date | None = None
    if args.default_lastmod:
        try:
            lastmod = date.fromisoformat(args.default_lastmod)
        except ValueError:
            print(f"Error: --default-lastmod must be YYYY-MM-DD, got {args.default_lastmod}")
            return 2
    if args.priority is not None and not 0.0 <= args.priority <= 1.0:
        print("Error: --priority must be between 0.0 and 1.0")
        return 2
    if args.max_urls <= 0 or args.max_urls > MAX_URLS_COUNT:
        print(f"Error: --max-urls must be between 1 and {MAX_URLS_COUNT}")
        return 2
    if args.max_file_size <= 0 or args.max_file_size > MAX_FILE_SIZE:
        print(f"Error: --max-file-size must be between 1 and {MAX_FILE_SIZE}")
        return 2

    sources: list[tuple[str, list[str]]] = []
    for urls_file in args.urls_file:
        path = Path(urls_file)
        if not path.exists():
            print(f"Error: urls-file not found: {path}")
            return 2
        sources.append(("" if args.unnamed else path.stem, load_url_list(urls_file)))

    index = SitemapIndex(
        hostname=hostname,
        output_path=str(Path(args.output_dir).resolve()),
        server_uri=args.server_uri,
        name=args.index_name,
        compress=not args.no_compress,
        pretty_print=args.pretty,
        max_file_size=args.max_file_size,
        max_urls=args.max_urls,
    )

    parsed_hostname = urlparse(hostname)
    base_host = canonical_host(parsed_hostname.hostname)
    total = 0
    skipped_out_of_scope = 0
    try:
        for name, raw_urls in sources:
            sitemap = index.new_sitemap(name)
            for raw in raw_urls:
                location = relative_location(raw, base_host, parsed_hostname.path)
                if location is None:
                    skipped_out_of_scope += 1
                    continue
                sitemap.add(
                    SitemapLoc(
                        location=location,
                        last_modified=lastmod,
                        change_frequency=args.changefreq,
                        priority=args.priority,
                    )
                )
                total += 1
        index_filename = index.save()
    except SitemapError as exc:
        print(f"Error: {exc}")
        return 1

    file_count = sum(len(list(sitemap.links())) for sitemap in index.sitemaps)
    print(f"Hostname: {hostname}")
    print(f"Total URLs included: {total}")
    if skipped_out_of_scope:
        print(f"Skipped out-of-scope URLs (outside hostname): {skipped_out_of_scope}")
    print(f"Sitemap files: {file_count}")
    print(f"Sitemap index: {Path(index.output_path) / index_filename}")
    print(f"Index URL: {index.index_url()}")

    if args.ping:
        try:
            for url in index.ping_search_engines(timeout=args.timeout):
                print(f"Pinged: {url}")
        except NotificationError as exc:
            for url, reason in exc.failures:
                print(f"Warning: ping failed for {url}: {reason}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate XML sitemaps and a sitemap index.")
    parser.add_argument("--verbose", action="store_true", help="Log progress to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p_generate = sub.add_parser("generate", help="Generate sitemaps from newline-delimited URL lists")
    p_generate.add_argument("--hostname", required=True, help="Canonical base URL prepended to every location")
    p_generate.add_argument(
        "--urls-file",
        action="append",
        required=True,
        help="Newline-delimited locations; repeat for several sitemaps (named after the file)",
    )
    p_generate.add_argument("--unnamed", action="store_true", help="Name sitemaps sitemap1, sitemap2, ... instead")
    p_generate.add_argument("--output-dir", default="seo-sitemap-output")
    p_generate.add_argument("--server-uri", default="", help="Path between hostname and filename in index URLs")
    p_generate.add_argument("--index-name", default=DEFAULT_INDEX_NAME, help="Index filename without extension")
    p_generate.add_argument("--no-compress", action="store_true", help="Write plain .xml instead of .xml.gz")
    p_generate.add_argument("--pretty", action="store_true", help="Indent the XML output")
    p_generate.add_argument("--max-file-size", type=int, default=MAX_FILE_SIZE, help="Max uncompressed bytes per file")
    p_generate.add_argument("--max-urls", type=int, default=MAX_URLS_COUNT, help="Max URLs per file")
    p_generate.add_argument("--default-lastmod", default="", help="Optional YYYY-MM-DD for lastmod")
    p_generate.add_argument("--changefreq", choices=[item.value for item in ChangeFreq], default=None)
    p_generate.add_argument("--priority", type=float, default=None)
    p_generate.add_argument("--ping", action="store_true", help="Ping search engines with the index URL")
    p_generate.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT)
    p_generate.set_defaults(func=run_generate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format=LOG_FORMAT)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
