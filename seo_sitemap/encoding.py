"""
XML serialization for sitemap and sitemap index documents.

A document is framed as::

    <?xml version="1.0" encoding="UTF-8"?>\\n
    <urlset xmlns="...">RECORD RECORD ...</urlset>\\n

Each record is serialized on its own with ElementTree, so the byte size of a
document can be maintained as a running total while records are appended and
still match what ``write_document`` emits exactly.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import BinaryIO

from .config import SITEMAP_NS
from .errors import SerializationError
from .loc import ChangeFreq, SitemapLoc

XML_HEADER = b'<?xml version="1.0" encoding="UTF-8"?>\n'
URLSET = "urlset"
SITEMAPINDEX = "sitemapindex"
INDENT = "  "

INVALID_XML_CHARS_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


class CountingWriter:
    """Binary sink that only counts what is written to it."""

    def __init__(self) -> None:
        self.count = 0

    def write(self, data: bytes) -> int:
        self.count += len(data)
        return len(data)


def format_lastmod(value: date | datetime) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    raise SerializationError(f"lastmod must be a date or datetime, got {type(value).__name__}")


def format_priority(value: float) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SerializationError(f"priority must be a number, got {value!r}")
    if not 0.0 <= value <= 1.0:
        raise SerializationError(f"priority must be within [0.0, 1.0], got {value}")
    # shortest round-trip digits, never in exponent form
    text = format(Decimal(repr(float(value))), "f")
    if "." not in text:
        text += ".0"
    return text


def format_changefreq(value: ChangeFreq | str) -> str:
    try:
        return ChangeFreq(value).value
    except ValueError as exc:
        raise SerializationError(f"Unknown change frequency: {value!r}") from exc


def check_text(value: str, field: str) -> str:
    if INVALID_XML_CHARS_RE.search(value):
        raise SerializationError(f"{field} contains characters not allowed in XML: {value!r}")
    return value


def encode_record(tag: str, fields: list[tuple[str, str]], pretty_print: bool) -> bytes:
    node = ET.Element(tag)
    for name, text in fields:
        child = ET.SubElement(node, name)
        child.text = check_text(text, name)
    if not pretty_print:
        return ET.tostring(node, encoding="utf-8", xml_declaration=False)
    ET.indent(node, space=INDENT, level=1)
    return ("\n" + INDENT).encode("utf-8") + ET.tostring(node, encoding="utf-8", xml_declaration=False)


def encode_url(loc: SitemapLoc, location: str, pretty_print: bool) -> bytes:
    """Serialize ``loc`` as a ``<url>`` record using ``location`` as its ``<loc>``."""
    if not location:
        raise SerializationError("URL location must not be empty")
    fields = [("loc", location)]
    if loc.last_modified is not None:
        fields.append(("lastmod", format_lastmod(loc.last_modified)))
    if loc.change_frequency is not None:
        fields.append(("changefreq", format_changefreq(loc.change_frequency)))
    if loc.priority is not None:
        fields.append(("priority", format_priority(loc.priority)))
    return encode_record("url", fields, pretty_print)


def encode_sitemap_ref(location: str, last_modified: date | datetime | None, pretty_print: bool) -> bytes:
    fields = [("loc", location)]
    if last_modified is not None:
        fields.append(("lastmod", format_lastmod(last_modified)))
    return encode_record("sitemap", fields, pretty_print)


def open_tag(root: str) -> bytes:
    return f'<{root} xmlns="{SITEMAP_NS}">'.encode("utf-8")


def close_tag(root: str, count: int, pretty_print: bool) -> bytes:
    tail = f"</{root}>\n".encode("utf-8")
    if pretty_print and count:
        return b"\n" + tail
    return tail


def document_size(root: str, body_size: int, count: int, pretty_print: bool) -> int:
    return len(XML_HEADER) + len(open_tag(root)) + body_size + len(close_tag(root, count, pretty_print))


def write_document(stream: BinaryIO | CountingWriter, root: str, records: Iterable[bytes], pretty_print: bool) -> int:
    written = 0
    count = 0
    for chunk in (XML_HEADER, open_tag(root)):
        stream.write(chunk)
        written += len(chunk)
    for record in records:
        stream.write(record)
        written += len(record)
        count += 1
    tail = close_tag(root, count, pretty_print)
    stream.write(tail)
    return written + len(tail)
