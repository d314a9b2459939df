"""
Filesystem output for sitemap documents.
"""

from __future__ import annotations

import gzip
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from .errors import OutputError

logger = logging.getLogger(__name__)


def ensure_dir(path: str | Path) -> Path:
    out_dir = Path(path)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputError(f"Unable to create output directory {out_dir}: {exc}") from exc
    return out_dir


def write_file(path: str | Path, write: Callable[[BinaryIO], int], compress: bool) -> int:
    """Write a document to ``path`` through a temporary sibling file.

    ``write`` receives a binary stream and returns the number of uncompressed
    bytes it wrote. The target is only replaced once the whole document has
    been written, so a failure leaves any earlier file at ``path`` intact.
    """
    target = Path(path)
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    except OSError as exc:
        raise OutputError(f"Unable to write {target}: {exc}") from exc
    try:
        with os.fdopen(fd, "wb") as raw:
            if compress:
                # mtime=0 and an empty filename keep compressed output reproducible
                with gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as stream:
                    written = write(stream)
            else:
                written = write(raw)
        # mkstemp creates 0600 files; sitemaps are served publicly
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, target)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise OutputError(f"Unable to write {target}: {exc}") from exc
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("Wrote %s (%d bytes uncompressed)", target, written)
    return written
