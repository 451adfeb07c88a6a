"""Single-file reader: filesystem metadata plus text analysis."""

from __future__ import annotations

import dataclasses
import mimetypes
import os
from pathlib import Path
from typing import Optional

import structlog

from lazybox.core.records import FileEntry, FileKind
from lazybox.core.scanner import ScanError, file_extension, stat_fields
from lazybox.extract.text import analyze_text


logger = structlog.get_logger(__name__)

MAX_CONTENT_LENGTH = 1024
TRUNCATION_MARKER = "... (truncated)"


def decode_content(data: bytes) -> tuple[str, Optional[str]]:
    """Decode file bytes; returns `(text, encoding)` with `encoding=None` for binary data."""

    if b"\x00" in data:
        return data.decode("latin-1"), None
    try:
        return data.decode("utf-8"), "utf-8"
    except UnicodeDecodeError:
        return data.decode("latin-1"), "latin-1"


def content_fields(text: str) -> dict:
    """`content` for short text, `content_summary` (capped and marked) for longer text."""

    if not text:
        return {}
    if len(text) > MAX_CONTENT_LENGTH:
        return {"content_summary": text[:MAX_CONTENT_LENGTH] + TRUNCATION_MARKER}
    return {"content": text}


def read_file(path: os.PathLike | str, *, top_keywords: Optional[int] = None) -> FileEntry:
    """Read one file into a `FileEntry` carrying `text_analysis`.

    Stat and read failures are recorded in `error`; only an unresolvable path raises.
    """

    try:
        abs_path = os.path.abspath(os.fspath(path))
    except (OSError, ValueError) as e:
        raise ScanError(f"failed to get absolute path for {path}: {e}") from e

    name = os.path.basename(abs_path) or abs_path
    rel = Path(path).as_posix()
    try:
        st = os.lstat(abs_path)
    except (OSError, ValueError) as e:
        logger.warning("file.stat_failed", path=abs_path, error=str(e))
        return FileEntry(name=name, path=rel, absolute_path=abs_path, error=f"failed to stat {abs_path}: {e}")

    common = stat_fields(st, name=name, rel=rel, abs_path=abs_path)
    if common["kind"] is not FileKind.FILE:
        return FileEntry(**common, size=0 if common["kind"] is FileKind.DIRECTORY else st.st_size)

    entry = FileEntry(**common, size=st.st_size, extension=file_extension(name))
    try:
        data = Path(abs_path).read_bytes()
    except OSError as e:
        logger.warning("file.read_failed", path=abs_path, error=str(e))
        return dataclasses.replace(entry, error=f"failed to read {abs_path}: {e}")

    text, encoding = decode_content(data)
    analysis = analyze_text(text, top_keywords=top_keywords)
    mime_type, _ = mimetypes.guess_type(name)
    analysis = dataclasses.replace(analysis, encoding=encoding, mime_type=mime_type)
    # Binary files carry no content.
    extra = content_fields(text) if encoding is not None else {}
    return dataclasses.replace(entry, text_analysis=analysis, **extra)
