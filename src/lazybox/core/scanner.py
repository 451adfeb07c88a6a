"""Filesystem scanner.

Walks a root path depth-first and returns an immutable `FileEntry` tree:
- entries are `lstat`ed, so symlinks are reported and never followed
- children keep `os.scandir` order (no re-sorting)
- a failure on one entry is recorded on that entry and the walk continues;
  only resolving the root to an absolute path can raise
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Optional

import structlog

from lazybox.config import LazyboxSettings, get_lazybox_settings
from lazybox.core import probe
from lazybox.core.git import detect as detect_git
from lazybox.core.ignore_rules import IgnoreRules, build_ignore_rules
from lazybox.core.records import FileEntry, FileKind
from lazybox.observability.tracing import get_tracer


logger = structlog.get_logger(__name__)
tracer = get_tracer(__name__)

ROOT_LOGICAL_PATH = "."


class ScanError(OSError):
    """Raised when the scan root cannot be resolved to an absolute path."""


@dataclass(frozen=True)
class ScanOptions:
    include_hidden: bool = True
    ignore_patterns: tuple[str, ...] = ()
    respect_gitignore: bool = False

    @classmethod
    def from_settings(cls, settings: Optional[LazyboxSettings] = None) -> "ScanOptions":
        settings = settings or get_lazybox_settings()
        return cls(
            include_hidden=settings.SCAN_INCLUDE_HIDDEN,
            ignore_patterns=tuple(settings.SCAN_IGNORE_PATTERNS),
            respect_gitignore=settings.SCAN_RESPECT_GITIGNORE,
        )


def kind_of(mode: int) -> FileKind:
    if stat.S_ISDIR(mode):
        return FileKind.DIRECTORY
    if stat.S_ISLNK(mode):
        return FileKind.SYMLINK
    if stat.S_ISREG(mode):
        return FileKind.FILE
    return FileKind.OTHER


def file_extension(name: str) -> Optional[str]:
    return PurePath(name).suffix.lower() or None


def _join(rel: str, name: str) -> str:
    return name if rel == ROOT_LOGICAL_PATH else f"{rel}/{name}"


def _is_dir_entry(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def stat_fields(st: os.stat_result, *, name: str, rel: str, abs_path: str) -> dict:
    """`FileEntry` keyword arguments shared by every kind of entry."""

    owner, group = probe.owner_group(st)
    return dict(
        name=name,
        path=rel,
        absolute_path=abs_path,
        kind=kind_of(st.st_mode),
        mode=probe.mode_string(st),
        owner=owner,
        group=group,
        mod_time=probe.modification_time(st),
        create_time=probe.creation_time(st),
    )


def _error_stub(name: str, rel: str, abs_path: str, error: str) -> FileEntry:
    """Minimal entry for a path that could not be scanned."""

    kind = FileKind.OTHER
    try:
        kind = kind_of(os.lstat(abs_path).st_mode)
    except (OSError, ValueError):
        pass
    return FileEntry(name=name, path=rel, absolute_path=abs_path, kind=kind, error=error)


class _Walker:
    def __init__(self, rules: IgnoreRules) -> None:
        self.rules = rules
        self.count = 0
        self.errors = 0

    def _record_error(self, rel: str, error: str) -> None:
        self.errors += 1
        logger.warning("scan.entry_error", path=rel, error=error)

    def entry(self, abs_path: str, rel: str, name: str) -> FileEntry:
        """Scan one path. Raises OSError when the path itself cannot be statted."""

        st = os.lstat(abs_path)
        self.count += 1
        common = stat_fields(st, name=name, rel=rel, abs_path=abs_path)
        kind = common["kind"]

        if kind is FileKind.DIRECTORY:
            return self._directory(abs_path, rel, common)

        if kind is FileKind.SYMLINK:
            try:
                target, error = os.readlink(abs_path), None
            except OSError as e:
                target, error = "", f"failed to read symlink target: {e}"
                self._record_error(rel, error)
            return FileEntry(**common, size=st.st_size, symlink_target=target, error=error)

        extension = file_extension(name) if kind is FileKind.FILE else None
        return FileEntry(**common, size=st.st_size, extension=extension)

    def _directory(self, abs_path: str, rel: str, common: dict) -> FileEntry:
        git = detect_git(abs_path)

        listing: list[tuple[str, bool]] = []
        error: Optional[str] = None
        try:
            with os.scandir(abs_path) as it:
                for d in it:
                    listing.append((d.name, _is_dir_entry(d)))
        except OSError as e:
            error = f"failed to read directory {abs_path}: {e}"
            self._record_error(rel, error)

        children: list[FileEntry] = []
        for child_name, child_is_dir in listing:
            child_rel = _join(rel, child_name)
            if self.rules.is_ignored(child_name, child_rel, is_dir=child_is_dir):
                continue
            child_abs = os.path.join(abs_path, child_name)
            try:
                children.append(self.entry(child_abs, child_rel, child_name))
            except (OSError, ValueError) as e:
                self._record_error(child_rel, str(e))
                children.append(_error_stub(child_name, child_rel, child_abs, str(e)))

        return FileEntry(
            **common,
            size=0,
            error=error,
            is_git_repo=git.is_repo,
            git_remotes=dict(git.remotes),
            git_branch=git.branch,
            children=tuple(children),
        )


def scan(path: os.PathLike | str, options: Optional[ScanOptions] = None) -> FileEntry:
    """Scan `path` recursively into a `FileEntry` tree.

    Raises `ScanError` only when `path` cannot be made absolute. A root that
    cannot be statted comes back as an entry carrying `error` and no children.
    """

    options = options or ScanOptions.from_settings()
    try:
        abs_path = os.path.abspath(os.fspath(path))
    except (OSError, ValueError) as e:
        raise ScanError(f"failed to get absolute path for {path}: {e}") from e

    name = os.path.basename(abs_path) or abs_path
    rules = build_ignore_rules(
        Path(abs_path),
        include_hidden=options.include_hidden,
        patterns=list(options.ignore_patterns),
        respect_gitignore=options.respect_gitignore,
    )
    walker = _Walker(rules)

    with tracer.start_as_current_span("scan") as span:
        span.set_attribute("path", abs_path)
        logger.debug("scan.start", path=abs_path)
        try:
            root = walker.entry(abs_path, ROOT_LOGICAL_PATH, name)
        except (OSError, ValueError) as e:
            error = f"failed to stat {abs_path}: {e}"
            walker._record_error(ROOT_LOGICAL_PATH, error)
            root = _error_stub(name, ROOT_LOGICAL_PATH, abs_path, error)
        span.set_attribute("entry_count", walker.count)
        span.set_attribute("error_count", walker.errors)

    logger.debug("scan.done", path=abs_path, entries=walker.count, errors=walker.errors)
    return root
