"""Git repository detection and remote extraction.

Detection walks upward from a directory looking for a `.git` directory.
Remotes are read from `.git/config` without running `git`; the current
branch is resolved with dulwich. Nothing in this module raises: lookup and
parse failures degrade to "not a repo", `{}` or `None`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog
from dulwich import porcelain


logger = structlog.get_logger(__name__)

_REMOTE_PREFIX = '[remote "'
_REMOTE_SUFFIX = '"]'
_URL_PREFIX = "url = "


@dataclass(frozen=True)
class GitInfo:
    is_repo: bool = False
    remotes: dict[str, str] = field(default_factory=dict)
    branch: Optional[str] = None


def find_git_dir(path: os.PathLike | str) -> Optional[Path]:
    """Return the nearest `.git` directory at or above `path`, if any."""

    try:
        current = Path(os.path.abspath(path))
        if not current.is_dir():
            current = current.parent
        while True:
            candidate = current / ".git"
            if candidate.is_dir():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent
    except (OSError, ValueError) as e:
        logger.debug("git.detect_failed", path=str(path), error=str(e))
        return None


def is_repo(path: os.PathLike | str) -> bool:
    return find_git_dir(path) is not None


def parse_remotes(config_text: str) -> dict[str, str]:
    """Parse `[remote "name"]` sections of a git config into name -> url."""

    remotes: dict[str, str] = {}
    current: Optional[str] = None
    for line in config_text.splitlines():
        s = line.strip()
        if s.startswith(_REMOTE_PREFIX) and s.endswith(_REMOTE_SUFFIX):
            current = s[len(_REMOTE_PREFIX) : -len(_REMOTE_SUFFIX)]
        elif s.startswith("["):
            current = None
        elif current is not None and s.startswith(_URL_PREFIX):
            remotes[current] = s[len(_URL_PREFIX) :].strip()
            current = None
    return remotes


def _remotes_in(git_dir: Path) -> dict[str, str]:
    config = git_dir / "config"
    try:
        text = config.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("git.config_unreadable", path=str(config), error=str(e))
        return {}
    return parse_remotes(text)


def remotes_of(path: os.PathLike | str) -> dict[str, str]:
    git_dir = find_git_dir(path)
    if git_dir is None:
        return {}
    return _remotes_in(git_dir)


def _branch_in(git_dir: Path) -> Optional[str]:
    try:
        branch = porcelain.active_branch(str(git_dir.parent))
    except Exception as e:
        # Detached HEAD, unborn repository layout or unreadable refs.
        logger.debug("git.branch_unresolved", path=str(git_dir), error=str(e))
        return None
    if isinstance(branch, (bytes, bytearray)):
        return branch.decode("utf-8", errors="replace")
    return str(branch) if branch else None


def current_branch(path: os.PathLike | str) -> Optional[str]:
    git_dir = find_git_dir(path)
    if git_dir is None:
        return None
    return _branch_in(git_dir)


def detect(path: os.PathLike | str) -> GitInfo:
    """Repository state for a directory: flag, remotes and current branch."""

    git_dir = find_git_dir(path)
    if git_dir is None:
        return GitInfo()
    return GitInfo(is_repo=True, remotes=_remotes_in(git_dir), branch=_branch_in(git_dir))
