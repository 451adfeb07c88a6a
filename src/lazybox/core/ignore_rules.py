"""Skip rules for the scanner.

Dotfiles are optionally skipped (`.git` is always kept); extra patterns use
gitignore-compatible matching via `pathspec`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pathspec
import structlog


logger = structlog.get_logger(__name__)

ALWAYS_KEPT: frozenset[str] = frozenset({".git"})


@dataclass(frozen=True)
class IgnoreRules:
    include_hidden: bool = True
    spec: Optional[pathspec.PathSpec] = None

    def is_ignored(self, name: str, rel_posix_path: str, *, is_dir: bool = False) -> bool:
        if not self.include_hidden and name.startswith(".") and name not in ALWAYS_KEPT:
            return True
        if self.spec is None:
            return False
        # Directory patterns ("build/") only match with a trailing slash.
        candidate = rel_posix_path + "/" if is_dir else rel_posix_path
        return self.spec.match_file(candidate)


def build_ignore_rules(
    root: Path,
    *,
    include_hidden: bool = True,
    patterns: Optional[list[str]] = None,
    respect_gitignore: bool = False,
) -> IgnoreRules:
    """Build skip rules from the dotfile policy, extra patterns and optional `.gitignore`."""

    lines: list[str] = list(patterns or [])
    if respect_gitignore:
        gitignore = root / ".gitignore"
        if gitignore.is_file():
            try:
                lines.extend(gitignore.read_text(encoding="utf-8", errors="replace").splitlines())
            except OSError as e:
                logger.warning("scan.gitignore_unreadable", path=str(gitignore), error=str(e))

    spec = pathspec.PathSpec.from_lines("gitwildmatch", lines) if lines else None
    return IgnoreRules(include_hidden=include_hidden, spec=spec)
