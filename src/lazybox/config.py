"""lazybox settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field

from lazybox.configuration.base_config import BaseConfig


class LazyboxSettings(BaseConfig):
    """Settings for scanning, text analysis and logging."""

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Log level name used by configure_logging() when none is passed explicitly.",
    )

    SCAN_INCLUDE_HIDDEN: bool = Field(
        default=True,
        description="Include dotfiles while scanning. `.git` is always kept.",
    )

    SCAN_IGNORE_PATTERNS: list[str] = Field(
        default_factory=list,
        description="Extra gitignore-style patterns matched against root-relative paths.",
    )

    SCAN_RESPECT_GITIGNORE: bool = Field(
        default=False,
        description="Apply the scan root's `.gitignore` in addition to SCAN_IGNORE_PATTERNS.",
    )

    TEXT_TOP_KEYWORDS: int = Field(
        default=10,
        description="Number of keywords kept by the text analyzer.",
        ge=0,
    )


@lru_cache()
def get_lazybox_settings() -> LazyboxSettings:
    """Return cached settings instance."""

    return LazyboxSettings()
