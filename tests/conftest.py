"""
Pytest configuration for lazybox tests.
"""

import pytest

from lazybox.config import get_lazybox_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so environment changes made by a test are picked up."""
    get_lazybox_settings.cache_clear()
    yield
    get_lazybox_settings.cache_clear()
