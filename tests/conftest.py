"""Shared pytest fixtures for command line tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def reset_settings_cache(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Reset the global settings cache and isolate the environment for each test."""
    import threadfeed.core.config

    for name in (
        "GITHUB_TOKEN",
        "GITHUB_API_URL",
        "PAGE_SIZE",
        "TIMELINE_PAGE_SIZE",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

    threadfeed.core.config._settings = None
    yield
    threadfeed.core.config._settings = None
