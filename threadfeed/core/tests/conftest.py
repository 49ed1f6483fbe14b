"""Shared fixtures for core tests."""

from collections.abc import Iterator

import pytest

SETTINGS_ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_API_URL",
    "PAGE_SIZE",
    "TIMELINE_PAGE_SIZE",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path: object) -> Iterator[None]:
    """Isolate settings from the developer's environment and any local .env file.

    Also resets the cached settings singleton before and after each test.
    """
    import threadfeed.core.config

    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)  # type: ignore[arg-type]

    threadfeed.core.config._settings = None
    yield
    threadfeed.core.config._settings = None
