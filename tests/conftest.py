"""
Shared test fixtures
"""

import pytest

from tubescout.app.config import Config, reset_config

_ENV_VARS = (
    "APP_ENV",
    "PORT",
    "API_PORT",
    "API_HOST",
    "YOUTUBE_API_KEY",
    "SEARCH_COMMENT_TIMEOUT_MS",
    "LOG_FILE_PATH",
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate every test from the host environment and the config singleton"""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    """Fresh configuration built from the (cleaned) environment"""
    return Config()
