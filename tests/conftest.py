import warnings

import pytest
from loguru import logger

from room_publisher.app_config import reset_app_environ_config

warnings.filterwarnings("ignore", category=DeprecationWarning, module="livekit.*")

# Import publisher fixtures so they are available to all tests
from tests.fixtures.publisher_fixtures import *  # noqa: E402, F403


@pytest.fixture(autouse=True)
def isolated_environ(monkeypatch: pytest.MonkeyPatch):
    """Blank out credentials so env.local on a dev machine cannot leak into tests."""
    for key in ("LIVEKIT_URL", "LIVEKIT_TOKEN"):
        monkeypatch.setenv(key, "")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("LOGFIRE_ENABLE", "false")
    reset_app_environ_config()

    yield

    reset_app_environ_config()
    # Sinks added by init_logger() point at streams captured for this test only
    logger.remove()
