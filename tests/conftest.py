"""Shared fixtures for Quality Lock tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from quality_lock.analytics import AnalyticsEmitter
from quality_lock.config import Settings

from samples import SOCIAL_FIXED


@pytest.fixture
def settings():
    """Deterministic settings independent of the environment."""
    return Settings(
        similarity_floor=0.70,
        max_attempts=2,
        generator_timeout_seconds=1.0,
        default_language="en",
    )


@pytest.fixture
def generator():
    """External text generator stub; set generate.return_value / side_effect."""
    mock = MagicMock()
    mock.generate = AsyncMock(return_value=SOCIAL_FIXED)
    return mock


@pytest.fixture
def recorded_events():
    return []


@pytest.fixture
def analytics(recorded_events):
    """Emitter with a single channel that records (event, payload) pairs."""

    async def record(event, payload):
        recorded_events.append((event, payload))

    return AnalyticsEmitter(channels=[record])
