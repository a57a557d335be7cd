"""
Pytest fixtures for cliptiming tests.

Media probing and rendering are replaced by in-memory doubles:
- FakeProber: returns canned durations per src, records every call
- render_host: MagicMock standing in for the host renderer
"""

import asyncio
from typing import Any
from unittest.mock import MagicMock

import pytest

from cliptiming.config import Settings
from cliptiming.services.edit_session import EditSession


class FakeProber:
    """DurationProber returning canned results.

    A value may be a float, None, an exception instance (raised), or the
    string "hang" (never settles).
    """

    def __init__(self, durations: dict[str, Any] | None = None):
        self.durations = durations or {}
        self.calls: list[str] = []

    async def probe_duration(self, src: str) -> float | None:
        self.calls.append(src)
        result = self.durations.get(src)
        if isinstance(result, Exception):
            raise result
        if result == "hang":
            await asyncio.Event().wait()
        return result


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from the environment."""
    return Settings(_env_file=None, probe_timeout_s=0.05)


@pytest.fixture
def prober() -> FakeProber:
    return FakeProber()


@pytest.fixture
def render_host() -> MagicMock:
    return MagicMock()


@pytest.fixture
def session(prober: FakeProber, render_host: MagicMock, settings: Settings) -> EditSession:
    return EditSession(prober=prober, render_host=render_host, settings=settings)
