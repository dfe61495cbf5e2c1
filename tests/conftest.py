"""Shared test fixtures for the epdcal test suite.

This module provides reusable fixtures for:
- Logger mocking
- Backend payloads and httpx mock transports
- Configuration objects
- Async test utilities
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import httpx
import pytest

from epdcal.calendar_grid import WeekStart
from epdcal.config import CalendarViewConfig

# ============================================================================
# Pytest Configuration
# ============================================================================


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio backend for async tests."""
    return "asyncio"


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing.

    Returns a Mock with spec=logging.Logger to ensure only valid
    logger methods can be called.
    """
    return Mock(spec=logging.Logger)


# ============================================================================
# Backend Payload Fixtures
# ============================================================================


@pytest.fixture
def events_payload() -> dict[str, Any]:
    """A well-formed ``/api/events`` body with three occurrences."""
    return {
        "range_start": "2024-03-11T00:00:00Z",
        "range_end": "2024-04-15T00:00:00Z",
        "display_timezone": "Asia/Seoul",
        "week_start": "monday",
        "occurrences": [
            {
                "source_id": "work",
                "uid": "standup",
                "instance_key": "standup-20240314",
                "summary": "Standup",
                "description": "",
                "location": "Room 1",
                "all_day": False,
                "start": "2024-03-14T09:00:00Z",
                "end": "2024-03-14T10:00:00Z",
            },
            {
                "source_id": "home",
                "uid": "holiday",
                "instance_key": "holiday-20240315",
                "summary": "Holiday",
                "description": "",
                "location": "",
                "all_day": True,
                "start": "2024-03-15T00:00:00Z",
                "end": "2024-03-16T00:00:00Z",
            },
            {
                "source_id": "work",
                "uid": "review",
                "instance_key": "review-20240314",
                "summary": "",
                "description": "",
                "location": "",
                "all_day": False,
                "start": "2024-03-14T13:30:00Z",
                "end": "2024-03-14T14:00:00Z",
            },
        ],
    }


@pytest.fixture
def battery_payload() -> dict[str, Any]:
    return {"percent": 85}


@pytest.fixture
def make_transport():
    """Factory for an ``httpx.MockTransport`` routing the two backend paths.

    Usage:
        transport = make_transport(events=payload, battery_status=500)
    """

    def _create_transport(
        *,
        events: Any = None,
        battery: Any = None,
        events_status: int = 200,
        battery_status: int = 200,
    ) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/events":
                return httpx.Response(events_status, content=json.dumps(events).encode("utf-8"))
            if request.url.path == "/api/battery":
                return httpx.Response(battery_status, content=json.dumps(battery).encode("utf-8"))
            return httpx.Response(404)

        return httpx.MockTransport(handler)

    return _create_transport


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., CalendarViewConfig]:
    """Factory fixture for server configs with custom overrides.

    Usage:
        config = make_config(render_wait_seconds=1.0)
    """

    def _create_config(**overrides: Any) -> CalendarViewConfig:
        defaults: dict[str, Any] = {
            "bind_address": "127.0.0.1",
            "port": 0,
            "api_base_url": "http://backend.test",
            "locale": "en",
            "week_start": WeekStart.MONDAY,
            "display_timezone": "Asia/Seoul",
            "fetch_timeout": None,
            "render_wait_seconds": 5.0,
            "preview_path": tmp_path / "preview.png",
            "allowed_origins": ("*",),
        }
        defaults.update(overrides)
        return CalendarViewConfig(**defaults)

    return _create_config


# ============================================================================
# Async Test Utilities
# ============================================================================


@pytest.fixture
def async_timeout():
    """Provide a reasonable timeout for async tests.

    Returns timeout in seconds. Useful for ensuring tests don't hang.
    """
    return 5.0
