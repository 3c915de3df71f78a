"""Pytest configuration and fixtures for meterdrv tests."""

from __future__ import annotations

import sys
import time
from pathlib import Path

# Add parent directory to Python path so we can import meterdrv
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from meterdrv.common.config import GatewayEndpoint
from meterdrv.gateway.session import GatewaySession
from tests.doubles.fake_transport import FakeBridge


@pytest.fixture(autouse=True)
def sleeps(monkeypatch) -> list[float]:
    """Replace blocking sleeps with a recorder."""
    recorded: list[float] = []
    monkeypatch.setattr(time, "sleep", recorded.append)
    return recorded


@pytest.fixture
def endpoint() -> GatewayEndpoint:
    return GatewayEndpoint("rtuovertcp://127.0.0.1:1502", baud_rate=9600, timeout=5.0)


@pytest.fixture
def bridge() -> FakeBridge:
    return FakeBridge()


@pytest.fixture
def session(bridge, endpoint) -> GatewaySession:
    """Gateway session already connected to the fake bridge."""
    gw = GatewaySession(bridge.factory)
    gw.init(endpoint)
    return gw
