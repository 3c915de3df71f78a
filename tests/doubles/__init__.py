"""Test doubles."""

from .fake_transport import FakeBridge, FakeTransport, dds4921_switch

__all__ = ["FakeBridge", "FakeTransport", "dds4921_switch"]
