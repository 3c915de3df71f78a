"""
Gateway - shared connection to a serial-over-TCP Modbus bridge

Responsibilities:
- Own the single connection handle per bridge
- Reconnect with bounded retries when the link drops
- Classify transport failures (refused, timeout, ...)
- Expose a read-write lock for serialising meter access
"""

from .rwlock import ReadWriteLock
from .session import GatewaySession
from .transport import ErrorKind, PymodbusTransport, Transport

__all__ = [
    "ErrorKind",
    "GatewaySession",
    "PymodbusTransport",
    "ReadWriteLock",
    "Transport",
]
