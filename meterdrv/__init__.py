"""
meterdrv - Modbus-RTU meter drivers behind serial-over-TCP bridges

Layers:
- gateway - shared bridge connection, reconnect policy, locking
- drivers - register decoding, value reads, switch/valve control
- common - configuration, exceptions, logging
"""

__version__ = "0.1.0"
