"""
Custom Exception Classes for meterdrv

Hierarchical exception structure shared by the gateway session,
the register codec and the meter drivers.
"""


class MeterDrvError(Exception):
    """Base exception for all meterdrv errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigurationError(MeterDrvError):
    """Bad item id, register kind, meter model, slave address or config file"""

    def __init__(self, message: str):
        super().__init__(f"Config Error: {message}", recoverable=False)


class DeviceError(MeterDrvError):
    """Errors tied to a specific meter"""

    def __init__(
        self,
        message: str,
        device_name: str | None = None,
        slave_id: int | None = None,
        recoverable: bool = True,
    ):
        self.device_name = device_name
        self.slave_id = slave_id
        super().__init__(f"Device Error: {message}", recoverable)


class CommunicationError(MeterDrvError):
    """Open/close/transport failure, including retry exhaustion"""

    def __init__(
        self,
        message: str,
        host: str | None = None,
        port: int | None = None,
    ):
        self.host = host
        self.port = port
        super().__init__(message, recoverable=True)


class TransportError(CommunicationError):
    """Failure reported by a transport client, classified by kind"""

    def __init__(
        self,
        message: str,
        kind,
        host: str | None = None,
        port: int | None = None,
    ):
        self.kind = kind
        super().__init__(f"Transport Error [{kind.value}]: {message}", host, port)


class VerificationError(DeviceError):
    """Actuator write was accepted but the status read back disagrees"""

    def __init__(
        self,
        turn: int,
        expected_open: bool,
        actual_open: bool,
        device_name: str | None = None,
        slave_id: int | None = None,
    ):
        self.turn = turn
        self.expected_open = expected_open
        self.actual_open = actual_open
        message = (
            f"Actuator {turn} status mismatch: "
            f"expected {'open' if expected_open else 'closed'}, "
            f"got {'open' if actual_open else 'closed'}"
        )
        super().__init__(message, device_name, slave_id, recoverable=False)


class DecodeError(MeterDrvError):
    """Raw register contents that fit none of the known encodings"""

    def __init__(self, message: str, raw_value: int | None = None):
        self.raw_value = raw_value
        super().__init__(f"Decode Error: {message}", recoverable=False)
