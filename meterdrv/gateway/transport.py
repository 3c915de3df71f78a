"""
Modbus Transport

Synchronous wrapper around pymodbus for RTU-over-TCP serial bridges.

The gateway session only talks to the Transport protocol below; every
failure surfaces as a TransportError carrying an ErrorKind so callers
never inspect socket errnos themselves. The target slave id is passed
on every exchange instead of being stored on the connection.
"""

import socket
from enum import Enum
from typing import Callable, Protocol

from pymodbus import FramerType
from pymodbus.client import ModbusTcpClient
from pymodbus.exceptions import ConnectionException, ModbusException, ModbusIOException

from ..common.config import FramerKind, GatewayEndpoint, RegisterKind
from ..common.exceptions import ConfigurationError, TransportError
from ..common.logging_setup import get_component_logger

logger = get_component_logger("gateway.transport")


class ErrorKind(str, Enum):
    """Classification of transport failures"""
    REFUSED = "refused"          # bridge actively rejected the TCP connection
    TIMEOUT = "timeout"          # no answer within the configured timeout
    UNREACHABLE = "unreachable"  # any other failure to open
    CLOSED = "closed"            # exchange attempted on a dropped connection
    PROTOCOL = "protocol"        # meter answered with a Modbus exception


class Transport(Protocol):
    """Capability the gateway session needs from a Modbus client"""

    def open(self) -> None: ...

    def close(self) -> None: ...

    def read_registers(
        self, slave_id: int, address: int, count: int, kind: RegisterKind
    ) -> list[int]: ...

    def read_coil(self, slave_id: int, address: int) -> bool: ...

    def write_registers(self, slave_id: int, address: int, values: list[int]) -> None: ...

    def write_coil(self, slave_id: int, address: int, value: bool) -> None: ...


TransportFactory = Callable[[GatewayEndpoint], Transport]


class PymodbusTransport:
    """
    pymodbus-backed transport.

    ``rtuovertcp://`` endpoints use RTU framing over the TCP socket;
    ``tcp://`` endpoints use regular Modbus TCP framing. Retries are
    disabled in pymodbus; the session owns retry policy.
    """

    CLASSIFY_TIMEOUT_S = 1.0

    def __init__(self, endpoint: GatewayEndpoint):
        self.endpoint = endpoint
        framer = FramerType.RTU if endpoint.framer == FramerKind.RTU_OVER_TCP else FramerType.SOCKET
        self._client = ModbusTcpClient(
            host=endpoint.host,
            port=endpoint.port,
            framer=framer,
            timeout=endpoint.timeout,
            retries=0,
        )

    def open(self) -> None:
        """Establish connection to the bridge"""
        if self._client.connect():
            logger.debug(f"Connected to bridge at {self.endpoint.address}")
            return

        kind = self._classify_connect_failure()
        raise TransportError(
            f"Failed to connect to {self.endpoint.address}",
            kind,
            host=self.endpoint.host,
            port=self.endpoint.port,
        )

    def close(self) -> None:
        """Close connection"""
        try:
            self._client.close()
        except OSError as e:
            raise TransportError(
                f"Error closing {self.endpoint.address}: {e}",
                ErrorKind.CLOSED,
                host=self.endpoint.host,
                port=self.endpoint.port,
            )

    def read_registers(
        self,
        slave_id: int,
        address: int,
        count: int,
        kind: RegisterKind,
    ) -> list[int]:
        """
        Read consecutive registers of the given kind.

        Coils are returned as 0/1 integers so callers can treat every
        address space as a list of words.
        """
        if kind == RegisterKind.HOLDING:
            response = self._call(
                self._client.read_holding_registers,
                address=address, count=count, device_id=slave_id,
            )
            return list(response.registers[:count])
        elif kind == RegisterKind.INPUT:
            response = self._call(
                self._client.read_input_registers,
                address=address, count=count, device_id=slave_id,
            )
            return list(response.registers[:count])
        elif kind == RegisterKind.COIL:
            response = self._call(
                self._client.read_coils,
                address=address, count=count, device_id=slave_id,
            )
            return [int(bit) for bit in response.bits[:count]]
        raise ConfigurationError(f"Undefined register kind {kind!r}")

    def read_coil(self, slave_id: int, address: int) -> bool:
        response = self._call(
            self._client.read_coils,
            address=address, count=1, device_id=slave_id,
        )
        return bool(response.bits[0])

    def write_registers(self, slave_id: int, address: int, values: list[int]) -> None:
        self._call(
            self._client.write_registers,
            address=address, values=values, device_id=slave_id,
        )

    def write_coil(self, slave_id: int, address: int, value: bool) -> None:
        self._call(
            self._client.write_coil,
            address=address, value=value, device_id=slave_id,
        )

    def _call(self, method, **kwargs):
        """Run one pymodbus request and map its failures onto ErrorKind"""
        try:
            response = method(**kwargs)
        except ConnectionException as e:
            raise self._error(f"Connection lost: {e}", ErrorKind.CLOSED)
        except ModbusIOException as e:
            raise self._error(f"No response: {e}", ErrorKind.TIMEOUT)
        except ModbusException as e:
            raise self._error(f"Modbus exception: {e}", ErrorKind.PROTOCOL)

        if response.isError():
            raise self._error(f"Modbus error: {response}", ErrorKind.PROTOCOL)
        return response

    def _error(self, message: str, kind: ErrorKind) -> TransportError:
        return TransportError(
            message,
            kind,
            host=self.endpoint.host,
            port=self.endpoint.port,
        )

    def _classify_connect_failure(self) -> ErrorKind:
        """
        Connect once with a bare socket to learn why connect failed.

        pymodbus reports connection failures as a plain False, so the
        cause is recovered here rather than from the client. The socket
        waits at most CLASSIFY_TIMEOUT_S; an unreachable host has already
        cost one full client timeout by now.
        """
        try:
            sock = socket.create_connection(
                (self.endpoint.host, self.endpoint.port),
                timeout=min(self.endpoint.timeout, self.CLASSIFY_TIMEOUT_S),
            )
        except ConnectionRefusedError:
            return ErrorKind.REFUSED
        except (socket.timeout, TimeoutError):
            return ErrorKind.TIMEOUT
        except OSError:
            return ErrorKind.UNREACHABLE
        sock.close()
        return ErrorKind.UNREACHABLE
