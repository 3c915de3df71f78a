"""Fake bridge and transport for testing without a serial gateway.

FakeBridge holds the meter-side state (registers, coils, scripted
failures) and hands out FakeTransport handles through ``factory``,
so state survives the handle being replaced by GatewaySession.init().

Example:
    >>> bridge = FakeBridge()
    >>> bridge.set_registers(2, 0x0000, [2301])
    >>> session = GatewaySession(bridge.factory)
"""

from typing import Callable

from meterdrv.common.config import GatewayEndpoint, RegisterKind
from meterdrv.common.exceptions import TransportError
from meterdrv.gateway.transport import ErrorKind


class FakeBridge:
    """Simulated serial bridge with every meter behind it."""

    def __init__(self):
        self.registers: dict[tuple[int, RegisterKind, int], int] = {}
        self.coils: dict[tuple[int, int], bool] = {}
        self.transports: list["FakeTransport"] = []
        self.calls: list[tuple] = []

        self.open_attempts = 0
        self.close_calls = 0

        # Scripted failures, consumed one per call
        self.fail_opens = 0
        self.open_error_kind = ErrorKind.UNREACHABLE
        self.fail_exchanges = 0
        self.fail_reads = 0
        self.fail_writes = 0
        self.fail_closes = False

        # Called after every successful write: (bridge, slave, kind, address, value)
        self.on_write: Callable | None = None

    def factory(self, endpoint: GatewayEndpoint) -> "FakeTransport":
        transport = FakeTransport(self, endpoint)
        self.transports.append(transport)
        return transport

    def set_registers(
        self,
        slave_id: int,
        address: int,
        words: list[int],
        kind: RegisterKind = RegisterKind.HOLDING,
    ) -> None:
        for offset, word in enumerate(words):
            self.registers[(slave_id, kind, address + offset)] = word

    def set_coil(self, slave_id: int, address: int, value: bool) -> None:
        self.coils[(slave_id, address)] = value

    def exchanges(self, name: str | None = None) -> list[tuple]:
        return [c for c in self.calls if name is None or c[0] == name]


class FakeTransport:
    """One connection handle to a FakeBridge."""

    def __init__(self, bridge: FakeBridge, endpoint: GatewayEndpoint):
        self.bridge = bridge
        self.endpoint = endpoint
        self.is_open = False
        self.open_calls = 0

    def open(self) -> None:
        self.bridge.open_attempts += 1
        self.open_calls += 1
        if self.bridge.fail_opens > 0:
            self.bridge.fail_opens -= 1
            raise TransportError("simulated open failure", self.bridge.open_error_kind)
        self.is_open = True

    def close(self) -> None:
        self.bridge.close_calls += 1
        self.is_open = False
        if self.bridge.fail_closes:
            raise TransportError("simulated close failure", ErrorKind.CLOSED)

    def read_registers(self, slave_id, address, count, kind):
        self._exchange("read_registers", slave_id, address, count, kind)
        self._fail_read()
        if kind == RegisterKind.COIL:
            return [int(self.bridge.coils.get((slave_id, address + i), False)) for i in range(count)]
        return [self.bridge.registers.get((slave_id, kind, address + i), 0) for i in range(count)]

    def read_coil(self, slave_id, address):
        self._exchange("read_coil", slave_id, address)
        self._fail_read()
        return self.bridge.coils.get((slave_id, address), False)

    def write_registers(self, slave_id, address, values):
        self._exchange("write_registers", slave_id, address, list(values))
        self._fail_write()
        for offset, value in enumerate(values):
            self.bridge.registers[(slave_id, RegisterKind.HOLDING, address + offset)] = value
        if self.bridge.on_write:
            self.bridge.on_write(self.bridge, slave_id, RegisterKind.HOLDING, address, values[0])

    def write_coil(self, slave_id, address, value):
        self._exchange("write_coil", slave_id, address, value)
        self._fail_write()
        self.bridge.coils[(slave_id, address)] = bool(value)
        if self.bridge.on_write:
            self.bridge.on_write(self.bridge, slave_id, RegisterKind.COIL, address, value)

    def _exchange(self, name, slave_id, *args):
        self.bridge.calls.append((name, slave_id) + args)
        if not self.is_open:
            raise TransportError("not connected", ErrorKind.CLOSED)
        if self.bridge.fail_exchanges > 0:
            self.bridge.fail_exchanges -= 1
            raise TransportError("simulated timeout", ErrorKind.TIMEOUT)

    def _fail_read(self):
        if self.bridge.fail_reads > 0:
            self.bridge.fail_reads -= 1
            raise TransportError("simulated read timeout", ErrorKind.TIMEOUT)

    def _fail_write(self):
        if self.bridge.fail_writes > 0:
            self.bridge.fail_writes -= 1
            raise TransportError("simulated write failure", ErrorKind.TIMEOUT)


def dds4921_switch(bridge, slave_id, kind, address, value):
    """DDS4921 firmware: the switch command register drives the status register."""
    if kind == RegisterKind.HOLDING and address == 0x0010:
        status = {0x5555: 0x0055, 0xAAAA: 0x00AA}.get(value)
        if status is not None:
            bridge.set_registers(slave_id, 0x0064, [status])
