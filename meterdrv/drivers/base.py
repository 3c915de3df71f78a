"""
Device Driver

Per-meter access on top of a shared GatewaySession: value reads with
reconnect-and-retry, and actuator commands with write-then-verify.

Each public operation holds the session's write lock for its whole
duration, retries and verification included, and passes the meter's
slave id explicitly with every exchange.
"""

import time
from enum import Enum, IntEnum
from typing import Callable, Mapping, Sequence, TypeVar

from ..common.config import (
    UNDEFINED,
    ActuatorClass,
    ActuatorDescriptor,
    RegisterDescriptor,
    RegisterKind,
    validate_slave_id,
)
from ..common.exceptions import CommunicationError, ConfigurationError, VerificationError
from ..common.logging_setup import (
    get_component_logger,
    log_exchange_retry,
    log_register_read,
    log_register_write,
)
from ..gateway.session import GatewaySession
from ..gateway.transport import Transport
from . import codec

T = TypeVar("T")


class ControlPhase(str, Enum):
    """Stages of one actuator command"""
    IDLE = "idle"
    WRITING = "writing"
    VERIFYING = "verifying"
    CONFIRMED = "confirmed"
    MISMATCHED = "mismatched"


class DeviceDriver:
    """
    One meter on a shared gateway.

    Features:
    - Scaled/signed value reads from holding registers
    - Actuator status over coils or holding registers
    - Write-then-verify actuator commands
    - Reconnect between retries, bounded per operation
    """

    PRE_EXCHANGE_DELAY_S = 0.005  # meters throttle back-to-back polling
    READ_RETRIES = 3

    # Identifier families this driver accepts; None accepts any int
    ITEM_ENUM: type[IntEnum] | None = None
    TURN_ENUM: type[IntEnum] | None = None

    def __init__(
        self,
        gateway: GatewaySession,
        slave_id: int,
        registers: Mapping[int, RegisterDescriptor],
        actuators: Sequence[ActuatorDescriptor] = (),
        actuator_class: ActuatorClass = ActuatorClass.POWER_SWITCH,
        name: str | None = None,
    ):
        self._gateway = gateway
        self._slave_id = validate_slave_id(slave_id)
        self._registers = registers
        self._actuators = tuple(actuators)
        self._actuator_class = actuator_class
        self.name = name or f"{type(self).__name__.lower()}-{slave_id}"
        self._log = get_component_logger("driver", device=self.name, slave_id=self._slave_id)

    @property
    def slave_id(self) -> int:
        return self._slave_id

    @property
    def gateway(self) -> GatewaySession:
        return self._gateway

    @property
    def actuator_class(self) -> ActuatorClass:
        return self._actuator_class

    def get_val(self, item_id: int) -> float:
        """
        Read one measurement.

        Args:
            item_id: Item identifier from the model's item enumeration.
                Members of another meter family's enumeration are
                rejected even when their integer value exists here.

        Returns:
            Scaled value; the unit depends on the item

        Raises:
            ConfigurationError: item unknown, unsupported or unreadable
            CommunicationError: transport failure after retries
        """
        descriptor = self._descriptor(item_id)
        register = f"0x{descriptor.address:04x}"

        with self._gateway.lock.write_locked():
            words = self._exchange(
                lambda client: client.read_registers(
                    self._slave_id,
                    descriptor.address,
                    descriptor.length,
                    RegisterKind.HOLDING,
                ),
                register,
                retries=self.READ_RETRIES,
            )

        value = codec.decode(words, descriptor.scale, descriptor.signed)
        log_register_read(self._log, register, value)
        return value

    def get_state(self, turn: int) -> bool:
        """
        Read actuator status.

        Returns:
            True when open (for power switches: energised), False otherwise

        Raises:
            ConfigurationError: unknown turn or register kind
            DecodeError: status register holds neither known value
            CommunicationError: transport failure after retries
        """
        actuator = self._actuator(turn)
        with self._gateway.lock.write_locked():
            return self._read_state(actuator)

    def set_state(self, turn: int, desired_open: bool) -> None:
        """
        Command an actuator and confirm it reached the requested state.

        The write is retried with reconnects up to the actuator class
        bound; a settle delay follows every attempt. The status read
        that verifies the command follows the read retry policy, but a
        mismatch is never retried.

        Raises:
            ConfigurationError: unknown turn or register kind
            CommunicationError: write or status read failed after retries
            VerificationError: status disagrees with the command
            DecodeError: status register holds neither known value
        """
        actuator = self._actuator(turn)
        command = actuator.open_command if desired_open else actuator.close_command
        payload = codec.encode_command(actuator.control_kind, command)
        register = f"0x{actuator.control_address:04x}"

        if actuator.control_kind == RegisterKind.COIL:
            def write(client: Transport) -> None:
                client.write_coil(self._slave_id, actuator.control_address, payload)
        else:
            def write(client: Transport) -> None:
                client.write_registers(self._slave_id, actuator.control_address, payload)

        with self._gateway.lock.write_locked():
            try:
                self._log_phase(turn, ControlPhase.WRITING)
                self._exchange(
                    write,
                    register,
                    retries=self._actuator_class.write_retries,
                    settle_s=self._actuator_class.settle_s,
                    written=command,
                )
                log_register_write(self._log, register, command)

                self._log_phase(turn, ControlPhase.VERIFYING)
                actual_open = self._read_state(actuator)

                if actual_open != desired_open:
                    self._log_phase(turn, ControlPhase.MISMATCHED)
                    self._log.warning(
                        f"turn {turn} did not reach "
                        f"{'open' if desired_open else 'closed'} state"
                    )
                    raise VerificationError(
                        turn,
                        expected_open=desired_open,
                        actual_open=actual_open,
                        device_name=self.name,
                        slave_id=self._slave_id,
                    )
                self._log_phase(turn, ControlPhase.CONFIRMED)
            finally:
                self._log_phase(turn, ControlPhase.IDLE)

    def _read_state(self, actuator: ActuatorDescriptor) -> bool:
        kind = actuator.status_kind
        register = f"0x{actuator.status_address:04x}"
        if kind == RegisterKind.COIL:
            opened = self._exchange(
                lambda client: client.read_coil(self._slave_id, actuator.status_address),
                register,
                retries=self.READ_RETRIES,
            )
        elif kind in (RegisterKind.HOLDING, RegisterKind.INPUT):
            words = self._exchange(
                lambda client: client.read_registers(
                    self._slave_id, actuator.status_address, 1, kind
                ),
                register,
                retries=self.READ_RETRIES,
            )
            opened = codec.decode_status(
                words[0],
                actuator.open_status_value,
                actuator.close_status_value,
            )
        else:
            raise ConfigurationError(f"Undefined register kind {kind!r}")
        log_register_read(self._log, register, opened)
        return opened

    def _exchange(
        self,
        operation: Callable[[Transport], T],
        register: str,
        retries: int,
        settle_s: float = 0.0,
        written: int | None = None,
    ) -> T:
        """
        Run one exchange, reconnecting and retrying on transport failure.

        Up to ``retries`` retries follow the first attempt. If the
        reconnect between attempts fails, its error is raised at once.
        ``written`` is the command value for writes and None for reads.
        """
        if self._gateway.get_client() is None:
            self._gateway.reinit()

        time.sleep(self.PRE_EXCHANGE_DELAY_S)

        attempt = 0
        while True:
            try:
                result = operation(self._gateway.get_client())
            except CommunicationError as e:
                if settle_s:
                    time.sleep(settle_s)
                if attempt >= retries:
                    if written is None:
                        log_register_read(self._log, register, success=False, attempts=attempt + 1)
                    else:
                        log_register_write(
                            self._log, register, written, success=False, attempts=attempt + 1
                        )
                    raise
                attempt += 1
                log_exchange_retry(self._log, register, attempt, retries, e)
                self._gateway.reconnect()
                continue

            if settle_s:
                time.sleep(settle_s)
            return result

    def _descriptor(self, item_id: int) -> RegisterDescriptor:
        self._check_family(item_id, self.ITEM_ENUM, "item")
        descriptor = self._registers.get(item_id, UNDEFINED)
        if not descriptor.defined:
            raise ConfigurationError(f"Undefined register metadata for item {item_id}")
        if not descriptor.readable:
            raise ConfigurationError(f"Unreadable register for item {item_id}")
        return descriptor

    def _actuator(self, turn: int) -> ActuatorDescriptor:
        self._check_family(turn, self.TURN_ENUM, "turn")
        if isinstance(turn, bool) or not 0 <= turn < len(self._actuators):
            raise ConfigurationError(f"Undefined actuator turn {turn} on {self.name}")
        return self._actuators[turn]

    def _check_family(self, ident: int, family: type[IntEnum] | None, what: str) -> None:
        if family is not None and isinstance(ident, IntEnum) and not isinstance(ident, family):
            raise ConfigurationError(
                f"{what} {ident!r} does not belong to {family.__name__} on {self.name}"
            )

    def _log_phase(self, turn: int, phase: ControlPhase) -> None:
        self._log.debug(
            f"turn {turn}: {phase.value}",
            extra={"turn": int(turn), "phase": phase.value},
        )
