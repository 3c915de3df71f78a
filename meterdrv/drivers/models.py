"""
Meter model tables

Register and actuator metadata per supported meter model. Items a
model does not list resolve to the undefined descriptor.

For power switches the descriptor's "open" side is the energised
(closed-circuit) state, so get_state() == True means power is on.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from ..common.config import ActuatorDescriptor, RegisterDescriptor, RegisterKind
from .items import PowerItem, WaterItem


@dataclass(frozen=True)
class MeterModel:
    """Static metadata of one meter model"""
    name: str
    registers: Mapping[int, RegisterDescriptor]
    actuators: tuple[ActuatorDescriptor, ...] = field(default_factory=tuple)


def _ro(scale: float, length: int = 1, signed: bool = False, address: int = 0) -> RegisterDescriptor:
    return RegisterDescriptor(
        address=address,
        length=length,
        readable=True,
        writable=False,
        signed=signed,
        scale=scale,
    )


DDS4921 = MeterModel(
    name="dds4921",
    registers=MappingProxyType({
        PowerItem.VOLTAGE: _ro(0.1, address=0x0000),
        PowerItem.CURRENT: _ro(0.01, signed=True, address=0x0003),
        PowerItem.POWER_ACTIVE: _ro(1, signed=True, address=0x0007),
        PowerItem.POWER_REACTIVE: _ro(1, signed=True, address=0x000B),
        PowerItem.POWER_APPARENT: _ro(1, signed=True, address=0x000F),
        PowerItem.POWER_FACTOR: _ro(0.001, address=0x0013),
        PowerItem.FREQUENCY: _ro(0.01, address=0x001A),
        PowerItem.ENERGY_ACTIVE_TOTAL: _ro(0.01, length=2, signed=True, address=0x001D),
        PowerItem.ENERGY_ACTIVE_IMPORT: _ro(0.01, length=2, address=0x0027),
        PowerItem.ENERGY_ACTIVE_EXPORT: _ro(0.01, length=2, address=0x0031),
        PowerItem.ENERGY_REACTIVE_TOTAL: _ro(0.01, length=2, address=0x003B),
        PowerItem.ENERGY_REACTIVE_IMPORT: _ro(0.01, length=2, address=0x0045),
        PowerItem.ENERGY_REACTIVE_EXPORT: _ro(0.01, length=2, address=0x004F),
        PowerItem.SLAVE_ADDRESS: RegisterDescriptor(
            address=0x0061,
            length=1,
            readable=True,
            writable=True,
            signed=False,
            scale=0.01,
        ),
    }),
    actuators=(
        ActuatorDescriptor(
            control_address=0x0010,
            control_kind=RegisterKind.HOLDING,
            open_command=0x5555,
            close_command=0xAAAA,
            status_address=0x0064,
            status_kind=RegisterKind.HOLDING,
            open_status_value=0x0055,
            close_status_value=0x00AA,
        ),
    ),
)


HYLS_Y = MeterModel(
    name="hyls-y",
    registers=MappingProxyType({
        WaterItem.VOLUME: _ro(0.01, length=2, address=0x0000),
    }),
    actuators=(
        ActuatorDescriptor(
            control_address=0x0001,
            control_kind=RegisterKind.COIL,
            open_command=0x0001,
            close_command=0x0000,
            status_address=0x0001,
            status_kind=RegisterKind.COIL,
            open_status_value=0x0001,
            close_status_value=0x0000,
        ),
    ),
)


POWER_METER_MODELS: Mapping[str, MeterModel] = MappingProxyType({DDS4921.name: DDS4921})
WATER_METER_MODELS: Mapping[str, MeterModel] = MappingProxyType({HYLS_Y.name: HYLS_Y})
