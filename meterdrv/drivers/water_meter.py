"""
Water Meter

Modbus-RTU water meter with valve outputs.
"""

from ..common.config import ActuatorClass
from ..common.exceptions import ConfigurationError
from ..gateway.session import GatewaySession
from .base import DeviceDriver
from .items import ValveTurn, WaterItem
from .models import WATER_METER_MODELS


class WaterMeter(DeviceDriver):
    """Water meter driver; valves move slowly, so writes retry longer"""

    ITEM_ENUM = WaterItem
    TURN_ENUM = ValveTurn

    def __init__(
        self,
        gateway: GatewaySession,
        model: str,
        slave_id: int,
        name: str | None = None,
    ):
        meter_model = WATER_METER_MODELS.get(model.lower())
        if meter_model is None:
            raise ConfigurationError(f"Unsupported water meter model '{model}'")
        self.model = meter_model.name
        super().__init__(
            gateway,
            slave_id,
            meter_model.registers,
            meter_model.actuators,
            actuator_class=ActuatorClass.VALVE,
            name=name,
        )

    def get_valve(self, turn: int) -> bool:
        return self.get_state(turn)

    def set_valve(self, turn: int, opened: bool) -> None:
        self.set_state(turn, opened)
