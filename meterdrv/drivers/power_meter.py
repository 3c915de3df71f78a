"""
Power Meter

Modbus-RTU electric meter with power switch outputs.
"""

from ..common.config import ActuatorClass
from ..common.exceptions import ConfigurationError
from ..gateway.session import GatewaySession
from .base import DeviceDriver
from .items import PowerItem, SwitchTurn
from .models import POWER_METER_MODELS


class PowerMeter(DeviceDriver):
    """
    Electric meter driver.

    Values are read with get_val(PowerItem.*). Switch state True means
    the output is closed (energised); trip() opens the circuit.
    """

    ITEM_ENUM = PowerItem
    TURN_ENUM = SwitchTurn

    def __init__(
        self,
        gateway: GatewaySession,
        model: str,
        slave_id: int,
        name: str | None = None,
    ):
        meter_model = POWER_METER_MODELS.get(model.lower())
        if meter_model is None:
            raise ConfigurationError(f"Unsupported power meter model '{model}'")
        self.model = meter_model.name
        super().__init__(
            gateway,
            slave_id,
            meter_model.registers,
            meter_model.actuators,
            actuator_class=ActuatorClass.POWER_SWITCH,
            name=name,
        )

    def get_switch_status(self, turn: int) -> bool:
        return self.get_state(turn)

    def trip(self, turn: int) -> None:
        """Turn the switch off and confirm it tripped"""
        self.set_state(turn, False)

    def close_switch(self, turn: int) -> None:
        """Turn the switch on and confirm it closed"""
        self.set_state(turn, True)
