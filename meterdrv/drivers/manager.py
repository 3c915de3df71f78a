"""
Driver Manager

Builds meter drivers from configuration and resolves item/turn names
used on the command line.
"""

from ..common.config import DriverConfig, MeterConfig, MeterType
from ..common.exceptions import ConfigurationError
from ..common.logging_setup import get_component_logger
from ..gateway.session import GatewaySession
from .base import DeviceDriver
from .items import PowerItem, SwitchTurn, ValveTurn, WaterItem
from .power_meter import PowerMeter
from .water_meter import WaterMeter

logger = get_component_logger("driver.manager")

_DRIVER_CLASSES = {
    MeterType.POWER: PowerMeter,
    MeterType.WATER: WaterMeter,
}

_ITEM_ENUMS = {
    MeterType.POWER: PowerItem,
    MeterType.WATER: WaterItem,
}

_TURN_ENUMS = {
    MeterType.POWER: SwitchTurn,
    MeterType.WATER: ValveTurn,
}


def create_driver(meter: MeterConfig, session: GatewaySession) -> DeviceDriver:
    """Instantiate the driver class matching the meter type"""
    driver_cls = _DRIVER_CLASSES.get(meter.type)
    if driver_cls is None:
        raise ConfigurationError(f"Unsupported meter type '{meter.type}'")
    return driver_cls(session, meter.model, meter.slave_id, name=meter.name)


def build_drivers(config: DriverConfig, session: GatewaySession) -> dict[str, DeviceDriver]:
    """Create every configured driver, keyed by meter name"""
    drivers = {}
    for meter in config.meters:
        drivers[meter.name] = create_driver(meter, session)
        logger.debug(
            f"Created {meter.type.value} meter {meter.name} "
            f"(model={meter.model}, slave={meter.slave_id})"
        )
    return drivers


def resolve_item(meter_type: MeterType, item: str) -> int:
    """Accept an item name (e.g. 'voltage') or its numeric id"""
    return _resolve(_ITEM_ENUMS[meter_type], item, "item")


def resolve_turn(meter_type: MeterType, turn: str) -> int:
    """Accept a 1-based turn number or a name such as 'turn_1'"""
    if turn.isdigit():
        turn = f"turn_{turn}"
    return _resolve(_TURN_ENUMS[meter_type], turn, "turn")


def _resolve(enum_cls, token: str, what: str) -> int:
    if token.isdigit():
        try:
            return enum_cls(int(token))
        except ValueError:
            raise ConfigurationError(f"Unknown {what} id {token}")
    try:
        return enum_cls[token.upper().replace("-", "_")]
    except KeyError:
        raise ConfigurationError(f"Unknown {what} '{token}'")
