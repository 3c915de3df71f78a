"""
Meter Drivers - semantic access to meter registers

Responsibilities:
- Decode scaled/signed multi-register values
- Read measurements by item id
- Command switches and valves with write-then-verify
"""

from .base import ControlPhase, DeviceDriver
from .items import PowerItem, SwitchTurn, ValveTurn, WaterItem
from .manager import build_drivers, create_driver
from .power_meter import PowerMeter
from .water_meter import WaterMeter

__all__ = [
    "ControlPhase",
    "DeviceDriver",
    "PowerItem",
    "PowerMeter",
    "SwitchTurn",
    "ValveTurn",
    "WaterItem",
    "WaterMeter",
    "build_drivers",
    "create_driver",
]
