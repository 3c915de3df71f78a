"""
Data item and actuator identifiers

Item ids index a model's register table; turn ids index its actuator
table. Not every model supports every id.
"""

from enum import IntEnum


class PowerItem(IntEnum):
    """Electric meter measurements"""
    VOLTAGE = 0                     # Vrms
    VOLTAGE_PHASE_A = 1
    VOLTAGE_PHASE_B = 2
    VOLTAGE_PHASE_C = 3

    CURRENT = 4                     # Arms
    CURRENT_PHASE_A = 5
    CURRENT_PHASE_B = 6
    CURRENT_PHASE_C = 7

    POWER_ACTIVE = 8                # W
    POWER_ACTIVE_PHASE_A = 9
    POWER_ACTIVE_PHASE_B = 10
    POWER_ACTIVE_PHASE_C = 11

    POWER_REACTIVE = 12             # var
    POWER_REACTIVE_PHASE_A = 13
    POWER_REACTIVE_PHASE_B = 14
    POWER_REACTIVE_PHASE_C = 15

    POWER_APPARENT = 16             # VA
    POWER_APPARENT_PHASE_A = 17
    POWER_APPARENT_PHASE_B = 18
    POWER_APPARENT_PHASE_C = 19

    POWER_FACTOR = 20               # 0 - 1
    POWER_FACTOR_PHASE_A = 21
    POWER_FACTOR_PHASE_B = 22
    POWER_FACTOR_PHASE_C = 23

    FREQUENCY = 24                  # Hz

    # Totals over all tariff rates
    ENERGY_ACTIVE_TOTAL = 25        # kWh
    ENERGY_ACTIVE_IMPORT = 26
    ENERGY_ACTIVE_EXPORT = 27
    ENERGY_REACTIVE_TOTAL = 28      # kvarh
    ENERGY_REACTIVE_IMPORT = 29
    ENERGY_REACTIVE_EXPORT = 30

    SLAVE_ADDRESS = 31
    DATETIME = 32


class WaterItem(IntEnum):
    """Water meter measurements"""
    VOLUME = 0                      # m^3


class SwitchTurn(IntEnum):
    """Power switch outputs"""
    TURN_1 = 0
    TURN_2 = 1
    TURN_3 = 2
    TURN_4 = 3
    TURN_5 = 4
    TURN_6 = 5
    TURN_7 = 6
    TURN_8 = 7


class ValveTurn(IntEnum):
    """Valve outputs"""
    TURN_1 = 0
    TURN_2 = 1
    TURN_3 = 2
    TURN_4 = 3
