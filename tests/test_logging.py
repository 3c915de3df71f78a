"""Tests for structured logging of meter exchanges."""

import json
import logging

import pytest

from meterdrv.common.exceptions import CommunicationError
from meterdrv.common.logging_setup import (
    ROOT_LOGGER,
    JsonFormatter,
    get_component_logger,
    setup_logging,
)
from meterdrv.drivers import PowerItem, PowerMeter, SwitchTurn


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__(logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)

    def driver_records(self, level: int) -> list[logging.LogRecord]:
        return [r for r in self.records if r.name == f"{ROOT_LOGGER}.driver" and r.levelno == level]


@pytest.fixture
def records():
    root = setup_logging("INFO", json_format=True)
    handler = RecordingHandler()
    root.addHandler(handler)
    yield handler
    root.removeHandler(handler)


@pytest.fixture
def power(session):
    return PowerMeter(session, "dds4921", 2, name="main-power")


class TestExchangeLogging:
    def test_retries_logged_with_slave_and_attempt(self, power, bridge, records):
        bridge.set_registers(2, 0x0000, [2300])
        bridge.fail_exchanges = 2

        power.get_val(PowerItem.VOLTAGE)

        retries = records.driver_records(logging.WARNING)
        assert [r.attempt for r in retries] == [1, 2]
        assert all(r.slave_id == 2 for r in retries)
        assert all(r.register == "0x0000" for r in retries)

    def test_read_give_up_logged(self, power, bridge, records):
        bridge.fail_exchanges = 100

        with pytest.raises(CommunicationError):
            power.get_val(PowerItem.VOLTAGE)

        [failure] = records.driver_records(logging.ERROR)
        assert failure.attempts == 4
        assert failure.device == "main-power"
        assert failure.slave_id == 2
        assert failure.getMessage().startswith("main-power: Read 0x0000 failed")

    def test_write_give_up_logged_with_command(self, power, bridge, records):
        bridge.fail_writes = 1000

        with pytest.raises(CommunicationError):
            power.trip(SwitchTurn.TURN_1)

        [failure] = records.driver_records(logging.ERROR)
        assert failure.value == 0xAAAA
        assert failure.attempts == 4
        assert failure.register == "0x0010"


class TestJsonFormatter:
    def test_context_and_extras_in_output(self, records):
        log = get_component_logger("driver", device="meter-7", slave_id=7)
        log.warning("status drift", extra={"turn": 0})

        line = json.loads(JsonFormatter().format(records.records[-1]))

        assert line["component"] == "driver"
        assert line["level"] == "WARNING"
        assert line["message"] == "meter-7: status drift"
        assert line["slave_id"] == 7
        assert line["turn"] == 0
        assert "msg" not in line
