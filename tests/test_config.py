"""Tests for endpoint parsing and YAML configuration loading."""

import pytest

from meterdrv.common.config import (
    FramerKind,
    GatewayEndpoint,
    MeterType,
    load_config_file,
    load_driver_config,
)
from meterdrv.common.exceptions import ConfigurationError


VALID = {
    "gateway": {"address": "rtuovertcp://192.168.1.12:8802", "baud_rate": 9600, "timeout_s": 5},
    "meters": [
        {"name": "main-power", "type": "power", "model": "DDS4921", "slave_id": 2},
        {"name": "main-water", "type": "water", "model": "hyls-y", "slave_id": 21},
    ],
}


class TestGatewayEndpoint:
    def test_parse(self):
        ep = GatewayEndpoint("rtuovertcp://192.168.1.12:8802", 9600, 5)
        assert ep.host == "192.168.1.12"
        assert ep.port == 8802
        assert ep.framer == FramerKind.RTU_OVER_TCP

    def test_equality_covers_all_fields(self):
        a = GatewayEndpoint("rtuovertcp://h:1", 9600, 5)
        assert a == GatewayEndpoint("rtuovertcp://h:1", 9600, 5)
        assert a != GatewayEndpoint("rtuovertcp://h:1", 19200, 5)
        assert a != GatewayEndpoint("rtuovertcp://h:1", 9600, 3)
        assert a != GatewayEndpoint("rtuovertcp://h:2", 9600, 5)

    @pytest.mark.parametrize("address", [
        "rtu://h:1",
        "rtuovertcp://:502",
        "rtuovertcp://host",
        "rtuovertcp://host:notaport",
        "host:502",
    ])
    def test_invalid_address(self, address):
        with pytest.raises(ConfigurationError):
            GatewayEndpoint(address)

    def test_invalid_timeout(self):
        with pytest.raises(ConfigurationError):
            GatewayEndpoint("tcp://h:502", timeout=0)

    @pytest.mark.parametrize("kwargs", [
        {"address": 12345},
        {"address": "tcp://h:502", "baud_rate": "fast"},
        {"address": "tcp://h:502", "baud_rate": True},
        {"address": "tcp://h:502", "timeout": "5"},
    ])
    def test_wrong_types(self, kwargs):
        with pytest.raises(ConfigurationError):
            GatewayEndpoint(**kwargs)


class TestLoadDriverConfig:
    def test_valid(self):
        config = load_driver_config(VALID)

        assert config.gateway.timeout == 5.0
        assert [m.name for m in config.meters] == ["main-power", "main-water"]
        assert config.meters[0].model == "dds4921"
        assert config.get_meter("main-water").type == MeterType.WATER

    def test_unknown_meter(self):
        with pytest.raises(ConfigurationError):
            load_driver_config(VALID).get_meter("nope")

    def test_missing_gateway(self):
        with pytest.raises(ConfigurationError):
            load_driver_config({"meters": []})

    def test_bad_slave(self):
        data = {"gateway": VALID["gateway"], "meters": [
            {"name": "m", "type": "power", "model": "dds4921", "slave_id": 61},
        ]}
        with pytest.raises(ConfigurationError):
            load_driver_config(data)

    def test_bad_type(self):
        data = {"gateway": VALID["gateway"], "meters": [
            {"name": "m", "type": "gas", "model": "x", "slave_id": 1},
        ]}
        with pytest.raises(ConfigurationError):
            load_driver_config(data)

    def test_missing_field(self):
        data = {"gateway": VALID["gateway"], "meters": [{"name": "m", "type": "power"}]}
        with pytest.raises(ConfigurationError):
            load_driver_config(data)

    def test_duplicate_names(self):
        meter = {"name": "m", "type": "power", "model": "dds4921", "slave_id": 1}
        with pytest.raises(ConfigurationError):
            load_driver_config({"gateway": VALID["gateway"], "meters": [meter, meter]})

    @pytest.mark.parametrize("gateway", [
        {"address": "rtuovertcp://h:502", "baud_rate": "fast"},
        {"address": "rtuovertcp://h:502", "baud_rate": None},
        {"address": "rtuovertcp://h:502", "timeout_s": "abc"},
        {"address": "rtuovertcp://h:502", "timeout_s": [5]},
        {"address": 12345},
        "rtuovertcp://h:502",
    ])
    def test_bad_gateway_values(self, gateway):
        with pytest.raises(ConfigurationError):
            load_driver_config({"gateway": gateway, "meters": []})

    @pytest.mark.parametrize("meters", [
        ["oops"],
        [None],
        {"name": "m"},
        [{"name": ["m"], "type": "power", "model": "dds4921", "slave_id": 1}],
        [{"name": "m", "type": ["power"], "model": "dds4921", "slave_id": 1}],
        [{"name": "m", "type": "power", "model": "dds4921", "slave_id": "2"}],
    ])
    def test_bad_meter_entries(self, meters):
        with pytest.raises(ConfigurationError):
            load_driver_config({"gateway": VALID["gateway"], "meters": meters})

    def test_numeric_strings_coerced(self):
        gateway = {"address": "rtuovertcp://h:502", "baud_rate": "19200", "timeout_s": "2.5"}
        config = load_driver_config({"gateway": gateway, "meters": []})

        assert config.gateway.baud_rate == 19200
        assert config.gateway.timeout == 2.5


class TestLoadConfigFile:
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "meters.yaml"
        path.write_text(
            "gateway:\n"
            "  address: rtuovertcp://127.0.0.1:1502\n"
            "meters:\n"
            "  - {name: p, type: power, model: dds4921, slave_id: 2}\n"
        )
        config = load_config_file(path)

        assert config.gateway.baud_rate == 9600
        assert config.meters[0].slave_id == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config_file(tmp_path / "absent.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("gateway: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_config_file(path)
