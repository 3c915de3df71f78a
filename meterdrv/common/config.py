"""
Configuration Dataclasses

Type-safe structures for gateway endpoints, register/actuator metadata
and the meter inventory loaded from YAML.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from urllib.parse import urlsplit

import yaml

from .exceptions import ConfigurationError


SLAVE_ID_MIN = 1
SLAVE_ID_MAX = 60


class RegisterKind(str, Enum):
    """Modbus address spaces a descriptor can point at"""
    COIL = "coil"
    INPUT = "input"
    HOLDING = "holding"


class ActuatorClass(str, Enum):
    """Actuator families with their own write retry and settle policy"""
    POWER_SWITCH = "power_switch"
    VALVE = "valve"

    @property
    def write_retries(self) -> int:
        return {ActuatorClass.POWER_SWITCH: 3, ActuatorClass.VALVE: 30}[self]

    @property
    def settle_s(self) -> float:
        return {ActuatorClass.POWER_SWITCH: 0.2, ActuatorClass.VALVE: 0.05}[self]


class MeterType(str, Enum):
    """Meter families"""
    POWER = "power"
    WATER = "water"


class FramerKind(str, Enum):
    """Endpoint URL schemes and the framing they select"""
    RTU_OVER_TCP = "rtuovertcp"
    TCP = "tcp"


@dataclass(frozen=True)
class GatewayEndpoint:
    """
    Serial bridge endpoint.

    address has the form ``rtuovertcp://<host>:<port>`` (or ``tcp://``
    for bridges speaking plain Modbus TCP). Equality covers every field,
    so any change forces a connection rebuild.
    """
    address: str
    baud_rate: int = 9600
    timeout: float = 5.0

    def __post_init__(self):
        if not isinstance(self.address, str):
            raise ConfigurationError(f"Endpoint address must be a string, got {self.address!r}")
        if isinstance(self.baud_rate, bool) or not isinstance(self.baud_rate, int):
            raise ConfigurationError(f"Baud rate must be an integer, got {self.baud_rate!r}")
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)):
            raise ConfigurationError(f"Timeout must be a number, got {self.timeout!r}")
        parts = urlsplit(self.address)
        try:
            FramerKind(parts.scheme)
        except ValueError:
            raise ConfigurationError(
                f"Unsupported endpoint scheme '{parts.scheme}' in {self.address}"
            )
        if not parts.hostname:
            raise ConfigurationError(f"Missing host in endpoint {self.address}")
        try:
            port = parts.port
        except ValueError:
            port = None
        if port is None:
            raise ConfigurationError(f"Missing or invalid port in endpoint {self.address}")
        if self.baud_rate <= 0:
            raise ConfigurationError(f"Invalid baud rate {self.baud_rate}")
        if self.timeout <= 0:
            raise ConfigurationError(f"Invalid timeout {self.timeout}")

    @property
    def framer(self) -> FramerKind:
        return FramerKind(urlsplit(self.address).scheme)

    @property
    def host(self) -> str:
        return urlsplit(self.address).hostname

    @property
    def port(self) -> int:
        return urlsplit(self.address).port


@dataclass(frozen=True)
class RegisterDescriptor:
    """Where and how a measurement lives in the meter's holding registers"""
    address: int = 0
    length: int = 0  # 0 = item not supported by this model
    readable: bool = False
    writable: bool = False
    signed: bool = False
    scale: float = 1.0

    @property
    def defined(self) -> bool:
        return self.length != 0


UNDEFINED = RegisterDescriptor()


@dataclass(frozen=True)
class ActuatorDescriptor:
    """Control and status registers of one switch or valve"""
    control_address: int
    control_kind: RegisterKind
    open_command: int
    close_command: int
    status_address: int
    status_kind: RegisterKind
    open_status_value: int
    close_status_value: int


@dataclass
class MeterConfig:
    """One meter attached to the gateway"""
    name: str
    type: MeterType
    model: str
    slave_id: int


@dataclass
class DriverConfig:
    """Complete inventory: one gateway and its meters"""
    gateway: GatewayEndpoint
    meters: list[MeterConfig] = field(default_factory=list)

    def get_meter(self, name: str) -> MeterConfig:
        for meter in self.meters:
            if meter.name == name:
                return meter
        raise ConfigurationError(f"Unknown meter '{name}'")


def validate_slave_id(slave_id: int) -> int:
    """Reject addresses outside the inclusive range the meters accept"""
    if not isinstance(slave_id, int) or isinstance(slave_id, bool):
        raise ConfigurationError(f"Slave address must be an integer, got {slave_id!r}")
    if not SLAVE_ID_MIN <= slave_id <= SLAVE_ID_MAX:
        raise ConfigurationError(
            f"Invalid slave address {slave_id}, must be within "
            f"{SLAVE_ID_MIN}-{SLAVE_ID_MAX}"
        )
    return slave_id


def load_driver_config(data: dict) -> DriverConfig:
    """Load DriverConfig from dictionary (e.g., parsed YAML)"""
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a mapping")

    gateway_data = data.get("gateway")
    if not isinstance(gateway_data, dict) or "address" not in gateway_data:
        raise ConfigurationError("Missing required section: gateway.address")

    try:
        baud_rate = int(gateway_data.get("baud_rate", 9600))
        timeout = float(gateway_data.get("timeout_s", 5.0))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid gateway settings: {e}")

    gateway = GatewayEndpoint(
        address=gateway_data["address"],
        baud_rate=baud_rate,
        timeout=timeout,
    )

    meter_entries = data.get("meters") or []
    if not isinstance(meter_entries, list):
        raise ConfigurationError("Section 'meters' must be a list")

    meters = []
    seen = set()
    for m in meter_entries:
        if not isinstance(m, dict):
            raise ConfigurationError(f"Meter entry must be a mapping, got {m!r}")
        try:
            name = m["name"]
            if not isinstance(name, str):
                raise ConfigurationError(f"Meter name must be a string, got {name!r}")
            meter_type = MeterType(m["type"])
            model = str(m["model"]).lower()
            slave_id = validate_slave_id(m["slave_id"])
        except KeyError as e:
            raise ConfigurationError(f"Meter entry missing field {e}")
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid meter entry {m!r}: {e}")
        if name in seen:
            raise ConfigurationError(f"Duplicate meter name '{name}'")
        seen.add(name)
        meters.append(MeterConfig(
            name=name,
            type=meter_type,
            model=model,
            slave_id=slave_id,
        ))

    return DriverConfig(gateway=gateway, meters=meters)


def load_config_file(config_path: str | Path) -> DriverConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Parsed DriverConfig
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing {config_path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error reading {config_path}: {e}")

    return load_driver_config(data or {})
