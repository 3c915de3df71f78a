"""
Common Utilities

Shared modules used across the gateway and drivers:
- config.py - Configuration dataclasses and YAML loading
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
"""

from .config import (
    GatewayEndpoint,
    RegisterDescriptor,
    ActuatorDescriptor,
    MeterConfig,
    DriverConfig,
    RegisterKind,
    ActuatorClass,
    MeterType,
    FramerKind,
    UNDEFINED,
    validate_slave_id,
    load_driver_config,
    load_config_file,
)
from .exceptions import (
    MeterDrvError,
    ConfigurationError,
    CommunicationError,
    TransportError,
    VerificationError,
    DecodeError,
)
from .logging_setup import (
    setup_logging,
    get_component_logger,
    log_register_read,
    log_register_write,
    log_exchange_retry,
)

__all__ = [
    # Config
    "GatewayEndpoint",
    "RegisterDescriptor",
    "ActuatorDescriptor",
    "MeterConfig",
    "DriverConfig",
    "RegisterKind",
    "ActuatorClass",
    "MeterType",
    "FramerKind",
    "UNDEFINED",
    "validate_slave_id",
    "load_driver_config",
    "load_config_file",
    # Exceptions
    "MeterDrvError",
    "ConfigurationError",
    "CommunicationError",
    "TransportError",
    "VerificationError",
    "DecodeError",
    # Logging
    "setup_logging",
    "get_component_logger",
    "log_register_read",
    "log_register_write",
    "log_exchange_retry",
]
