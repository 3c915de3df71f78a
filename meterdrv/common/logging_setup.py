"""
Structured Logging Setup

All meterdrv loggers hang below the ``meterdrv`` logger, which owns the
single stderr handler; stdout is left to the CLI's JSON output.

Environment:
    METERDRV_LOG_LEVEL   DEBUG, INFO (default), WARNING, ERROR
    METERDRV_LOG_FORMAT  json (default) or text

Driver loggers carry the meter name and slave id as context, so every
record a driver emits can be attributed to one device on the bus.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER = "meterdrv"

# Attributes every LogRecord has; anything else was passed as extra
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "component",
}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, extras flattened into it"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "component": getattr(record, "component", record.name),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """
    Attaches the component name and any device context to each record.

    Per-call ``extra`` is merged over the adapter's own context. When a
    device is known its name prefixes the message so text output stays
    readable.
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        device = self.extra.get("device")
        if device:
            msg = f"{device}: {msg}"
        return msg, kwargs


def setup_logging(log_level: str | None = None, json_format: bool | None = None) -> logging.Logger:
    """
    Configure the ``meterdrv`` logger.

    Args:
        log_level: Level name; defaults to METERDRV_LOG_LEVEL or INFO
        json_format: JSON lines when True, plain text otherwise; defaults
            to METERDRV_LOG_FORMAT

    Returns:
        The configured root logger of the package
    """
    if log_level is None:
        log_level = os.environ.get("METERDRV_LOG_LEVEL", "INFO")
    if json_format is None:
        json_format = os.environ.get("METERDRV_LOG_FORMAT", "json").lower() == "json"

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_component_logger(component: str, **context: Any) -> ComponentLoggerAdapter:
    """
    Logger for one component, e.g. ``gateway.session`` or ``driver``.

    The package logger is configured from the environment on first use.
    Keyword arguments (``device``, ``slave_id``) become fields of every
    record logged through the adapter.
    """
    if not logging.getLogger(ROOT_LOGGER).handlers:
        setup_logging()
    logger = logging.getLogger(f"{ROOT_LOGGER}.{component}")
    return ComponentLoggerAdapter(logger, {"component": component, **context})


def log_register_read(
    logger: logging.LoggerAdapter,
    register: str,
    value: Any = None,
    success: bool = True,
    attempts: int = 1,
) -> None:
    """Log the outcome of a register or coil read"""
    extra = {"register": register, "attempts": attempts}
    if success:
        logger.debug(f"Read {register} = {value}", extra={**extra, "value": value})
    else:
        logger.error(f"Read {register} failed after {attempts} attempt(s)", extra=extra)


def log_register_write(
    logger: logging.LoggerAdapter,
    register: str,
    value: Any,
    success: bool = True,
    attempts: int = 1,
) -> None:
    """Log the outcome of a register or coil write"""
    extra = {"register": register, "value": value, "attempts": attempts}
    if success:
        logger.info(f"Write {register} = {value}", extra=extra)
    else:
        logger.error(f"Write {register} = {value} failed after {attempts} attempt(s)", extra=extra)


def log_exchange_retry(
    logger: logging.LoggerAdapter,
    register: str,
    attempt: int,
    retries: int,
    error: Exception,
) -> None:
    """Log a failed exchange that is about to be retried"""
    logger.warning(
        f"Exchange on {register} failed, retry {attempt}/{retries}: {error}",
        extra={"register": register, "attempt": attempt, "retries": retries},
    )
