"""
Register Codec

Converts raw 16-bit register words into scaled measurements, and raw
status words into actuator states.
"""

from ..common.config import RegisterKind
from ..common.exceptions import ConfigurationError, DecodeError

WORD_BASE = 65536
SIGN_BIT_DIVISOR = 32768


def decode(words: list[int], scale: float, signed: bool) -> float:
    """
    Assemble big-endian words into a scaled value.

    The meters flag negative values with bit 15 of the most significant
    word and otherwise store the magnitude, so the sign test looks only
    at words[0] and negates the whole scaled value. This is not two's
    complement.

    Args:
        words: One or two registers, most significant first
        scale: Factor applied to the assembled value
        signed: Whether bit 15 of the first word marks a negative value

    Returns:
        The scaled value as float
    """
    if len(words) not in (1, 2):
        raise DecodeError(f"Expected 1 or 2 registers, got {len(words)}")

    value = 0
    for word in words:
        if not 0 <= word <= 0xFFFF:
            raise DecodeError(f"Register value 0x{word:x} out of 16-bit range", raw_value=word)
        value = value * WORD_BASE + word

    result = value * scale
    if signed and words[0] // SIGN_BIT_DIVISOR == 1:
        result = -result
    return float(result)


def decode_status(raw: int, open_value: int, close_value: int) -> bool:
    """Map a raw status word to True (open) or False (closed)"""
    if raw == open_value:
        return True
    if raw == close_value:
        return False
    raise DecodeError(f"Bad register value 0x{raw:04x}", raw_value=raw)


def encode_command(kind: RegisterKind, command: int) -> bool | list[int]:
    """Shape a control command for the register kind it is written to"""
    if kind == RegisterKind.COIL:
        return command != 0
    elif kind == RegisterKind.HOLDING:
        return [command]
    elif kind == RegisterKind.INPUT:
        raise ConfigurationError("Input registers are read-only")
    raise ConfigurationError(f"Undefined register kind {kind!r}")
