import re
from typing import Union

from .errors import FormatError

HEX_BODY_PATTERN = re.compile(r"^[0-9a-fA-F]*$")


def strip_hex_prefix(value: str) -> str:
    if value.startswith("0x") or value.startswith("0X"):
        return value[2:]
    return value


def hex_to_bytes(value: Union[str, bytes, bytearray], field: str = "value") -> bytes:
    """Convert a hex string (0x optional) or bytes-like value to bytes."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise FormatError(f"{field} must be a hex string or bytes.")
    body = strip_hex_prefix(value.strip())
    if not HEX_BODY_PATTERN.match(body):
        raise FormatError(f"{field} must be a hex string.")
    if len(body) % 2 != 0:
        raise FormatError(f"{field} must have an even number of hex characters.")
    return bytes.fromhex(body)
