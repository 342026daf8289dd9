"""
Utility functions for Meridian.

Provides fixed-length byte decoding, encoding, and time helpers.
"""

import base64
import hmac
import time
from typing import Optional, Union

from .errors import InvalidConfiguration


KYC_HASH_LENGTH = 32
REFERENCE_LENGTH = 32
REASON_LENGTH = 32
REDEMPTION_INFO_LENGTH = 64


def now_epoch() -> int:
    """Get current Unix timestamp as integer."""
    return int(time.time())


def b64e(b: bytes) -> str:
    """Base64 encode bytes to string."""
    return base64.b64encode(b).decode('ascii')


def b64d(s: str) -> bytes:
    """Base64 decode string to bytes."""
    return base64.b64decode(s.encode('ascii'))


def constant_time_compare(a: Union[str, bytes], b: Union[str, bytes]) -> bool:
    """
    Compare two strings/bytes in constant time to prevent timing attacks.
    """
    if isinstance(a, str):
        a = a.encode('utf-8')
    if isinstance(b, str):
        b = b.encode('utf-8')
    return hmac.compare_digest(a, b)


def validate_hex_string(s: str, expected_length: int = None) -> bool:
    """Validate that a string is valid hexadecimal."""
    try:
        if expected_length and len(s) != expected_length:
            return False
        bytes.fromhex(s)
        return True
    except (ValueError, TypeError):
        return False


def require_length(value: bytes, length: int, name: str) -> bytes:
    """Reject byte arrays that are not exactly ``length`` bytes."""
    if not isinstance(value, (bytes, bytearray)) or len(value) != length:
        observed = len(value) if isinstance(value, (bytes, bytearray)) else type(value).__name__
        raise InvalidConfiguration(
            f"{name} must be {length} bytes",
            {"field": name, "required": length, "observed": observed},
        )
    return bytes(value)


def fixed_bytes(value: Optional[Union[str, bytes]], length: int, name: str) -> bytes:
    """
    Decode a fixed-length byte array.

    Accepts raw bytes or a hex string (optionally ``0x``-prefixed). Absent
    values are zero-filled.
    """
    if value is None or value == "" or value == b"":
        return bytes(length)
    if isinstance(value, str):
        text = value[2:] if value.startswith("0x") else value
        if not validate_hex_string(text, expected_length=length * 2):
            raise InvalidConfiguration(
                f"{name} must be {length * 2} hex characters",
                {"field": name, "observed": len(text)},
            )
        value = bytes.fromhex(text)
    return require_length(value, length, name)


def text_to_fixed(text: str, length: int) -> bytes:
    """Encode free text into a zero-padded fixed-size field (truncating)."""
    raw = text.encode('utf-8')[:length]
    return raw + bytes(length - len(raw))
