"""Base64 and base64url conversions as used by the attestation protocol.

Decoding treats '=' as a zero sextet, drops incomplete trailing bits and
strips trailing NUL bytes from the result.
"""

from __future__ import annotations

import base64
import string

_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "+/"
_DECODE = {ch: value for value, ch in enumerate(_ALPHABET)}
_DECODE["="] = 0


def base64_to_binary(base64_data: str) -> bytes:
    """Decode standard base64 text to bytes, stripping trailing NUL bytes."""
    accumulator = 0
    for ch in base64_data:
        try:
            accumulator = (accumulator << 6) | _DECODE[ch]
        except KeyError:
            raise ValueError(f"invalid base64 character {ch!r}") from None
    total_bits = len(base64_data) * 6
    byte_count = total_bits // 8
    accumulator >>= total_bits - byte_count * 8
    return accumulator.to_bytes(byte_count, "big").rstrip(b"\0")


def binary_to_base64(binary_data: bytes) -> str:
    """Encode bytes as padded standard base64 text."""
    return base64.b64encode(bytes(binary_data)).decode("ascii")


def binary_to_base64url(binary_data: bytes) -> str:
    """Encode bytes as base64url text without padding."""
    return base64.urlsafe_b64encode(bytes(binary_data)).decode("ascii").rstrip("=")


def base64url_to_binary(base64_data: str) -> bytes:
    """Decode base64url text (padding optional) to bytes."""
    return base64_to_binary(base64_data.replace("-", "+").replace("_", "/"))


def base64_encode(data: str) -> str:
    """Encode a text string (as UTF-8) to padded base64."""
    return binary_to_base64(data.encode("utf-8"))


def base64_decode(data: str) -> str:
    """Decode base64 text to a UTF-8 string, stripping trailing NUL characters."""
    return base64_to_binary(data).decode("utf-8")