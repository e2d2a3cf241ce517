"""
Input normalization for addresses, words and unsigned integers.

Everything entering a message or a host call goes through here so the
hashing code can assume canonical values.
"""

from __future__ import annotations

from typing import Union

from eth_utils import is_address, to_bytes, to_canonical_address, to_checksum_address

UINT256_MAX = 2**256 - 1
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

HexOrBytes = Union[str, bytes, bytearray]


def normalize_address(value: HexOrBytes) -> str:
    """Return the EIP-55 checksummed form of an address."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise ValueError(f"Address must be 20 bytes, got {len(value)}")
        return to_checksum_address(bytes(value))
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Invalid address: {value!r}")
    return to_checksum_address(value)


def address_bytes(value: HexOrBytes) -> bytes:
    return to_canonical_address(normalize_address(value))


def validate_uint256(value: int, name: str = "value") -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"{name} out of uint256 range: {value}")
    return value


def to_data_bytes(value: HexOrBytes) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return to_bytes(hexstr=value) if value else b""
    raise TypeError(f"Expected bytes or hex string, got {type(value).__name__}")


def to_word(value: HexOrBytes, name: str = "word") -> bytes:
    raw = to_data_bytes(value)
    if len(raw) > 32:
        raise ValueError(f"{name} must be at most 32 bytes, got {len(raw)}")
    return raw.rjust(32, b"\x00")
