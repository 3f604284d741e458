"""Bit masks stored most significant bit first.

Bit 0 is 0x80 of the first byte, so a network-order subnet mask /25 is
stored as ff ff ff 80.
"""

from __future__ import annotations

__all__ = [
    "bits_copy",
    "bits_equal",
    "bits_isset_any",
    "bits_set",
    "bits_clear",
    "bits_isset",
]


def _whole_bytes(num_bits: int) -> int:
    return (num_bits + 7) // 8


def _require(buffer: bytes | bytearray, num_bits: int) -> None:
    if num_bits < 0:
        raise ValueError("num_bits must not be negative")
    if len(buffer) < _whole_bytes(num_bits):
        raise ValueError(f"buffer of {len(buffer)} bytes is too short for {num_bits} bits")


def bits_copy(source: bytes, num_bits: int) -> bytes:
    """Return the first num_bits bits of source, with unused bits of the last byte zeroed."""
    _require(source, num_bits)
    copied = bytearray(source[: _whole_bytes(num_bits)])
    if num_bits % 8:
        copied[-1] &= (0xFF << (8 - num_bits % 8)) & 0xFF
    return bytes(copied)


def bits_equal(first: bytes, second: bytes, num_bits: int) -> bool:
    """Return whether the first num_bits bits of both buffers are equal."""
    _require(first, num_bits)
    _require(second, num_bits)
    whole = num_bits // 8
    if first[:whole] != second[:whole]:
        return False
    remainder = num_bits % 8
    return remainder == 0 or ((first[whole] ^ second[whole]) >> (8 - remainder)) == 0


def bits_isset_any(bits: bytes, num_bits: int) -> bool:
    """Return whether any of the first num_bits bits is set."""
    _require(bits, num_bits)
    whole = num_bits // 8
    if any(bits[:whole]):
        return True
    remainder = num_bits % 8
    return bool(remainder and bits[whole] & (0xFF << (8 - remainder)) & 0xFF)


def bits_set(bits: bytearray, index: int) -> None:
    """Set bit index in place."""
    bits[index // 8] |= 1 << (7 - index % 8)


def bits_clear(bits: bytearray, index: int) -> None:
    """Clear bit index in place."""
    bits[index // 8] &= ~(1 << (7 - index % 8)) & 0xFF


def bits_isset(bits: bytes, index: int) -> bool:
    """Return whether bit index is set."""
    return bool(bits[index // 8] & (1 << (7 - index % 8)))