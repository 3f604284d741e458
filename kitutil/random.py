"""Cryptographically strong random integers.

Smaller values are carved from one 32-bit draw, most significant part first,
so four 8-bit or two 16-bit values cost one draw per thread.
"""

from __future__ import annotations

import secrets
import threading

__all__ = ["random32", "random16", "random8"]

_state = threading.local()


def random32() -> int:
    """Return a random 32-bit unsigned integer."""
    return secrets.randbits(32)


def _carve(kind: str, width: int) -> int:
    left_key, value_key = f"{kind}_left", f"{kind}_value"
    left = getattr(_state, left_key, 0)
    if not left:
        setattr(_state, value_key, random32())
        left = 32 // width
    left -= 1
    setattr(_state, left_key, left)
    return (getattr(_state, value_key) >> (left * width)) & ((1 << width) - 1)


def random16() -> int:
    """Return a random 16-bit unsigned integer."""
    return _carve("r16", 16)


def random8() -> int:
    """Return a random 8-bit unsigned integer."""
    return _carve("r8", 8)