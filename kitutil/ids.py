"""Fixed-size binary identifiers: 8-byte device ids and 16-byte GUIDs.

Both print as lower-case hexadecimal. Parsing text of the wrong length gives
the nil (all zero) identifier rather than raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .base_encode import bin2hex, hex2bin

__all__ = [
    "DEVICEID_SIZE",
    "DEVICEID_STR_LEN",
    "GUID_SIZE",
    "GUID_STR_LEN",
    "DeviceId",
    "Guid",
    "DEVICEID_NIL",
    "GUID_NIL",
    "deviceid_from_str",
    "deviceid_cmp",
    "guid_from_str",
    "guid_cmp",
    "md5_to_str",
]

DEVICEID_SIZE = 8
DEVICEID_STR_LEN = 2 * DEVICEID_SIZE
GUID_SIZE = 16
GUID_STR_LEN = 2 * GUID_SIZE


def _check_size(name: str, raw: bytes, size: int) -> bytes:
    raw = bytes(raw)
    if len(raw) != size:
        raise ValueError(f"{name} must be {size} bytes, not {len(raw)}")
    return raw


@dataclass(frozen=True, order=True)
class DeviceId:
    """An 8-byte device identifier."""

    bytes: bytes = b"\0" * DEVICEID_SIZE

    def __post_init__(self) -> None:
        object.__setattr__(self, "bytes", _check_size("DeviceId", self.bytes, DEVICEID_SIZE))

    def __str__(self) -> str:
        return bin2hex(self.bytes)


@dataclass(frozen=True, order=True)
class Guid:
    """A 16-byte globally unique identifier."""

    bytes: bytes = b"\0" * GUID_SIZE

    def __post_init__(self) -> None:
        object.__setattr__(self, "bytes", _check_size("Guid", self.bytes, GUID_SIZE))

    def __str__(self) -> str:
        return bin2hex(self.bytes)


DEVICEID_NIL = DeviceId()
GUID_NIL = Guid()


def _parse(text: str, size: int) -> Optional[bytes]:
    if len(text) != 2 * size:
        return None
    # Decoding stops at the first non-hex character; the rest stays zero.
    return hex2bin(text)[:size].ljust(size, b"\0")


def deviceid_from_str(text: str) -> DeviceId:
    """Parse 16 hex digits; any other length gives the nil device id."""
    raw = _parse(text, DEVICEID_SIZE)
    return DEVICEID_NIL if raw is None else DeviceId(raw)


def guid_from_str(text: str) -> Guid:
    """Parse 32 hex digits; any other length gives the nil GUID."""
    raw = _parse(text, GUID_SIZE)
    return GUID_NIL if raw is None else Guid(raw)


def _cmp(first: Optional[bytes], second: Optional[bytes]) -> int:
    if first is None:
        return 0 if second is None else -1
    if second is None:
        return 1
    return (first > second) - (first < second)


def deviceid_cmp(first: Optional[DeviceId], second: Optional[DeviceId]) -> int:
    """Compare two device ids bytewise; None sorts first. Returns -1, 0 or 1."""
    return _cmp(first and first.bytes, second and second.bytes)


def guid_cmp(first: Optional[Guid], second: Optional[Guid]) -> int:
    """Compare two GUIDs bytewise; None sorts first. Returns -1, 0 or 1."""
    return _cmp(first and first.bytes, second and second.bytes)


def md5_to_str(md5: Optional[bytes]) -> str:
    """Return a 16-byte MD5 digest as 32 hex digits; None gives all zeros."""
    return str(GUID_NIL if md5 is None else Guid(md5))