"""Base16, base32, base32hex, base64 and base64url encoding and decoding.

Decoders stop quietly at the first character that does not belong to the
encoding. They return the decoded bytes together with the number of input
characters consumed.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "BaseEncodingError",
    "base16encode",
    "base16decode",
    "bin2hex",
    "hex2bin",
    "base32encode",
    "base32decode",
    "base32hexencode",
    "base32hexdecode",
    "base64encode",
    "base64decode",
    "base64urlencode",
    "base64urldecode",
]

_WHITESPACE = frozenset("\t\n ")
_PAD = "="


class BaseEncodingError(ValueError):
    """Raised when encoded text is malformed, e.g. padding is missing."""


def _ranged(first: str, last: str, start: int) -> dict[str, int]:
    return {chr(code): start + offset for offset, code in enumerate(range(ord(first), ord(last) + 1))}


@dataclass(frozen=True)
class _Config:
    radix: int
    padded: bool
    alphabet: str
    symbols: dict[str, int] = field(hash=False)

    @property
    def shift(self) -> int:
        return self.radix.bit_length() - 1

    @property
    def mask(self) -> int:
        return self.radix - 1


_BASE16_SYMBOLS = {
    **_ranged("0", "9", 0),
    **_ranged("A", "F", 10),
    **_ranged("a", "f", 10),
    "P": 15,  # the decode table has always accepted this
}
_BASE16_LOWER = _Config(16, False, "0123456789abcdef", _BASE16_SYMBOLS)
_BASE16_UPPER = _Config(16, False, "0123456789ABCDEF", _BASE16_SYMBOLS)

_BASE32 = _Config(
    32,
    False,
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567",
    {**_ranged("A", "Z", 0), **_ranged("2", "7", 26)},
)

_BASE32HEX = _Config(
    32,
    False,
    "0123456789ABCDEFGHIJKLMNOPQRSTUV",
    {**_ranged("0", "9", 0), **_ranged("A", "V", 10), **_ranged("a", "v", 10)},
)

_BASE64_CORE = {**_ranged("A", "Z", 0), **_ranged("a", "z", 26), **_ranged("0", "9", 52)}

_BASE64 = _Config(
    64,
    True,
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/",
    {**_BASE64_CORE, "+": 62, "/": 63},
)

_BASE64URL = _Config(
    64,
    False,
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_",
    {**_BASE64_CORE, "-": 62, "_": 63},
)


def _encode(data: bytes, cfg: _Config) -> str:
    shift, mask = cfg.shift, cfg.mask
    out: list[str] = []
    acc = 0
    nbits = 0

    for byte in bytes(data):
        acc = ((acc << 8) | byte) & 0xFFFF
        nbits += 8
        while nbits >= shift:
            out.append(cfg.alphabet[(acc >> (nbits - shift)) & mask])
            nbits -= shift

    if nbits:
        # Remaining bits become the high bits of one more output character
        out.append(cfg.alphabet[(acc << (shift - nbits)) & mask])
        nbits += 8 - shift

    if cfg.padded:
        while nbits % 8:
            out.append(_PAD)
            nbits += 8 - shift

    return "".join(out)


def _decode(text: str | bytes, cfg: _Config, skip_whitespace: bool) -> tuple[bytes, int]:
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("latin-1")

    shift = cfg.shift
    out = bytearray()
    nbits = padding = 0
    acc = 0
    consumed = 0

    while consumed < len(text):
        char = text[consumed]

        if char in _WHITESPACE:
            if skip_whitespace:
                consumed += 1
                continue
            break

        if char == _PAD:
            if not cfg.padded:
                break
            if (nbits + padding) % 8:
                if not padding and shift <= nbits < 8:
                    break
                consumed += 1
                padding += shift
            if (nbits + padding) % 8 == 0:
                break
            continue

        value = cfg.symbols.get(char)
        if value is None or padding:
            break

        nbits += shift
        acc = ((acc << shift) | value) & 0xFFFF
        consumed += 1
        if nbits >= 8:
            out.append((acc >> (nbits - 8)) & 0xFF)
            nbits -= 8

    if (nbits + padding) % 8:
        if cfg.padded:
            raise BaseEncodingError("Padding characters missing")
        if not padding and shift <= nbits < 8:
            consumed -= 1  # the last character carried no whole byte

    return bytes(out), consumed


def base16encode(data: bytes) -> str:
    """Encode bytes as upper-case hexadecimal."""
    return _encode(data, _BASE16_UPPER)


def base16decode(text: str | bytes, skip_whitespace: bool = False) -> tuple[bytes, int]:
    """Decode hexadecimal text; return (data, characters consumed)."""
    return _decode(text, _BASE16_LOWER, skip_whitespace)


def bin2hex(data: bytes, upper: bool = False) -> str:
    """Encode bytes as hexadecimal, lower case unless upper is true."""
    return _encode(data, _BASE16_UPPER if upper else _BASE16_LOWER)


def hex2bin(text: str | bytes) -> bytes:
    """Decode hexadecimal text, stopping at the first non-hex character."""
    data, _ = _decode(text, _BASE16_LOWER, False)
    return data


def base32encode(data: bytes) -> str:
    """Encode bytes as unpadded RFC 4648 base32."""
    return _encode(data, _BASE32)


def base32decode(text: str | bytes, skip_whitespace: bool = False) -> tuple[bytes, int]:
    """Decode RFC 4648 base32; return (data, characters consumed)."""
    return _decode(text, _BASE32, skip_whitespace)


def base32hexencode(data: bytes) -> str:
    """Encode bytes as unpadded base32hex."""
    return _encode(data, _BASE32HEX)


def base32hexdecode(text: str | bytes, skip_whitespace: bool = False) -> tuple[bytes, int]:
    """Decode base32hex (either case); return (data, characters consumed)."""
    return _decode(text, _BASE32HEX, skip_whitespace)


def base64encode(data: bytes) -> str:
    """Encode bytes as padded standard base64."""
    return _encode(data, _BASE64)


def base64decode(text: str | bytes, skip_whitespace: bool = False) -> tuple[bytes, int]:
    """Decode padded standard base64; return (data, characters consumed).

    Raises BaseEncodingError if the padding is missing.
    """
    return _decode(text, _BASE64, skip_whitespace)


def base64urlencode(data: bytes) -> str:
    """Encode bytes as unpadded URL-safe base64."""
    return _encode(data, _BASE64URL)


def base64urldecode(text: str | bytes) -> tuple[bytes, int]:
    """Decode unpadded URL-safe base64; return (data, characters consumed)."""
    return _decode(text, _BASE64URL, False)