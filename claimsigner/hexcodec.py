"""ASCII-hex rendering of raw bytes.

The airdrop runtime hex-expands the destination account before framing it
into the signable message, and compares the result byte for byte. The output
here is therefore raw bytes, not ``str``, and always lowercase.
"""

import re

from .errors import MalformedSignatureInput
from .types import AccountHex

_ASCII_HEX_RE = re.compile(rb"(?:[0-9a-f]{2})*")
_HEX_TEXT_RE = re.compile(r"[0-9a-fA-F]*")


def to_ascii_hex(data: bytes) -> AccountHex:
    """Render ``data`` as lowercase ASCII-hex bytes, high nibble first.

    ``to_ascii_hex(b"\\x2a\\xff") == b"2aff"``
    """
    return AccountHex(bytes(data).hex().encode("ascii"))


def from_ascii_hex(data: bytes) -> bytes:
    """Invert :func:`to_ascii_hex`.

    Only the exact form produced by :func:`to_ascii_hex` is accepted: even
    length, lowercase ``0-9a-f``, no prefix and no whitespace.

    Raises:
        MalformedSignatureInput: If ``data`` is not lowercase ASCII hex of whole bytes

    """
    if _ASCII_HEX_RE.fullmatch(data) is None:
        raise MalformedSignatureInput(
            f"Expected even-length lowercase ASCII hex, got {len(data)} bytes",
        )
    return bytes.fromhex(data.decode("ascii"))


def decode_hex(text: str) -> bytes:
    """Decode user-supplied hex text (optional ``0x`` prefix, either case)."""
    cleaned = text.strip().removeprefix("0x").removeprefix("0X")
    if len(cleaned) % 2 != 0:
        raise MalformedSignatureInput(
            f"Hex string has odd length {len(cleaned)}, expected whole bytes",
        )
    if _HEX_TEXT_RE.fullmatch(cleaned) is None:
        raise MalformedSignatureInput(f"Invalid hex string: {text!r}")
    return bytes.fromhex(cleaned)


def encode_hex(data: bytes) -> str:
    """Return ``0x``-prefixed lowercase hex text."""
    return f"0x{bytes(data).hex()}"
