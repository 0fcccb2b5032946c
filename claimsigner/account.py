"""Destination account canonicalization.

Resolves a destination specifier into the raw account bytes that both the
signer and the airdrop runtime hex-expand into the signable message.
"""

import logging
import re

from scalecodec.utils.ss58 import ss58_decode

from .errors import EncodingOverflow, InvalidSpecifier, MalformedSignatureInput
from .hexcodec import decode_hex
from .specifiers import (
    U64_MAX,
    ChainAddress,
    DestinationInput,
    DestinationSpecifier,
    Numeric,
    RawText,
    describe,
)
from .types import AccountBytes

logger = logging.getLogger(__name__)

ACCOUNT_ID_LENGTH = 32

_DECIMAL_RE = re.compile(r"[0-9]+")


def encode_u64(value: int) -> AccountBytes:
    """Encode a numeric account id as 8 little-endian bytes.

    Raises:
        EncodingOverflow: If ``value`` is negative or does not fit in 64 bits

    """
    if value < 0 or value > U64_MAX:
        raise EncodingOverflow(f"Numeric account id {value} is outside the u64 range")
    return AccountBytes(value.to_bytes(8, "little"))


def decode_chain_address(address: str) -> AccountBytes | None:
    """Decode an SS58 (or ``0x`` hex) address to its 32-byte public key.

    Returns None when ``address`` is not a valid address of a 32-byte account;
    the address-format envelope (network prefix, checksum) is discarded.
    """
    if address.startswith("0x"):
        try:
            public_key = decode_hex(address)
        except MalformedSignatureInput:
            return None
    else:
        try:
            public_key = bytes.fromhex(ss58_decode(address))
        except (ValueError, IndexError):
            return None

    if len(public_key) != ACCOUNT_ID_LENGTH:
        return None
    return AccountBytes(public_key)


def classify_destination(text: str) -> DestinationSpecifier:
    """Resolve free text into a destination variant (first match wins).

    1. Decimal digits of a value below 2**64 -> :class:`Numeric`
    2. A decodable chain address -> :class:`ChainAddress`
    3. Anything else -> :class:`RawText`

    Raises:
        InvalidSpecifier: If ``text`` is empty

    """
    if not text:
        raise InvalidSpecifier("Destination must not be empty")

    if _DECIMAL_RE.fullmatch(text) is not None:
        value = int(text)
        if value <= U64_MAX:
            return Numeric(value=value)

    if decode_chain_address(text) is not None:
        return ChainAddress(address=text)

    return RawText(text=text)


def to_specifier(destination: DestinationInput) -> DestinationSpecifier:
    """Normalize a request destination (variant, string or integer) to a variant."""
    if isinstance(destination, (Numeric, ChainAddress, RawText)):
        return destination
    if isinstance(destination, bool):
        raise InvalidSpecifier("Destination must not be a boolean")
    if isinstance(destination, int):
        return Numeric(value=destination)
    if isinstance(destination, str):
        return classify_destination(destination)
    raise InvalidSpecifier(f"Unsupported destination type: {type(destination).__name__}")


def encode_account(destination: DestinationInput) -> AccountBytes:
    """Encode a destination into canonical account bytes.

    Args:
        destination: A tagged specifier, or free text / integer to classify

    Returns:
        8 bytes for numeric ids, 32 bytes for addresses, UTF-8 bytes for raw text

    Raises:
        EncodingOverflow: If a numeric id does not fit in 64 bits
        InvalidSpecifier: If an explicit address does not decode, or text is empty

    """
    specifier = to_specifier(destination)

    match specifier:
        case Numeric(value=value):
            account = encode_u64(value)
        case ChainAddress(address=address):
            decoded = decode_chain_address(address)
            if decoded is None:
                raise InvalidSpecifier(f"Not a valid 32-byte chain address: {address}")
            account = decoded
        case RawText(text=text):
            if not text:
                raise InvalidSpecifier("Raw text destination must not be empty")
            account = AccountBytes(text.encode("utf-8"))
        case _:
            raise InvalidSpecifier(f"Unknown destination specifier: {type(specifier)}")

    logger.debug(f"Encoded destination {describe(specifier)} to {len(account)} account bytes")
    return account
