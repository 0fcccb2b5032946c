"""Destination specifier types.

A claim credits a destination account that may be given as a small numeric
id (tests and dev chains), an SS58 chain address (production) or arbitrary
text. Each form is an explicit, tagged variant so that every input has one
deterministic encoding path; free text is resolved into a variant by
:func:`claimsigner.account.classify_destination`.

JSON form::

    {"kind": "numeric", "value": 42}
    {"kind": "address", "address": "5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY"}
    {"kind": "raw", "text": "alice"}
"""

import msgspec

U64_MAX = 2**64 - 1


class Numeric(
    msgspec.Struct,
    frozen=True,
    tag_field="kind",
    tag="numeric",
):
    """Numeric account id, encoded as a little-endian u64."""

    value: int


class ChainAddress(
    msgspec.Struct,
    frozen=True,
    tag_field="kind",
    tag="address",
):
    """SS58 (or 0x hex) address of a 32-byte account public key."""

    address: str


class RawText(
    msgspec.Struct,
    frozen=True,
    tag_field="kind",
    tag="raw",
):
    """Arbitrary text, encoded as its UTF-8 bytes."""

    text: str


DestinationSpecifier = Numeric | ChainAddress | RawText

# Request bodies may carry either a tagged variant or a bare string/integer
# that is classified on arrival.
DestinationInput = Numeric | ChainAddress | RawText | str | int

destination_decoder = msgspec.json.Decoder(DestinationSpecifier)


def describe(specifier: DestinationSpecifier) -> str:
    """Short human-readable form for logs."""
    match specifier:
        case Numeric(value=value):
            return f"numeric:{value}"
        case ChainAddress(address=address):
            return f"address:{address}"
        case RawText(text=text):
            return f"raw:{text!r}"
        case _:
            raise TypeError(f"Unknown destination specifier: {type(specifier)}")
