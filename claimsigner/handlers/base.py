"""Base types, structs and validation helpers for handlers."""

import logging
from typing import TypeVar

import msgspec
from litestar.exceptions import ValidationException

from claimsigner.errors import MalformedSignatureInput
from claimsigner.hexcodec import decode_hex
from claimsigner.specifiers import DestinationInput

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Request/Response structs


class ClaimRequest(msgspec.Struct):
    """Request struct for building or signing a claim message."""

    destination: DestinationInput
    extra: str = ""  # hex, appended after the account hex


class RecoverRequest(msgspec.Struct):
    """Request struct for recovering the signer of a claim signature."""

    destination: DestinationInput
    signature: str
    extra: str = ""


class MessageResponse(msgspec.Struct):
    """Signable message for a destination, for signing by an external wallet."""

    account: str
    message: str
    message_hash: str


class SignedClaimResponse(msgspec.Struct):
    """Response for signing operations."""

    account: str
    message: str
    message_hash: str
    signature: str
    ethereum_address: str


class AddressResponse(msgspec.Struct):
    """Ethereum address of a signing key."""

    ethereum_address: str


class HealthResponse(msgspec.Struct):
    """Health check response."""

    status: str
    signer_loaded: bool


# Validation helpers


def decode_request(body: bytes, request_type: type[T]) -> T:
    """Decode and validate a JSON request body.

    Args:
        body: Raw request body
        request_type: msgspec Struct type to decode into

    Returns:
        The decoded request

    Raises:
        ValidationException: If decoding fails

    """
    try:
        return msgspec.json.decode(body, type=request_type)
    except (msgspec.ValidationError, msgspec.DecodeError) as e:
        raise ValidationException(detail=f"Validation error: {e}") from e


def parse_extra(extra: str) -> bytes:
    """Decode the optional hex ``extra`` field of a request."""
    try:
        return decode_hex(extra)
    except MalformedSignatureInput as e:
        raise ValidationException(detail=f"extra must be hex: {e}") from e
