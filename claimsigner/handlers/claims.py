"""Claim message and signing endpoints."""

from __future__ import annotations

import asyncio
import logging

from litestar import Controller, Request, Response, get, post
from litestar.exceptions import HTTPException, NotFoundException, ValidationException
from litestar.status_codes import HTTP_200_OK, HTTP_500_INTERNAL_SERVER_ERROR

from claimsigner.codec import keccak256, recover_address
from claimsigner.errors import ClaimSignerError, SigningError
from claimsigner.hexcodec import encode_hex
from claimsigner.signer import ClaimSigner

from .base import (
    AddressResponse,
    ClaimRequest,
    MessageResponse,
    RecoverRequest,
    SignedClaimResponse,
    decode_request,
    parse_extra,
)

logger = logging.getLogger(__name__)


class ClaimsController(Controller):  # type: ignore[misc]
    """Airdrop claim endpoints."""

    path = "/api/v1/claims"

    @get("/address")  # type: ignore[untyped-decorator]
    async def address(self, signer: ClaimSigner) -> AddressResponse:
        """GET /api/v1/claims/address - Address of the loaded signing key."""
        if signer.address is None:
            raise NotFoundException(detail="No signing key loaded")
        return AddressResponse(ethereum_address=signer.address)

    @post("/message", status_code=HTTP_200_OK)  # type: ignore[untyped-decorator]
    async def message(self, request: Request, signer: ClaimSigner) -> MessageResponse:
        """POST /api/v1/claims/message - Build the signable message for a destination."""
        claim_request = decode_request(await request.body(), ClaimRequest)
        extra = parse_extra(claim_request.extra)

        try:
            account, message = signer.build_message(claim_request.destination, extra)
        except ClaimSignerError as e:
            raise ValidationException(detail=str(e)) from e

        return MessageResponse(
            account=encode_hex(account),
            message=encode_hex(message),
            message_hash=encode_hex(keccak256(message)),
        )

    @post("/sign", status_code=HTTP_200_OK)  # type: ignore[untyped-decorator]
    async def sign(self, request: Request, signer: ClaimSigner) -> Response | SignedClaimResponse:
        """POST /api/v1/claims/sign - Sign a claim with the loaded key."""
        if not signer.has_key:
            raise NotFoundException(detail="No signing key loaded")

        claim_request = decode_request(await request.body(), ClaimRequest)
        extra = parse_extra(claim_request.extra)

        try:
            claim = await asyncio.to_thread(
                signer.sign_claim,
                claim_request.destination,
                extra,
            )
        except SigningError as e:
            logger.exception("Signing error")
            raise HTTPException(
                status_code=HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Signing failed: {e}",
            ) from e
        except ClaimSignerError as e:
            raise ValidationException(detail=str(e)) from e

        signature_hex = encode_hex(claim.signature)

        accept_header = request.headers.get("Accept", "")
        if accept_header == "text/plain":
            return Response(
                content=signature_hex,
                status_code=HTTP_200_OK,
                media_type="text/plain",
            )

        return SignedClaimResponse(**claim.to_dict())

    @post("/recover", status_code=HTTP_200_OK)  # type: ignore[untyped-decorator]
    async def recover(self, request: Request, signer: ClaimSigner) -> AddressResponse:
        """POST /api/v1/claims/recover - Recover the signer of a claim signature."""
        recover_request = decode_request(await request.body(), RecoverRequest)
        extra = parse_extra(recover_request.extra)

        try:
            _, message = signer.build_message(recover_request.destination, extra)
            address = recover_address(message, recover_request.signature)
        except ClaimSignerError as e:
            raise ValidationException(detail=str(e)) from e

        return AddressResponse(ethereum_address=address)
