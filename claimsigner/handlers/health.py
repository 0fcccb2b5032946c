"""Health check endpoints."""

from __future__ import annotations

from litestar import Controller, get
from litestar.response import Response

from claimsigner.signer import ClaimSigner

from .base import HealthResponse


class HealthController(Controller):  # type: ignore[misc]
    """Health check endpoints."""

    path = "/"

    @get("/health")  # type: ignore[untyped-decorator]
    async def health(self, signer: ClaimSigner) -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", signer_loaded=signer.has_key)

    @get("/upcheck", media_type="text/plain")  # type: ignore[untyped-decorator]
    async def upcheck(self) -> Response[str]:
        """Liveness probe returning plain ``OK``."""
        return Response(content="OK", media_type="text/plain")
