"""Health check endpoints."""

from __future__ import annotations

from litestar import Controller, get

from kmssigner.signer import SigningAdapter  # noqa: TC001

from .base import HealthResponse


class HealthController(Controller):  # type: ignore[misc]
    """Health check endpoints."""

    path = "/"

    @get("/health")  # type: ignore[untyped-decorator]
    async def health(self, adapter: SigningAdapter) -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", public_key_cached=adapter.public_key_cached)
