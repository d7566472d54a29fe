"""Remote signing API endpoints."""

from __future__ import annotations

import logging

from litestar import Controller, Request, Response, get, post
from litestar.exceptions import HTTPException
from litestar.status_codes import (
    HTTP_200_OK,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from kmssigner.errors import AuthorityUnavailable, SigningError
from kmssigner.signer import SigningAdapter  # noqa: TC001

from .base import (
    PublicKeyResponse,
    SignResponse,
    decode_hex_payload,
    parse_sign_request,
)

logger = logging.getLogger(__name__)


def to_http_exception(error: SigningError) -> HTTPException:
    """Map an adapter error onto an HTTP status.

    An unreachable authority is a 503 the client may retry. Rejections and
    undecodable responses are upstream faults and map to 502.
    """
    if isinstance(error, AuthorityUnavailable):
        return HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    return HTTPException(status_code=HTTP_502_BAD_GATEWAY, detail=str(error))


class SigningController(Controller):  # type: ignore[misc]
    """Remote signing API endpoints."""

    path = "/api/v1"

    @get("/publicKey")  # type: ignore[untyped-decorator]
    async def public_key(self, adapter: SigningAdapter) -> PublicKeyResponse:
        """GET /api/v1/publicKey - Compressed public key of the signing key."""
        try:
            public_key = await adapter.derive_public_key()
        except SigningError as e:
            logger.warning(f"Public key request failed: {e}")
            raise to_http_exception(e) from e

        return PublicKeyResponse(public_key=f"0x{public_key.hex()}")

    @post("/sign", status_code=HTTP_200_OK)  # type: ignore[untyped-decorator]
    async def sign(
        self,
        request: Request,
        adapter: SigningAdapter,
    ) -> Response | SignResponse:
        """POST /api/v1/sign - Sign a hex payload, returning a 64-byte r||s signature."""
        sign_request = parse_sign_request(await request.body())
        payload = decode_hex_payload(sign_request.payload)

        try:
            signature = await adapter.sign_digest(payload)
        except SigningError as e:
            logger.warning(f"Signing failed: {e}")
            raise to_http_exception(e) from e

        full_signature = f"0x{signature.hex()}"

        # JSON wins ties and wildcards; parameters such as charset are ignored
        best = request.accept.best_match(
            ["application/json", "text/plain"], default="application/json"
        )
        if best == "text/plain":
            return Response(
                content=full_signature,
                status_code=HTTP_200_OK,
                media_type="text/plain",
            )

        return SignResponse(signature=full_signature)
