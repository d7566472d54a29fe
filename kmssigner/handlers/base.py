"""Request/response structs and validation helpers for handlers."""

import msgspec
from litestar.exceptions import ValidationException

# Request/Response structs


class SignRequest(msgspec.Struct):
    """Request struct for signing a payload."""

    # 0x-prefixed (or bare) hex of the bytes to sign
    payload: str


class SignResponse(msgspec.Struct):
    """Response for signing operations."""

    signature: str


class PublicKeyResponse(msgspec.Struct):
    """Compressed public key of the signing key."""

    public_key: str


class HealthResponse(msgspec.Struct):
    """Health check response."""

    status: str
    public_key_cached: bool


sign_request_decoder = msgspec.json.Decoder(SignRequest)


# Validation helpers


def parse_sign_request(body: bytes) -> SignRequest:
    """Decode a sign request body.

    Raises:
        ValidationException: If the body is not a valid SignRequest

    """
    try:
        return sign_request_decoder.decode(body)
    except (msgspec.ValidationError, msgspec.DecodeError) as e:
        raise ValidationException(detail=f"Validation error: {e}") from e


def decode_hex_payload(value: str) -> bytes:
    """Decode a hex string, with or without 0x prefix, into bytes.

    Raises:
        ValidationException: If the string is not valid hex

    """
    try:
        return bytes.fromhex(value.removeprefix("0x"))
    except ValueError as e:
        raise ValidationException(detail=f"payload must be hex encoded: {e}") from e
