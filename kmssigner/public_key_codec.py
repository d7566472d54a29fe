"""SubjectPublicKeyInfo decoding for secp256k1 keys."""

from .errors import MalformedPublicKey
from .types import CompressedPublicKey

# SEQUENCE { SEQUENCE { id-ecPublicKey, secp256k1 }, BIT STRING (66 bytes) }
SPKI_PREFIX = bytes.fromhex("3056301006072a8648ce3d020106052b8104000a034200")

UNCOMPRESSED_POINT_SIZE = 65
COORDINATE_SIZE = 32


def decode_public_key(der: bytes) -> CompressedPublicKey:
    """Strip the SPKI prefix and return the compressed point.

    Args:
        der: DER-encoded SubjectPublicKeyInfo as returned by the authority

    Returns:
        0x02 (even y) or 0x03 (odd y) followed by the 32-byte x coordinate

    Raises:
        MalformedPublicKey: If the prefix differs or the point is not a
            65-byte uncompressed point

    """
    data = bytes(der)
    if not data.startswith(SPKI_PREFIX):
        raise MalformedPublicKey("SubjectPublicKeyInfo prefix is not secp256k1 EC")

    point = data[len(SPKI_PREFIX) :]
    if len(point) != UNCOMPRESSED_POINT_SIZE:
        raise MalformedPublicKey(
            f"Expected {UNCOMPRESSED_POINT_SIZE}-byte point, got {len(point)} bytes"
        )
    if point[0] != 0x04:
        raise MalformedPublicKey(f"Expected uncompressed point marker 0x04, got {point[0]:#04x}")

    x = point[1 : 1 + COORDINATE_SIZE]
    y = point[1 + COORDINATE_SIZE :]
    parity = b"\x03" if y[-1] & 1 else b"\x02"
    return CompressedPublicKey(parity + x)
