"""DER ECDSA-Sig-Value decoding.

Parses the ``SEQUENCE { r INTEGER, s INTEGER }`` structure from RFC 3279
section 2.2.3 and re-encodes it as the fixed-width ``r || s`` form expected by
secp256k1 verifiers. Only this one shape is understood.
"""

from .errors import MalformedSignature
from .types import RawSignature

SEQUENCE_TAG = 0x30
INTEGER_TAG = 0x02

# Width of r and s for a 256-bit curve order
SCALAR_SIZE = 32
RAW_SIGNATURE_SIZE = 2 * SCALAR_SIZE

# secp256k1 group order
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_HALF_ORDER = SECP256K1_ORDER // 2


def _read_length(data: bytes, offset: int) -> tuple[int, int]:
    """Read a DER length at ``offset``.

    Returns:
        Tuple of (content_length, offset_after_length)

    Raises:
        MalformedSignature: If the length is truncated or not minimally encoded

    """
    if offset >= len(data):
        raise MalformedSignature("Truncated DER length")

    first = data[offset]
    offset += 1
    if first < 0x80:
        return first, offset

    num_bytes = first & 0x7F
    # 0x80 is the indefinite form, which DER forbids
    if num_bytes == 0 or num_bytes > 2:
        raise MalformedSignature(f"Unsupported DER length prefix: {first:#04x}")
    if offset + num_bytes > len(data):
        raise MalformedSignature("Truncated DER length")

    length = int.from_bytes(data[offset : offset + num_bytes], "big")
    if length < 0x80 or length < (1 << (8 * (num_bytes - 1))):
        raise MalformedSignature("Non-minimal DER length encoding")
    return length, offset + num_bytes


def _read_scalar(data: bytes, offset: int, name: str) -> tuple[bytes, int]:
    """Read one INTEGER and return its magnitude left-padded to SCALAR_SIZE.

    Returns:
        Tuple of (padded_bytes, offset_after_integer)

    """
    if offset >= len(data) or data[offset] != INTEGER_TAG:
        raise MalformedSignature(f"Expected INTEGER tag for {name}")

    length, offset = _read_length(data, offset + 1)
    end = offset + length
    if length == 0:
        raise MalformedSignature(f"Empty INTEGER for {name}")
    if end > len(data):
        raise MalformedSignature(f"Truncated INTEGER for {name}")

    magnitude = data[offset:end]
    if magnitude[0] & 0x80:
        raise MalformedSignature(f"Negative INTEGER for {name}")

    # Strip sign padding; any other leading zeros are left to the width check
    if len(magnitude) > 1 and magnitude[0] == 0x00 and magnitude[1] & 0x80:
        magnitude = magnitude[1:]

    if len(magnitude) > SCALAR_SIZE:
        raise MalformedSignature(
            f"INTEGER {name} is {len(magnitude)} bytes, exceeds {SCALAR_SIZE}"
        )

    return magnitude.rjust(SCALAR_SIZE, b"\x00"), end


def decode_signature(der: bytes) -> RawSignature:
    """Decode a DER ECDSA signature into the 64-byte r||s form.

    Args:
        der: DER-encoded ECDSA-Sig-Value as returned by the authority

    Returns:
        r and s, each 32 bytes big-endian, concatenated

    Raises:
        MalformedSignature: If the input is not exactly one SEQUENCE holding
            two non-negative INTEGERs that each fit in 32 bytes

    """
    data = bytes(der)
    if not data or data[0] != SEQUENCE_TAG:
        raise MalformedSignature("Expected SEQUENCE tag")

    length, offset = _read_length(data, 1)
    if offset + length != len(data):
        raise MalformedSignature(
            f"SEQUENCE length {length} does not match {len(data) - offset} remaining bytes"
        )

    r, offset = _read_scalar(data, offset, "r")
    s, offset = _read_scalar(data, offset, "s")
    if offset != len(data):
        raise MalformedSignature("Unexpected data after s")

    return RawSignature(r + s)


def normalize_low_s(signature: RawSignature) -> RawSignature:
    """Return ``signature`` with s moved into the lower half of the curve order.

    Verifiers that enforce canonical signatures reject s > n/2. The flip to
    n - s yields an equally valid signature for the same digest and key.
    """
    if len(signature) != RAW_SIGNATURE_SIZE:
        raise MalformedSignature(
            f"Raw signature must be {RAW_SIGNATURE_SIZE} bytes, got {len(signature)}"
        )

    s = int.from_bytes(signature[SCALAR_SIZE:], "big")
    if s <= _HALF_ORDER:
        return signature
    s = SECP256K1_ORDER - s
    return RawSignature(signature[:SCALAR_SIZE] + s.to_bytes(SCALAR_SIZE, "big"))
