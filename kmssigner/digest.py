"""Payload digests."""

from eth_hash.auto import keccak

from .types import Digest

DIGEST_SIZE = 32


def keccak256(payload: bytes) -> Digest:
    """Return the keccak-256 digest of ``payload``.

    This is the hash the consuming ledger verifies ECDSA signatures against,
    so the authority is always handed this digest, never the payload.
    """
    return Digest(keccak(bytes(payload)))
