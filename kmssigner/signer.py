"""Signing orchestration."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from .digest import keccak256
from .errors import SigningError
from .metrics import (
    PUBLIC_KEY_CACHE_HITS_TOTAL,
    SIGNING_DURATION_SECONDS,
    SIGNING_ERRORS_TOTAL,
    SIGNING_REQUESTS_TOTAL,
)
from .public_key_codec import decode_public_key
from .signature_codec import decode_signature, normalize_low_s

if TYPE_CHECKING:
    from .authority import SigningAuthority
    from .types import CompressedPublicKey, RawSignature

logger = logging.getLogger(__name__)


class SigningAdapter:
    """Turns a remote authority's DER responses into raw secp256k1 material.

    The two coroutines are the signature-provider callbacks a ledger client
    uses: ``sign_digest`` for every transaction and ``derive_public_key`` once
    to establish the account key.
    """

    def __init__(self, authority: SigningAuthority, canonical_s: bool = False) -> None:
        self._authority = authority
        self._canonical_s = canonical_s
        self._public_key: CompressedPublicKey | None = None

    @property
    def public_key_cached(self) -> bool:
        return self._public_key is not None

    async def sign_digest(self, payload: bytes) -> RawSignature:
        """
        Sign an arbitrary payload with the remote key.

        Args:
            payload: The bytes to sign; hashed with keccak-256 before signing

        Returns:
            The 64-byte r||s signature

        Raises:
            AuthorityUnavailable: If the authority could not be reached
            AuthorityRejected: If the authority refused the request
            MalformedSignature: If the authority's response cannot be decoded
        """
        SIGNING_REQUESTS_TOTAL.labels(operation="sign").inc()
        start_time = time.perf_counter()

        digest = keccak256(payload)
        try:
            der = await self._authority.sign(digest)
            signature = decode_signature(der)
        except SigningError as e:
            SIGNING_ERRORS_TOTAL.labels(operation="sign", error_type=type(e).__name__).inc()
            raise

        if self._canonical_s:
            signature = normalize_low_s(signature)

        SIGNING_DURATION_SECONDS.labels(operation="sign").observe(time.perf_counter() - start_time)
        logger.debug(f"Signed digest {digest.hex()[:16]}...")
        return signature

    async def derive_public_key(self) -> CompressedPublicKey:
        """
        Return the compressed public key of the remote signing key.

        The key is fetched from the authority on first use and cached; it
        never changes for a given key handle.

        Raises:
            AuthorityUnavailable: If the authority could not be reached
            AuthorityRejected: If the authority refused the request
            MalformedPublicKey: If the authority's response cannot be decoded
        """
        if self._public_key is not None:
            PUBLIC_KEY_CACHE_HITS_TOTAL.inc()
            return self._public_key

        SIGNING_REQUESTS_TOTAL.labels(operation="public_key").inc()
        start_time = time.perf_counter()

        try:
            der = await self._authority.get_public_key()
            public_key = decode_public_key(der)
        except SigningError as e:
            SIGNING_ERRORS_TOTAL.labels(operation="public_key", error_type=type(e).__name__).inc()
            raise

        SIGNING_DURATION_SECONDS.labels(operation="public_key").observe(
            time.perf_counter() - start_time
        )
        self._public_key = public_key
        logger.info(f"Derived public key 0x{public_key.hex()}")
        return public_key
