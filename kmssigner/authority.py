"""Signing authority backends.

A signing authority holds the private key and performs the ECDSA operation.
The adapter only ever sees DER responses from it. Any object with the two
coroutine methods of :class:`SigningAuthority` can be used, so tests and
development setups can swap AWS KMS for an in-process key.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

from .errors import AuthorityRejected, AuthorityUnavailable
from .types import DerPublicKey, DerSignature, Digest

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)

SIGNING_ALGORITHM = "ECDSA_SHA_256"
MESSAGE_TYPE_DIGEST = "DIGEST"

# KMS error codes that are permanent for the key handle or request
REJECTED_ERROR_CODES = frozenset(
    {
        "NotFoundException",
        "DisabledException",
        "InvalidKeyUsageException",
        "KMSInvalidStateException",
        "ValidationException",
        "InvalidGrantTokenException",
        "UnsupportedOperationException",
        "IncorrectKeyException",
    }
)


class SigningAuthority(Protocol):
    """The external signing oracle.

    Implementations raise AuthorityUnavailable for transport or service
    failures and AuthorityRejected when the request itself is refused.
    """

    async def sign(self, digest: Digest) -> DerSignature: ...

    async def get_public_key(self) -> DerPublicKey: ...


class KmsAuthority:
    """AWS KMS backed signing authority.

    boto3 is synchronous, so each request runs in a worker thread. If the
    awaiting task is cancelled the thread's eventual response is dropped.
    """

    def __init__(self, client: Any, key_id: str) -> None:
        self._client = client
        self._key_id = key_id

    @property
    def key_id(self) -> str:
        return self._key_id

    @classmethod
    def from_config(cls, config: Config) -> KmsAuthority:
        """Build a KMS client from configuration."""
        if not config.kms_key_id:
            raise ValueError("kms_key_id is required for the KMS authority")

        boto_config = BotoConfig(
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            # One operation is one request; callers decide whether to retry
            retries={"total_max_attempts": 1, "mode": "standard"},
        )
        client = boto3.client(
            "kms",
            region_name=config.kms_region,
            endpoint_url=config.kms_endpoint_url,
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
            config=boto_config,
        )
        logger.info(f"Using KMS key {config.kms_key_id} in region {config.kms_region or 'default'}")
        return cls(client, config.kms_key_id)

    async def sign(self, digest: Digest) -> DerSignature:
        response = await self._call(
            "sign",
            KeyId=self._key_id,
            Message=bytes(digest),
            MessageType=MESSAGE_TYPE_DIGEST,
            SigningAlgorithm=SIGNING_ALGORITHM,
        )
        return DerSignature(bytes(response["Signature"]))

    async def get_public_key(self) -> DerPublicKey:
        response = await self._call("get_public_key", KeyId=self._key_id)
        return DerPublicKey(bytes(response["PublicKey"]))

    async def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        """Run a KMS API call and translate its failures."""
        method = getattr(self._client, operation)
        try:
            result: dict[str, Any] = await asyncio.to_thread(method, **kwargs)
            return result
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            message = e.response.get("Error", {}).get("Message", str(e))
            if code in REJECTED_ERROR_CODES:
                raise AuthorityRejected(f"KMS {operation} rejected ({code}): {message}") from e
            raise AuthorityUnavailable(f"KMS {operation} failed ({code}): {message}") from e
        except BotoCoreError as e:
            raise AuthorityUnavailable(f"KMS {operation} unavailable: {e}") from e


class LocalAuthority:
    """In-process secp256k1 key that behaves like a remote authority.

    Responses use the same DER encodings as KMS. Intended for development and
    tests only; the key lives in process memory.
    """

    def __init__(self, private_key: ec.EllipticCurvePrivateKey | None = None) -> None:
        if private_key is None:
            private_key = ec.generate_private_key(ec.SECP256K1())
        if not isinstance(private_key.curve, ec.SECP256K1):
            raise ValueError(f"LocalAuthority requires a secp256k1 key, got {private_key.curve.name}")
        self._private_key = private_key

    async def sign(self, digest: Digest) -> DerSignature:
        try:
            der = self._private_key.sign(bytes(digest), ec.ECDSA(Prehashed(hashes.SHA256())))
        except ValueError as e:
            raise AuthorityRejected(f"Local signing rejected digest: {e}") from e
        return DerSignature(der)

    async def get_public_key(self) -> DerPublicKey:
        der = self._private_key.public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return DerPublicKey(der)


def build_authority(config: Config) -> SigningAuthority:
    """Create the signing authority selected by ``config.authority``."""
    if config.authority == "local":
        logger.warning("Using an ephemeral local signing key, do not use in production")
        return LocalAuthority()
    return KmsAuthority.from_config(config)
