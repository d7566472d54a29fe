"""Test fixtures and utilities."""

from collections.abc import AsyncGenerator, Callable

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from litestar.testing import AsyncTestClient

from kmssigner.authority import LocalAuthority
from kmssigner.config import Config
from kmssigner.server import create_app
from kmssigner.signer import SigningAdapter
from kmssigner.types import DerPublicKey, DerSignature, Digest


class StubAuthority:
    """Signing authority returning canned responses and recording calls."""

    def __init__(
        self,
        signature: bytes = b"",
        public_key: bytes = b"",
        sign_error: Exception | None = None,
        public_key_error: Exception | None = None,
    ) -> None:
        self.signature = signature
        self.public_key = public_key
        self.sign_error = sign_error
        self.public_key_error = public_key_error
        self.sign_calls: list[bytes] = []
        self.public_key_calls = 0

    async def sign(self, digest: Digest) -> DerSignature:
        self.sign_calls.append(digest)
        if self.sign_error is not None:
            raise self.sign_error
        return DerSignature(self.signature)

    async def get_public_key(self) -> DerPublicKey:
        self.public_key_calls += 1
        if self.public_key_error is not None:
            raise self.public_key_error
        return DerPublicKey(self.public_key)


@pytest.fixture
def config() -> Config:
    """Create a test configuration using the in-process authority."""
    return Config(host="127.0.0.1", port=8080, log_level="DEBUG", authority="local")


@pytest.fixture
def private_key() -> ec.EllipticCurvePrivateKey:
    """Create a fresh secp256k1 private key."""
    return ec.generate_private_key(ec.SECP256K1())


@pytest.fixture
def spki(private_key: ec.EllipticCurvePrivateKey) -> bytes:
    """Return the DER SubjectPublicKeyInfo of the test key."""
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@pytest.fixture
def compressed_public_key(private_key: ec.EllipticCurvePrivateKey) -> bytes:
    """Return the 33-byte compressed point of the test key."""
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.CompressedPoint,
    )


@pytest.fixture
def local_authority(private_key: ec.EllipticCurvePrivateKey) -> LocalAuthority:
    """Create an in-process authority holding the test key."""
    return LocalAuthority(private_key)


@pytest.fixture
def adapter(local_authority: LocalAuthority) -> SigningAdapter:
    """Create an adapter backed by the local authority."""
    return SigningAdapter(local_authority)


@pytest.fixture
def make_stub_authority(spki: bytes) -> Callable[..., StubAuthority]:
    """Return a factory for stub authorities that serve a valid public key by default."""

    def _make(**kwargs: object) -> StubAuthority:
        kwargs.setdefault("public_key", spki)
        return StubAuthority(**kwargs)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def stub_authority(make_stub_authority: Callable[..., StubAuthority]) -> StubAuthority:
    """Create a stub authority that serves a valid public key."""
    return make_stub_authority()


@pytest.fixture
async def client(adapter: SigningAdapter) -> AsyncGenerator[AsyncTestClient, None]:
    """Create a test client backed by the local authority."""
    app = create_app(adapter=adapter)
    async with AsyncTestClient(app) as client:
        yield client


@pytest.fixture
async def stub_client(stub_authority: StubAuthority) -> AsyncGenerator[AsyncTestClient, None]:
    """Create a test client backed by the stub authority."""
    app = create_app(adapter=SigningAdapter(stub_authority))
    async with AsyncTestClient(app) as client:
        yield client
