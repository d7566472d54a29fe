"""Type definitions for kmssigner.

This module contains NewType definitions for the byte strings that flow
between the authority, the codecs and the adapter.
"""

from typing import NewType

Digest = NewType("Digest", bytes)
"""32-byte keccak-256 digest of a payload."""

DerSignature = NewType("DerSignature", bytes)
"""DER-encoded ECDSA-Sig-Value (SEQUENCE of two INTEGERs)."""

RawSignature = NewType("RawSignature", bytes)
"""64-byte r||s signature, each half big-endian and zero-padded."""

DerPublicKey = NewType("DerPublicKey", bytes)
"""DER-encoded SubjectPublicKeyInfo for a secp256k1 key."""

CompressedPublicKey = NewType("CompressedPublicKey", bytes)
"""33-byte compressed curve point (parity byte + x coordinate)."""
