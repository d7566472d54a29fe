"""Tests for SubjectPublicKeyInfo decoding."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from kmssigner.errors import MalformedPublicKey
from kmssigner.public_key_codec import SPKI_PREFIX, decode_public_key

X = bytes(range(1, 33))


def spki_for(y_last: int) -> bytes:
    """Build an SPKI around a synthetic uncompressed point."""
    y = b"\x55" * 31 + bytes([y_last])
    return SPKI_PREFIX + b"\x04" + X + y


class TestDecodePublicKey:
    """Tests for decode_public_key."""

    def test_prefix_constant(self) -> None:
        """Test the hard-coded prefix (id-ecPublicKey + secp256k1 + BIT STRING header)."""
        assert SPKI_PREFIX.hex() == "3056301006072a8648ce3d020106052b8104000a034200"

    @pytest.mark.parametrize(
        ("y_last", "parity"),
        [(0x00, 0x02), (0x02, 0x02), (0xFE, 0x02), (0x01, 0x03), (0x03, 0x03), (0xFF, 0x03)],
    )
    def test_parity_byte(self, y_last: int, parity: int) -> None:
        """Test that even y gives 0x02 and odd y gives 0x03."""
        compressed = decode_public_key(spki_for(y_last))

        assert len(compressed) == 33
        assert compressed[0] == parity
        assert compressed[1:] == X

    def test_matches_reference_compression(
        self, spki: bytes, compressed_public_key: bytes
    ) -> None:
        """Test against cryptography's own compressed point encoding."""
        assert decode_public_key(spki) == compressed_public_key

    def test_many_real_keys(self) -> None:
        """Test both parities occur and decode correctly across random keys."""
        parities = set()
        for _ in range(20):
            public_key = ec.generate_private_key(ec.SECP256K1()).public_key()
            der = public_key.public_bytes(
                encoding=serialization.Encoding.DER,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
            expected = public_key.public_bytes(
                encoding=serialization.Encoding.X962,
                format=serialization.PublicFormat.CompressedPoint,
            )
            compressed = decode_public_key(der)
            assert compressed == expected
            parities.add(compressed[0])
        assert parities <= {0x02, 0x03}

    @pytest.mark.parametrize("index", [0, 5, 12, 17, 21, 22])
    def test_prefix_bit_flip(self, index: int, spki: bytes) -> None:
        """Test that a one-bit change anywhere in the prefix is rejected."""
        corrupted = bytearray(spki)
        corrupted[index] ^= 0x01
        with pytest.raises(MalformedPublicKey, match="prefix"):
            decode_public_key(bytes(corrupted))

    def test_other_curve_rejected(self) -> None:
        """Test that a P-256 key is not mistaken for secp256k1."""
        der = ec.generate_private_key(ec.SECP256R1()).public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        with pytest.raises(MalformedPublicKey):
            decode_public_key(der)

    @pytest.mark.parametrize(
        "der",
        [
            SPKI_PREFIX,
            spki_for(0x02)[:-1],
            spki_for(0x02) + b"\x00",
            b"",
        ],
        ids=["prefix_only", "truncated_point", "extra_byte", "empty"],
    )
    def test_wrong_length(self, der: bytes) -> None:
        """Test that anything but a 65-byte point after the prefix is rejected."""
        with pytest.raises(MalformedPublicKey):
            decode_public_key(der)

    def test_compressed_point_marker_rejected(self) -> None:
        """Test that the point must be uncompressed (0x04)."""
        der = SPKI_PREFIX + b"\x02" + X + b"\x00" * 32
        with pytest.raises(MalformedPublicKey, match="0x04"):
            decode_public_key(der)
