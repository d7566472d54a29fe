"""Tests for payload digests."""

import pytest

from kmssigner.digest import DIGEST_SIZE, keccak256


class TestKeccak256:
    """Tests for keccak256."""

    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            (b"", "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"),
            (b"hello", "1c8aff950685c2ed4bc3174f3472287b56d9517b9c948127319a09a7a36deac8"),
        ],
        ids=["empty", "hello"],
    )
    def test_known_vectors(self, payload: bytes, expected: str) -> None:
        """Test keccak-256 (not SHA3-256) known answers."""
        assert keccak256(payload).hex() == expected

    def test_fixed_length(self) -> None:
        """Test that every digest is 32 bytes regardless of input size."""
        for size in (0, 1, 31, 32, 33, 1000, 100_000):
            assert len(keccak256(b"\xab" * size)) == DIGEST_SIZE

    def test_deterministic(self) -> None:
        """Test that the same payload always hashes to the same digest."""
        assert keccak256(b"transaction body") == keccak256(b"transaction body")
        assert keccak256(b"transaction body") != keccak256(b"transaction body!")

    def test_accepts_bytearray_and_memoryview(self) -> None:
        """Test that buffer types hash like the equivalent bytes."""
        expected = keccak256(b"hello")
        assert keccak256(bytearray(b"hello")) == expected
        assert keccak256(memoryview(b"hello")) == expected
