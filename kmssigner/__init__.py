"""kmssigner - raw secp256k1 signatures from a remotely custodied key."""

__version__ = "0.1.0"
