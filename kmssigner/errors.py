"""Error taxonomy for signing operations.

Every error raised here propagates to the caller unchanged. Nothing in the
signing path recovers from these locally.
"""


class SigningError(Exception):
    """Base class for all signing adapter errors."""


class AuthorityError(SigningError):
    """The external signing authority failed to produce a result."""


class AuthorityUnavailable(AuthorityError):
    """Transient failure reaching the authority (network, timeout, credentials).

    The caller may retry the whole operation.
    """


class AuthorityRejected(AuthorityError):
    """The authority refused the request (bad key handle, malformed digest)."""


class MalformedSignature(SigningError):
    """The authority returned a signature that is not a valid ECDSA-Sig-Value."""


class MalformedPublicKey(SigningError):
    """The authority returned a public key that is not a secp256k1 SPKI."""
