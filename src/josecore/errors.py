"""JOSE errors.

All errors raised by :mod:`josecore` derive from :class:`Error`.
Cryptographic verification failures (:class:`SignatureMismatch` and
:class:`CiphertextAuthenticationFailed`) never carry detail about what
exactly failed.

"""
from typing import Any


class Error(Exception):
    """Generic JOSE Error."""


class DeserializationError(Error):
    """JSON deserialization error."""

    def __str__(self) -> str:
        return "Deserialization error: {0}".format(
            super().__str__())


class SerializationError(Error):
    """JSON serialization error."""


class UnrecognizedTypeError(DeserializationError):
    """Unrecognized type error.

    :ivar str typ: The unrecognized type of the JSON object.
    :ivar jobj: Full JSON object.

    """

    def __init__(self, typ: str, jobj: Any) -> None:
        self.typ = typ
        self.jobj = jobj
        super().__init__(str(self))

    def __str__(self) -> str:
        return '{0} was not recognized, full message: {1}'.format(
            self.typ, self.jobj)


class MalformedSerialization(DeserializationError):
    """Compact or JSON serialization is structurally invalid.

    Wrong number of parts, bad Base64url, truncated or mistyped JSON.

    """


class InvalidKeyError(Error):
    """Key material is malformed or of an unsupported kind."""


class UnsupportedAlgorithm(Error):
    """Algorithm is unknown, not permitted, or disabled.

    :ivar str alg: Offending algorithm name, if known.

    """

    def __init__(self, alg: Any = None, reason: str = 'not supported') -> None:
        self.alg = alg
        super().__init__(f'{alg}: {reason}' if alg is not None else reason)


class AlgorithmKeyMismatch(Error):
    """Key cannot be used with the requested algorithm."""


class UnsupportedCriticalParameter(Error):
    """Header lists a critical parameter that cannot be processed.

    :ivar tuple names: The critical parameter names at fault.

    """

    def __init__(self, *names: str) -> None:
        self.names = names
        super().__init__(', '.join(names) if names else 'invalid "crit"')


class SignatureMismatch(Error):
    """JWS signature did not verify."""

    def __init__(self) -> None:
        super().__init__('Signature verification failed')


class CiphertextAuthenticationFailed(Error):
    """JWE decryption failed.

    Raised for every cryptographic failure during decryption, whatever
    its cause.

    """

    def __init__(self) -> None:
        super().__init__('Ciphertext authentication failed')


class ClaimValidationError(Error):
    """JWT claims set did not validate.

    :ivar str claim: Name of the claim at fault.

    """

    claim = NotImplemented

    def __init__(self, message: str, claim: Any = None) -> None:
        if claim is not None:
            self.claim = claim
        super().__init__(message)


class ExpiredToken(ClaimValidationError):
    """Token has expired ("exp")."""
    claim = 'exp'


class ImmatureToken(ClaimValidationError):
    """Token is not yet valid ("nbf")."""
    claim = 'nbf'


class InvalidIssuer(ClaimValidationError):
    """Issuer ("iss") does not match."""
    claim = 'iss'


class InvalidAudience(ClaimValidationError):
    """Audience ("aud") does not match."""
    claim = 'aud'


class MissingClaim(ClaimValidationError):
    """A required claim is absent."""
