"""Exception hierarchy for token construction, parsing, and verification."""


class JWTError(Exception):
    """Base exception for all token failures."""

    code = "JWT_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MalformedTokenError(JWTError):
    """Token text is structurally broken or its segments cannot be decoded."""

    code = "MALFORMED_TOKEN"


class InvalidAlgorithmError(JWTError):
    """An algorithm name is not one of the supported canonical strings."""

    code = "INVALID_ALGORITHM"


class InvalidKeyError(JWTError):
    """Key material cannot be used with the requested algorithm."""

    code = "INVALID_KEY"


class SignatureInvalidError(JWTError):
    """Signature segment does not match the signing input."""

    code = "SIGNATURE_INVALID"


class ValidationFailedError(JWTError):
    """A claim validator rejected the token's claims."""

    code = "VALIDATION_FAILED"
