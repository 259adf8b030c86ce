"""Compact signed tokens: build, parse and verify JWT-style tokens."""

from compactjwt.core.errors import (
    InvalidAlgorithmError,
    InvalidKeyError,
    JWTError,
    MalformedTokenError,
    SignatureInvalidError,
    ValidationFailedError,
)
from compactjwt.crypto.algorithms import Algorithm, alg_to_string, string_to_alg
from compactjwt.crypto.backend import init_crypto_backend
from compactjwt.crypto.keys import Key
from compactjwt.token import validators as validate
from compactjwt.token.jwt import JWT
from compactjwt.token.manager import JWTManager

__version__ = "0.1.0"

__all__ = [
    "JWT",
    "Algorithm",
    "InvalidAlgorithmError",
    "InvalidKeyError",
    "JWTError",
    "JWTManager",
    "Key",
    "MalformedTokenError",
    "SignatureInvalidError",
    "ValidationFailedError",
    "alg_to_string",
    "init_crypto_backend",
    "string_to_alg",
    "validate",
]
