"""Supported signing algorithms and their canonical names."""

from enum import Enum

from cryptography.hazmat.primitives import hashes

from compactjwt.core.errors import InvalidAlgorithmError

_DIGESTS: dict[str, type[hashes.HashAlgorithm]] = {
    "256": hashes.SHA256,
    "384": hashes.SHA384,
    "512": hashes.SHA512,
}


class Algorithm(str, Enum):
    """Closed set of token algorithms, valued by their wire names."""

    NONE = "none"
    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"

    @property
    def family(self) -> str:
        """Signing family: none, hmac, rsa or ec."""
        if self is Algorithm.NONE:
            return "none"
        return {"HS": "hmac", "RS": "rsa", "ES": "ec"}[self.value[:2]]

    def hash_algorithm(self) -> hashes.HashAlgorithm | None:
        """Digest used by this algorithm, or None for unsigned tokens."""
        if self is Algorithm.NONE:
            return None
        return _DIGESTS[self.value[2:]]()


def alg_to_string(alg: Algorithm) -> str:
    """Return the canonical, case-sensitive name of an algorithm."""
    return alg.value


def string_to_alg(value: str) -> Algorithm:
    """Look up an algorithm by exact canonical name."""
    try:
        return Algorithm(value)
    except ValueError:
        raise InvalidAlgorithmError(f"Invalid algorithm name: '{value}'.") from None
