"""The token entity: build, inspect, and verify compact signed tokens.

Tokens come from three flows:

* ``JWT(alg, claims, header)`` builds a token in memory;
* ``JWT.parse(token)`` decodes untrusted text without checking anything;
* ``JWT.from_token(token, key, validators)`` checks the signature and the
  claims and raises on the first failure.

``JWT.verify`` runs the same checks as ``from_token`` but answers with a
plain boolean instead of raising.
"""

from collections.abc import Iterable, Mapping

from compactjwt.core.errors import (
    JWTError,
    SignatureInvalidError,
    ValidationFailedError,
)
from compactjwt.core.logging import get_logger
from compactjwt.crypto.algorithms import Algorithm, alg_to_string, string_to_alg
from compactjwt.crypto.keys import Key
from compactjwt.token.codec import (
    Pairs,
    TokenParts,
    decode_segment,
    encode_token,
    split_token,
)
from compactjwt.token.validators import (
    Validator,
    first_failure,
    validate_all,
    validator_name,
)

logger = get_logger(__name__)


def _signature_matches(parts: TokenParts, key: Key) -> bool:
    return key.verify(parts.signing_input.encode("utf-8"), parts.signature)


class JWT:
    """A token's algorithm, header and claims."""

    def __init__(
        self,
        alg: Algorithm,
        claims: Mapping[str, str] | None = None,
        header: Mapping[str, str] | None = None,
    ) -> None:
        self._alg = alg
        self._claims: Pairs = dict(claims or {})
        self._header: Pairs = dict(header or {})
        self._header["typ"] = "JWT"
        self._header["alg"] = alg_to_string(alg)

    @classmethod
    def _from_parts(cls, alg: Algorithm, claims: Pairs, header: Pairs) -> "JWT":
        token = cls.__new__(cls)
        token._alg = alg
        token._claims = claims
        token._header = header
        return token

    @classmethod
    def parse(cls, token: str) -> "JWT":
        """Decode a token without verifying its signature or claims.

        The result is untrusted and must not be used for authorization.
        The algorithm comes from the header's ``alg``; a missing or empty
        value means ``none``.
        """
        parts = split_token(token)
        header = decode_segment(parts.header)
        claims = decode_segment(parts.claims)
        alg_name = header.get("alg", "")
        alg = string_to_alg(alg_name) if alg_name else Algorithm.NONE
        return cls._from_parts(alg, claims, header)

    @classmethod
    def from_token(
        cls, token: str, key: Key, validators: Iterable[Validator] = ()
    ) -> "JWT":
        """Verify a token with ``key`` and ``validators`` and return it.

        Raises:
            MalformedTokenError: the token cannot be split or decoded.
            SignatureInvalidError: the signature does not match.
            ValidationFailedError: a validator rejected the claims.
        """
        parts = split_token(token)
        if not _signature_matches(parts, key):
            logger.debug("Token signature rejected", alg=key.alg.value)
            raise SignatureInvalidError("Signature is invalid.")
        header = decode_segment(parts.header)
        claims = decode_segment(parts.claims)
        failed = first_failure(claims, validators)
        if failed is not None:
            name = validator_name(failed)
            logger.debug("Token claims rejected", validator=name)
            raise ValidationFailedError(f"Invalid token: {name} failed.")
        return cls._from_parts(key.alg, claims, header)

    @staticmethod
    def verify(token: str, key: Key, validators: Iterable[Validator] = ()) -> bool:
        """Check a token's signature and claims; False on any failure."""
        try:
            parts = split_token(token)
            if not _signature_matches(parts, key):
                return False
            claims = decode_segment(parts.claims)
        except JWTError as exc:
            logger.debug("Token verification failed", alg=key.alg.value, kind=exc.code)
            return False
        return validate_all(claims, validators)

    @property
    def alg(self) -> Algorithm:
        return self._alg

    @property
    def header(self) -> Pairs:
        return dict(self._header)

    @property
    def claims(self) -> Pairs:
        return dict(self._claims)

    def claim(self, name: str) -> str:
        """Return a claim's value, or an empty string when it is absent."""
        return self._claims.get(name, "")

    def token(self, key_material: str = "") -> str:
        """Encode and sign with a key built from this token's algorithm."""
        return encode_token(self._header, self._claims, Key(self._alg, key_material))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JWT):
            return NotImplemented
        return (
            self._alg == other._alg
            and self._header == other._header
            and self._claims == other._claims
        )

    def __repr__(self) -> str:
        return f"JWT(alg={self._alg.value}, claims={self._claims!r})"
