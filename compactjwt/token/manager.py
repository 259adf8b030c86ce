"""Token issuance and verification with fixed issuer, audience and lifetime."""

import time

from compactjwt.core.settings import ACCESS_TOKEN_TTL_DEFAULT, TokenSettings
from compactjwt.crypto.algorithms import Algorithm, string_to_alg
from compactjwt.crypto.keys import Key
from compactjwt.crypto.types import TokenClaims
from compactjwt.token import validators as validate
from compactjwt.token.jwt import JWT
from compactjwt.token.validators import Validator

# iat/nbf are set this far in the past so strict "< now" checks pass at once.
CLOCK_SKEW_SECONDS = 1


class JWTManager:
    """Creates and verifies tokens for one issuer and signing key.

    ``key_material`` signs; ``verify_key_material`` (a public PEM for RS*/ES*)
    verifies and defaults to ``key_material``.
    """

    def __init__(
        self,
        algorithm: Algorithm,
        key_material: str,
        issuer: str,
        audience: str | None = None,
        verify_key_material: str | None = None,
        access_token_ttl: int = ACCESS_TOKEN_TTL_DEFAULT,
    ) -> None:
        self._algorithm = algorithm
        self._key_material = key_material
        self._issuer = issuer
        self._audience = audience
        self._access_token_ttl = access_token_ttl
        self._verify_key = Key(
            algorithm,
            key_material if verify_key_material is None else verify_key_material,
        )

    @classmethod
    def from_settings(cls, settings: TokenSettings) -> "JWTManager":
        """Build a manager from environment-driven settings."""
        return cls(
            algorithm=string_to_alg(settings.algorithm),
            key_material=settings.secret.get_secret_value(),
            issuer=settings.issuer,
            audience=settings.get_audience(),
            access_token_ttl=settings.access_token_ttl,
        )

    def create_token(self, claims: TokenClaims, now: int | None = None) -> str:
        """Create a signed token carrying the registered time claims."""
        now = int(time.time()) if now is None else now
        ttl = claims.ttl_seconds or self._access_token_ttl
        payload = dict(claims.extra)
        payload.update(
            {
                "iss": self._issuer,
                "sub": claims.sub,
                "iat": str(now - CLOCK_SKEW_SECONDS),
                "nbf": str(now - CLOCK_SKEW_SECONDS),
                "exp": str(now + ttl),
            }
        )
        audience = claims.aud or self._audience
        if audience is not None:
            payload["aud"] = audience
        return JWT(self._algorithm, payload).token(self._key_material)

    def validators(self, now: int | None = None) -> list[Validator]:
        """Standard checks applied by :meth:`verify_token`."""
        now = int(time.time()) if now is None else now
        checks = [
            validate.exp(now),
            validate.nbf(now),
            validate.iat(now),
            validate.iss(self._issuer),
        ]
        if self._audience is not None:
            checks.append(validate.aud(self._audience))
        return checks

    def verify_token(self, token: str, now: int | None = None) -> JWT:
        """Verify a token's signature and standard claims."""
        return JWT.from_token(token, self._verify_key, self.validators(now))

    def is_valid(self, token: str, now: int | None = None) -> bool:
        """Boolean form of :meth:`verify_token`."""
        return JWT.verify(token, self._verify_key, self.validators(now))
