"""Token settings loaded from environment variables."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

ACCESS_TOKEN_TTL_DEFAULT = 3600


class TokenSettings(BaseSettings):
    """Signing and claim defaults for issued tokens."""

    model_config = SettingsConfigDict(env_prefix="JWT_")

    algorithm: str = "HS256"
    secret: SecretStr = SecretStr("")
    issuer: str = "http://localhost:8000"
    audience: str = ""
    access_token_ttl: int = ACCESS_TOKEN_TTL_DEFAULT

    def get_audience(self) -> str | None:
        """Return the configured audience, or None when unset."""
        return self.audience or None
