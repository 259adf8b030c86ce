"""Type definitions for signing keys and token issuance."""

from pydantic import BaseModel, Field


class SigningKeyData(BaseModel):
    """A PEM keypair for asymmetric token signing."""

    alg: str
    private_key_pem: str
    public_key_pem: str


class TokenClaims(BaseModel):
    """Claims bundle for token creation."""

    sub: str
    aud: str | None = None
    extra: dict[str, str] = Field(default_factory=dict)
    ttl_seconds: int | None = None
