"""Shared test fixtures for compactjwt."""

import pytest

from compactjwt.crypto.algorithms import Algorithm
from compactjwt.crypto.keys import generate_ec_keypair, generate_rsa_keypair
from compactjwt.crypto.types import SigningKeyData

SECRET = "secret"


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for test settings."""
    monkeypatch.setenv("JWT_ISSUER", "http://localhost:8000")


@pytest.fixture(scope="session")
def rsa_keypair() -> SigningKeyData:
    """One RSA keypair shared by the whole session."""
    return generate_rsa_keypair(Algorithm.RS256)


@pytest.fixture(scope="session")
def ec_keypairs() -> dict[Algorithm, SigningKeyData]:
    """EC keypairs on the curve matching each ES* algorithm."""
    return {
        alg: generate_ec_keypair(alg)
        for alg in (Algorithm.ES256, Algorithm.ES384, Algorithm.ES512)
    }


@pytest.fixture(scope="session")
def signing_material(
    rsa_keypair: SigningKeyData, ec_keypairs: dict[Algorithm, SigningKeyData]
) -> dict[Algorithm, str]:
    """Key material able to sign, for every algorithm."""
    material = {Algorithm.NONE: ""}
    for alg in Algorithm:
        if alg.family == "hmac":
            material[alg] = SECRET
        elif alg.family == "rsa":
            material[alg] = rsa_keypair.private_key_pem
        elif alg.family == "ec":
            material[alg] = ec_keypairs[alg].private_key_pem
    return material
