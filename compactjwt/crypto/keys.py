"""Signing keys: algorithm-specific sign/verify strategies and keypair generation."""

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import constant_time, hmac, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)
from cryptography.hazmat.primitives.hashes import HashAlgorithm

from compactjwt.core.errors import InvalidKeyError, MalformedTokenError
from compactjwt.crypto.algorithms import Algorithm
from compactjwt.crypto.backend import init_crypto_backend
from compactjwt.crypto.types import SigningKeyData
from compactjwt.token.codec import b64url_decode, b64url_encode

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537

EC_CURVES: dict[Algorithm, type[ec.EllipticCurve]] = {
    Algorithm.ES256: ec.SECP256R1,
    Algorithm.ES384: ec.SECP384R1,
    Algorithm.ES512: ec.SECP521R1,
}

PrivateKey = rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey
PublicKey = rsa.RSAPublicKey | ec.EllipticCurvePublicKey


class NoneSigner:
    """Unsigned tokens: empty signature, every signature accepted."""

    def sign(self, data: bytes) -> str:
        return ""

    def verify(self, data: bytes, signature: str) -> bool:
        return True


class HMACSigner:
    """Shared-secret HMAC over the signing input."""

    def __init__(self, digest: HashAlgorithm, secret: str) -> None:
        self._digest = digest
        self._secret = secret.encode()

    def sign(self, data: bytes) -> str:
        mac = hmac.HMAC(self._secret, self._digest)
        mac.update(data)
        return b64url_encode(mac.finalize())

    def verify(self, data: bytes, signature: str) -> bool:
        expected = self.sign(data).encode()
        return constant_time.bytes_eq(expected, signature.encode())


class PEMSigner:
    """RSA or EC signatures with a PEM-encoded key.

    The family is taken from the parsed key and must agree with the
    requested algorithm. EC signatures use the fixed-width ``r || s`` form.
    """

    def __init__(self, alg: Algorithm, digest: HashAlgorithm, pem: str) -> None:
        self._digest = digest
        self._private_key, self._public_key = _load_pem(pem)
        family = _key_family(self._public_key)
        if family != alg.family:
            raise InvalidKeyError(
                f"Algorithm {alg.value} requires an {alg.family.upper()} key, "
                f"got {family.upper()}."
            )

    def sign(self, data: bytes) -> str:
        if self._private_key is None:
            raise InvalidKeyError("A private key is required for signing.")
        if isinstance(self._private_key, rsa.RSAPrivateKey):
            raw = self._private_key.sign(data, padding.PKCS1v15(), self._digest)
        else:
            der = self._private_key.sign(data, ec.ECDSA(self._digest))
            r, s = decode_dss_signature(der)
            size = _ec_coordinate_size(self._private_key.curve)
            raw = r.to_bytes(size, "big") + s.to_bytes(size, "big")
        return b64url_encode(raw)

    def verify(self, data: bytes, signature: str) -> bool:
        try:
            raw = b64url_decode(signature)
        except MalformedTokenError:
            return False
        try:
            if isinstance(self._public_key, rsa.RSAPublicKey):
                self._public_key.verify(raw, data, padding.PKCS1v15(), self._digest)
            else:
                size = _ec_coordinate_size(self._public_key.curve)
                if len(raw) != 2 * size:
                    return False
                r = int.from_bytes(raw[:size], "big")
                s = int.from_bytes(raw[size:], "big")
                self._public_key.verify(
                    encode_dss_signature(r, s), data, ec.ECDSA(self._digest)
                )
        except InvalidSignature:
            return False
        return True


Signer = NoneSigner | HMACSigner | PEMSigner


def _load_pem(pem: str) -> tuple[PrivateKey | None, PublicKey]:
    """Parse a PEM private key, falling back to a public key."""
    data = pem.encode()
    try:
        private_key = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm):
        private_key = None
    if private_key is not None:
        if not isinstance(private_key, PrivateKey):
            raise InvalidKeyError("PEM key must be an RSA or EC key.")
        return private_key, private_key.public_key()
    try:
        public_key = serialization.load_pem_public_key(data)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyError("Key material is not a valid PEM key.") from exc
    if not isinstance(public_key, PublicKey):
        raise InvalidKeyError("PEM key must be an RSA or EC key.")
    return None, public_key


def _key_family(public_key: PublicKey) -> str:
    return "rsa" if isinstance(public_key, rsa.RSAPublicKey) else "ec"


def _ec_coordinate_size(curve: ec.EllipticCurve) -> int:
    return (curve.key_size + 7) // 8


def _create_signer(alg: Algorithm, key_material: str) -> Signer:
    digest = alg.hash_algorithm()
    if digest is None:
        return NoneSigner()
    if alg.family == "hmac":
        return HMACSigner(digest, key_material)
    return PEMSigner(alg, digest, key_material)


class Key:
    """Signing/verification key bound to one algorithm.

    The strategy is picked once from the algorithm and never changes, so a
    single instance can serve concurrent sign and verify calls. Keys hold
    sensitive material and refuse to be copied.
    """

    def __init__(self, alg: Algorithm, key_material: str = "") -> None:
        init_crypto_backend()
        self._alg = alg
        self._signer = _create_signer(alg, key_material)

    @property
    def alg(self) -> Algorithm:
        return self._alg

    def sign(self, data: bytes) -> str:
        """Return the signature segment for ``data`` (empty for ``none``)."""
        return self._signer.sign(data)

    def verify(self, data: bytes, signature: str) -> bool:
        """Check ``signature`` against ``data`` without raising on mismatch."""
        return self._signer.verify(data, signature)

    def __copy__(self) -> "Key":
        raise TypeError("Key objects cannot be copied.")

    def __deepcopy__(self, memo: dict) -> "Key":
        raise TypeError("Key objects cannot be copied.")

    def __repr__(self) -> str:
        return f"Key(alg={self._alg.value})"


def _pem_pair(alg: Algorithm, private_key: PrivateKey) -> SigningKeyData:
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return SigningKeyData(
        alg=alg.value, private_key_pem=private_pem, public_key_pem=public_pem
    )


def generate_rsa_keypair(alg: Algorithm = Algorithm.RS256) -> SigningKeyData:
    """Generate a new RSA-2048 keypair for RS* signing."""
    if alg.family != "rsa":
        raise InvalidKeyError(f"{alg.value} is not an RSA algorithm.")
    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=RSA_KEY_SIZE,
    )
    return _pem_pair(alg, private_key)


def generate_ec_keypair(alg: Algorithm = Algorithm.ES256) -> SigningKeyData:
    """Generate an EC keypair on the curve conventionally paired with ``alg``."""
    if alg not in EC_CURVES:
        raise InvalidKeyError(f"{alg.value} is not an EC algorithm.")
    private_key = ec.generate_private_key(EC_CURVES[alg]())
    return _pem_pair(alg, private_key)
