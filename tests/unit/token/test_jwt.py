"""Tests for building, parsing and verifying tokens."""

import functools

import pytest
from structlog.testing import capture_logs

from compactjwt.core.errors import (
    InvalidAlgorithmError,
    MalformedTokenError,
    SignatureInvalidError,
    ValidationFailedError,
)
from compactjwt.crypto.algorithms import Algorithm
from compactjwt.crypto.keys import Key
from compactjwt.token import validators as validate
from compactjwt.token.codec import b64url_decode, b64url_encode, split_token
from compactjwt.token.jwt import JWT

SECRET = "secret"
SIGNED = [alg for alg in Algorithm if alg is not Algorithm.NONE]


def _flip_bit(text: str, index: int, bit: int) -> str:
    return text[:index] + chr(ord(text[index]) ^ (1 << bit)) + text[index + 1 :]


def _segment(payload: bytes) -> str:
    return b64url_encode(payload)


def _has_role(claims, role: str) -> bool:
    return claims.get("role") == role


class RoleCheck:
    def __init__(self, role: str) -> None:
        self.role = role

    def __call__(self, claims) -> bool:
        return claims.get("role") == self.role

    def __repr__(self) -> str:
        return f"RoleCheck({self.role!r})"


class TestBuild:
    """Tests for in-memory token construction."""

    def test_header_gets_typ_and_alg(self) -> None:
        token = JWT(Algorithm.HS256, {"sub": "123"})
        assert token.header == {"typ": "JWT", "alg": "HS256"}

    def test_header_typ_and_alg_not_overridable(self) -> None:
        token = JWT(Algorithm.HS512, {}, {"alg": "none", "typ": "x", "kid": "k1"})
        assert token.header == {"alg": "HS512", "typ": "JWT", "kid": "k1"}

    def test_inputs_are_copied(self) -> None:
        claims = {"sub": "123"}
        token = JWT(Algorithm.NONE, claims)
        claims["sub"] = "changed"
        token.claims["sub"] = "changed too"
        assert token.claim("sub") == "123"

    def test_claim_missing_returns_empty(self) -> None:
        assert JWT(Algorithm.NONE, {"sub": "1"}).claim("aud") == ""

    def test_hs256_scenario(self) -> None:
        wire = JWT(Algorithm.HS256, {"sub": "123"}, {}).token(SECRET)
        header, claims, signature = wire.split(".")
        assert b64url_decode(header) == b'{"typ":"JWT","alg":"HS256"}'
        assert b64url_decode(claims) == b'{"sub":"123"}'
        assert signature

        key = Key(Algorithm.HS256, SECRET)
        assert JWT.verify(wire, key, [validate.sub("123")])
        assert not JWT.verify(wire, key, [validate.sub("999")])

    def test_none_token_has_no_signature_segment(self) -> None:
        wire = JWT(Algorithm.NONE, {"sub": "123"}).token()
        assert wire.count(".") == 1


class TestRoundtrip:
    """Tests for sign-then-verify with every algorithm."""

    @pytest.mark.parametrize("alg", SIGNED)
    def test_verify_just_built_token(
        self, alg: Algorithm, signing_material: dict[Algorithm, str]
    ) -> None:
        material = signing_material[alg]
        original = JWT(alg, {"sub": "123", "role": "admin"}, {"kid": "k1"})
        wire = original.token(material)

        assert JWT.verify(wire, Key(alg, material))
        trusted = JWT.from_token(wire, Key(alg, material))
        assert trusted == original
        assert trusted.alg is alg

    @pytest.mark.parametrize("alg", [Algorithm.HS256, Algorithm.RS256, Algorithm.ES384])
    def test_bit_flip_in_signature_fails(
        self, alg: Algorithm, signing_material: dict[Algorithm, str]
    ) -> None:
        material = signing_material[alg]
        key = Key(alg, material)
        wire = JWT(alg, {"sub": "123"}).token(material)
        start = wire.rindex(".") + 1
        step = 1 if alg.family == "hmac" else 11
        for index in range(start, len(wire), step):
            for bit in range(7):
                tampered = _flip_bit(wire, index, bit)
                assert not JWT.verify(tampered, key)

    def test_tampered_claims_fail(self) -> None:
        wire = JWT(Algorithm.HS256, {"sub": "123"}).token(SECRET)
        header, _, signature = wire.split(".")
        forged = ".".join([header, _segment(b'{"sub":"999"}'), signature])
        assert not JWT.verify(forged, Key(Algorithm.HS256, SECRET))

    def test_wrong_secret_fails(self) -> None:
        wire = JWT(Algorithm.HS384, {"sub": "123"}).token(SECRET)
        assert not JWT.verify(wire, Key(Algorithm.HS384, "other"))

    def test_public_key_verifies(self, rsa_keypair) -> None:
        wire = JWT(Algorithm.RS512, {"sub": "123"}).token(rsa_keypair.private_key_pem)
        assert JWT.verify(wire, Key(Algorithm.RS512, rsa_keypair.public_key_pem))


class TestNoneAlgorithm:
    """Tests for unsigned tokens."""

    def test_verifies_with_none_key(self) -> None:
        wire = JWT(Algorithm.NONE, {"sub": "123"}).token()
        assert JWT.verify(wire, Key(Algorithm.NONE))

    @pytest.mark.parametrize("trailer", [".", ".garbage", ".a.b.c"])
    def test_trailing_signature_ignored(self, trailer: str) -> None:
        wire = JWT(Algorithm.NONE, {"sub": "123"}).token() + trailer
        assert JWT.verify(wire, Key(Algorithm.NONE))
        assert JWT.from_token(wire, Key(Algorithm.NONE)).claim("sub") == "123"

    def test_unsigned_token_rejected_by_hmac_key(self) -> None:
        wire = JWT(Algorithm.NONE, {"sub": "123"}).token()
        assert not JWT.verify(wire, Key(Algorithm.HS256, SECRET))


class TestParse:
    """Tests for unverified inspection."""

    def test_reads_header_and_claims(self) -> None:
        wire = JWT(Algorithm.HS256, {"sub": "123"}).token(SECRET)
        parsed = JWT.parse(wire)
        assert parsed.alg is Algorithm.HS256
        assert parsed.claim("sub") == "123"
        assert parsed.header == {"typ": "JWT", "alg": "HS256"}

    def test_does_not_check_signature(self) -> None:
        wire = JWT(Algorithm.HS256, {"sub": "123"}).token(SECRET)
        parsed = JWT.parse(wire[:-3] + "AAA")
        assert parsed.claim("sub") == "123"

    def test_does_not_run_validators(self) -> None:
        wire = JWT(Algorithm.NONE, {"exp": "1"}).token()
        assert JWT.parse(wire).claim("exp") == "1"

    def test_header_kept_as_decoded(self) -> None:
        wire = _segment(b'{"alg":"HS256","kid":"x"}') + "." + _segment(b"{}")
        assert JWT.parse(wire).header == {"alg": "HS256", "kid": "x"}

    @pytest.mark.parametrize("header", [b"{}", b'{"alg":""}'])
    def test_missing_alg_means_none(self, header: bytes) -> None:
        wire = _segment(header) + "." + _segment(b'{"sub":"1"}')
        assert JWT.parse(wire).alg is Algorithm.NONE

    def test_unknown_alg_rejected(self) -> None:
        wire = _segment(b'{"alg":"HS999"}') + "." + _segment(b"{}")
        with pytest.raises(InvalidAlgorithmError):
            JWT.parse(wire)

    def test_four_segments(self) -> None:
        # Everything after the second dot is taken as the signature.
        wire = JWT(Algorithm.HS256, {"sub": "123"}).token(SECRET) + ".extra"
        assert split_token(wire).signature.endswith(".extra")
        assert JWT.parse(wire).claim("sub") == "123"
        assert not JWT.verify(wire, Key(Algorithm.HS256, SECRET))

    def test_no_separator_rejected(self) -> None:
        with pytest.raises(MalformedTokenError):
            JWT.parse("no-separator")

    def test_bad_json_rejected(self) -> None:
        with pytest.raises(MalformedTokenError):
            JWT.parse(_segment(b"{not json") + "." + _segment(b"{}"))


class TestFromToken:
    """Tests for the raising verification flow."""

    def test_bad_signature_raises(self) -> None:
        wire = JWT(Algorithm.HS256, {"sub": "123"}).token(SECRET)
        with pytest.raises(SignatureInvalidError):
            JWT.from_token(wire, Key(Algorithm.HS256, "other"))

    def test_failed_validator_raises(self) -> None:
        wire = JWT(Algorithm.HS256, {"sub": "123"}).token(SECRET)
        with pytest.raises(ValidationFailedError, match="sub"):
            JWT.from_token(
                wire, Key(Algorithm.HS256, SECRET), [validate.sub("999")]
            )

    def test_partial_validator_failure_raises(self) -> None:
        wire = JWT(Algorithm.HS256, {"role": "user"}).token(SECRET)
        check = functools.partial(_has_role, role="admin")
        with pytest.raises(ValidationFailedError, match="partial"):
            JWT.from_token(wire, Key(Algorithm.HS256, SECRET), [check])
        assert not JWT.verify(wire, Key(Algorithm.HS256, SECRET), [check])

    def test_callable_object_failure_raises(self) -> None:
        wire = JWT(Algorithm.HS256, {"role": "user"}).token(SECRET)
        with pytest.raises(ValidationFailedError, match="RoleCheck"):
            JWT.from_token(wire, Key(Algorithm.HS256, SECRET), [RoleCheck("admin")])

    def test_malformed_raises(self) -> None:
        with pytest.raises(MalformedTokenError):
            JWT.from_token("garbage", Key(Algorithm.NONE))

    def test_alg_taken_from_key(self) -> None:
        wire = _segment(b'{"alg":"HS256"}') + "." + _segment(b'{"sub":"1"}')
        assert JWT.from_token(wire, Key(Algorithm.NONE)).alg is Algorithm.NONE

    def test_signature_rejection_logged(self) -> None:
        wire = JWT(Algorithm.HS256, {"sub": "123"}).token(SECRET)
        with capture_logs() as logs, pytest.raises(SignatureInvalidError):
            JWT.from_token(wire, Key(Algorithm.HS256, "other"))
        assert logs[0]["event"] == "Token signature rejected"
        assert logs[0]["alg"] == "HS256"
        assert SECRET not in str(logs)


class TestVerify:
    """Tests for the boolean verification flow."""

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "!!.??"])
    def test_malformed_returns_false(self, token: str) -> None:
        assert JWT.verify(token, Key(Algorithm.HS256, SECRET)) is False

    def test_unreadable_claims_returns_false(self) -> None:
        wire = _segment(b"{}") + "." + _segment(b"[1]")
        assert JWT.verify(wire, Key(Algorithm.NONE)) is False

    def test_expired_returns_false(self) -> None:
        wire = JWT(Algorithm.HS256, {"exp": "100"}).token(SECRET)
        key = Key(Algorithm.HS256, SECRET)
        assert JWT.verify(wire, key, [validate.exp(99)])
        assert not JWT.verify(wire, key, [validate.exp(100)])
