"""Composable claim validators.

A validator is a predicate over the claims mapping. Every built-in validator
passes when its claim is absent; time claims must be plain decimal integers
and compare strictly against ``now``. Time values must fit in an unsigned
64-bit integer; larger values are rejected.
"""

import re
import time
from collections.abc import Callable, Iterable, Mapping

Validator = Callable[[Mapping[str, str]], bool]

_UNSIGNED = re.compile(r"[0-9]+")
UINT64_MAX = 2**64 - 1


def _now(now: int | None) -> int:
    return int(time.time()) if now is None else now


def _named(validator: Validator, name: str) -> Validator:
    validator.__name__ = name
    validator.__qualname__ = name
    return validator


def _parse_time(value: str) -> int | None:
    if _UNSIGNED.fullmatch(value) is None:
        return None
    parsed = int(value)
    return parsed if parsed <= UINT64_MAX else None


def _time_validator(
    claim: str, now: int, check: Callable[[int, int], bool]
) -> Validator:
    def validate(claims: Mapping[str, str]) -> bool:
        value = claims.get(claim)
        if value is None:
            return True
        parsed = _parse_time(value)
        return parsed is not None and check(parsed, now)

    return _named(validate, f"{claim}({now})")


def _string_validator(claim: str, expected: str) -> Validator:
    def validate(claims: Mapping[str, str]) -> bool:
        value = claims.get(claim)
        return value is None or value == expected

    return _named(validate, f"{claim}({expected!r})")


def exp(now: int | None = None) -> Validator:
    """Token has not expired: ``exp > now``."""
    return _time_validator("exp", _now(now), lambda value, ref: value > ref)


def nbf(now: int | None = None) -> Validator:
    """Token is already usable: ``nbf < now``."""
    return _time_validator("nbf", _now(now), lambda value, ref: value < ref)


def iat(now: int | None = None) -> Validator:
    """Token was issued in the past: ``iat < now``."""
    return _time_validator("iat", _now(now), lambda value, ref: value < ref)


def iss(issuer: str) -> Validator:
    """Token came from ``issuer``."""
    return _string_validator("iss", issuer)


def aud(audience: str) -> Validator:
    """Token is addressed to ``audience``."""
    return _string_validator("aud", audience)


def sub(subject: str) -> Validator:
    """Token is about ``subject``."""
    return _string_validator("sub", subject)


def validator_name(validator: Validator) -> str:
    """Readable name of a validator, for error messages and logs."""
    return getattr(validator, "__name__", None) or repr(validator)


def first_failure(
    claims: Mapping[str, str], validators: Iterable[Validator]
) -> Validator | None:
    """Return the first validator rejecting ``claims``, in order, or None."""
    for validator in validators:
        if not validator(claims):
            return validator
    return None


def validate_all(claims: Mapping[str, str], validators: Iterable[Validator]) -> bool:
    """AND the validators together, stopping at the first failure."""
    return all(validator(claims) for validator in validators)
