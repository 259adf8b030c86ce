"""Compact token wire format: segment splitting, base64url and JSON encoding.

A token is ``<header>.<claims>[.<signature>]``. The header and claims are
unpadded base64url encodings of flat JSON objects; the signature segment is
whatever the signing key produced, itself unpadded base64url text.
"""

import base64
import binascii
import json
from typing import TYPE_CHECKING, NamedTuple

from compactjwt.core.errors import MalformedTokenError

if TYPE_CHECKING:
    from compactjwt.crypto.keys import Key

Pairs = dict[str, str]

SEPARATOR = "."


class TokenParts(NamedTuple):
    """The three raw segments of a token."""

    header: str
    claims: str
    signature: str

    @property
    def signing_input(self) -> str:
        return self.header + SEPARATOR + self.claims


def b64url_encode(data: bytes) -> str:
    """Encode bytes as base64url without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(text: str) -> bytes:
    """Decode unpadded base64url, rejecting anything not in canonical form."""
    try:
        raw = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except (binascii.Error, ValueError) as exc:
        raise MalformedTokenError("Segment is not valid base64url.") from exc
    if b64url_encode(raw) != text:
        raise MalformedTokenError("Segment is not canonical unpadded base64url.")
    return raw


def split_token(token: str) -> TokenParts:
    """Split a token into header, claims and signature segments.

    With a single separator the signature is empty. Everything after the
    second separator, further dots included, is the signature segment.
    """
    header, sep, rest = token.partition(SEPARATOR)
    if not sep:
        raise MalformedTokenError(
            "JWT should have at least 2 parts separated by a dot."
        )
    claims, _, signature = rest.partition(SEPARATOR)
    return TokenParts(header, claims, signature)


def to_json(pairs: Pairs) -> str:
    """Serialize a flat string mapping as compact JSON."""
    return json.dumps(pairs, separators=(",", ":"), ensure_ascii=False)


def _scalar_to_str(name: str, value: object) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return json.dumps(value)
    raise MalformedTokenError(f"Claim '{name}' must be a scalar value.")


def from_json(text: str) -> Pairs:
    """Parse a JSON object into a flat string mapping."""
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise MalformedTokenError("Segment is not valid JSON.") from exc
    if not isinstance(data, dict):
        raise MalformedTokenError("Segment must be a JSON object.")
    return {name: _scalar_to_str(name, value) for name, value in data.items()}


def decode_segment(segment: str) -> Pairs:
    """base64url-decode and JSON-parse one header or claims segment."""
    raw = b64url_decode(segment)
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedTokenError("Segment is not valid UTF-8.") from exc
    return from_json(text)


def signing_input(header: Pairs, claims: Pairs) -> str:
    """Build ``base64url(header) + "." + base64url(claims)``."""
    return (
        b64url_encode(to_json(header).encode("utf-8"))
        + SEPARATOR
        + b64url_encode(to_json(claims).encode("utf-8"))
    )


def encode_token(header: Pairs, claims: Pairs, key: "Key") -> str:
    """Sign and assemble a token; the signature is omitted when empty."""
    data = signing_input(header, claims)
    signature = key.sign(data.encode("ascii"))
    if not signature:
        return data
    return data + SEPARATOR + signature
