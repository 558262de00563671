"""Caller authentication tokens (ES256 JWT).

A mutating request is accepted only with a bearer JWT whose ``sub`` claim
is the caller's address.  Wallet key management is out of scope: tokens
are minted by whatever signs on the caller's behalf, using the key pair
configured here.

Dev/test: an ephemeral EC key pair is generated on import.
Production: set JWT_PRIVATE_KEY_FILE to a PEM-encoded P-256 private key.
"""

from __future__ import annotations

import os
import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec


def _load_private_key() -> ec.EllipticCurvePrivateKey:
    path = os.environ.get("JWT_PRIVATE_KEY_FILE", "").strip()
    if not path:
        return ec.generate_private_key(ec.SECP256R1())
    with open(path, "rb") as fh:
        key = serialization.load_pem_private_key(fh.read(), password=None)
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise ValueError("JWT_PRIVATE_KEY_FILE must hold an EC (P-256) private key")
    return key


_private_key = _load_private_key()
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "credential-registry"
AUDIENCE = "credential-registry"
ACCESS_TOKEN_TTL_MIN = 15


def create_access_token(*, sub: str, ttl_minutes: int = ACCESS_TOKEN_TTL_MIN) -> str:
    """Sign a token asserting that the bearer acts as identity ``sub``."""
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ttl_minutes),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256 and checks exp, iss and aud.
    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
