"""
Access JWT issuance and verification (HS256, PyJWT).

Claims: iss, aud, sub (account id), role ("landlord" | "admin"), iat, exp.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from config import JWTSettings

ROLE_LANDLORD = "landlord"
ROLE_ADMIN = "admin"

_ALGORITHM = "HS256"


def _secret(settings: JWTSettings) -> str:
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET must be set to issue or verify tokens")
    return settings.jwt_secret


def generate_access_jwt(settings: JWTSettings, subject: str, role: str) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "sub": str(subject),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(
            (now + timedelta(seconds=settings.access_token_ttl_seconds)).timestamp()
        ),
    }
    return jwt.encode(claims, _secret(settings), algorithm=_ALGORITHM)


def verify_access_jwt(settings: JWTSettings, token: str) -> dict[str, Any]:
    """Decode and validate *token*.

    Raises:
        jwt.InvalidTokenError: bad signature, wrong audience/issuer, or expired.
    """
    return jwt.decode(
        token,
        _secret(settings),
        algorithms=[_ALGORITHM],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )
