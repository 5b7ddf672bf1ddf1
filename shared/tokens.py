"""
Verification/reset code generation and expiry arithmetic — pure functions.

Two code shapes exist because two channels consume them:
- short numeric codes are typed by hand into the mobile app
- long opaque tokens travel inside a web verification link

All timestamps are timezone-aware UTC instants. Nothing here keeps state,
so every function is safe to call from concurrent request handlers.
"""

from __future__ import annotations

import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by MongoDB) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def generate_short_code(length: int = 6) -> str:
    """Generate a cryptographically secure fixed-width numeric code.

    Args:
        length: Number of digits (default 6). Leading zeros are kept.

    Returns:
        String of random decimal digits.
    """
    return "".join(secrets.choice(string.digits) for _ in range(length))


def generate_opaque_token(nbytes: int = 32) -> str:
    """Generate a long random hex token for link-based verification.

    Args:
        nbytes: Number of random bytes (default 32 → 64 hex characters).
    """
    return secrets.token_hex(nbytes)


def compute_expiry(hours_from_now: float, now: Optional[datetime] = None) -> datetime:
    """Return the UTC instant *hours_from_now* hours after *now*."""
    base = ensure_utc(now) if now is not None else utc_now()
    return base + timedelta(hours=hours_from_now)


def is_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    """True once *now* is strictly past *expires_at*."""
    current = ensure_utc(now) if now is not None else utc_now()
    return current > ensure_utc(expires_at)


def seconds_until(moment: datetime, now: Optional[datetime] = None) -> float:
    """Seconds from *now* until *moment*; negative when *moment* has passed."""
    current = ensure_utc(now) if now is not None else utc_now()
    return (ensure_utc(moment) - current).total_seconds()
