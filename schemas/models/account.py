"""
Account document models.

LandlordDoc maps to the `landlords` collection, AdminDoc to `admins`.

Verification and reset codes live on the landlord document itself, one live
code per purpose: issuing a new code overwrites the previous hash, expiry
and issue time. Only SHA-256 hashes of the codes are stored.

*_issued_at is kept separately from *_expires so the resend throttle never
has to infer issue time from an expiry.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from schemas.models.base import MongoBaseModel


class LandlordDoc(MongoBaseModel):
    """Document model for the `landlords` collection."""

    full_name: str
    phone_number: str
    email: str
    password_hash: str
    is_verified: bool = False

    verify_token: Optional[str] = None
    verify_expires: Optional[datetime] = None
    verify_issued_at: Optional[datetime] = None
    verify_attempts: int = Field(default=0, ge=0)

    reset_token: Optional[str] = None
    reset_expires: Optional[datetime] = None
    reset_issued_at: Optional[datetime] = None
    reset_attempts: int = Field(default=0, ge=0)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminDoc(MongoBaseModel):
    """Document model for the `admins` collection."""

    username: str
    email: str
    password_hash: str
    created_at: Optional[datetime] = None
