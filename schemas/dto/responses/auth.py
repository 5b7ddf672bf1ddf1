"""
Response DTOs for authentication endpoints.

LandlordProfile   — landlord shape embedded in register/login responses
AdminProfile      — admin shape embedded in the admin login response
LandlordAuthData  — {landlord, token}
AdminAuthData     — {admin, token}
LandlordAuthResponse / AdminAuthResponse — {success, message, data}
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class LandlordProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    full_name: str
    phone_number: str
    email: str
    is_verified: bool
    created_at: Optional[datetime] = None


class AdminProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    email: str


class LandlordAuthData(BaseModel):
    landlord: LandlordProfile
    token: str


class AdminAuthData(BaseModel):
    admin: AdminProfile
    token: str


class LandlordAuthResponse(BaseModel):
    """Response body for register-landlord (201) and login-landlord (200)."""

    success: bool = True
    message: str
    data: LandlordAuthData


class AdminAuthResponse(BaseModel):
    success: bool = True
    message: str
    data: AdminAuthData


class VerifyEmailResponse(BaseModel):
    """Response body for POST /api/auth/verify-email (200)."""

    success: bool = True
    message: str
    is_verified: bool
