"""
Request DTOs for authentication endpoints.

RegisterLandlordRequest     — POST /api/auth/register-landlord
LoginLandlordRequest        — POST /api/auth/login-landlord
LoginAdminRequest           — POST /api/auth/login-admin
VerifyEmailRequest          — POST /api/auth/verify-email
ResendVerificationRequest   — POST /api/auth/resend-verification
ForgotPasswordRequest       — POST /api/auth/forgot-password
ResetPasswordRequest        — POST /api/auth/reset-password
ChangePasswordRequest       — POST /api/auth/change-password
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterLandlordRequest(BaseModel):
    """Request body for POST /api/auth/register-landlord.

    ``channel`` picks the verification style: ``app`` sends a 6-digit code to
    type into the mobile app, ``web`` sends a verification link.
    """

    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(alias="fullName", min_length=1, max_length=120)
    phone_number: str = Field(alias="phoneNumber")
    email: EmailStr
    password: str
    channel: Literal["app", "web"] = "app"


class LoginLandlordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone_number: str = Field(alias="phoneNumber")
    password: str


class LoginAdminRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str


class VerifyEmailRequest(BaseModel):
    """Request body for POST /api/auth/verify-email.

    ``code`` is either the short code or the opaque link token.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: str
    code: str = Field(min_length=1)


class ResendVerificationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    channel: Literal["app", "web"] = "app"


class ForgotPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    code: str = Field(min_length=1)
    password: str


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword")
