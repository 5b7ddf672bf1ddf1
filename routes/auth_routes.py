"""
Authentication endpoints under /api/auth.

Responses for flows that send email report the business outcome only;
whether the email arrived is never part of the response.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from dependencies import (
    get_account_service,
    get_current_landlord,
    require_verified_landlord,
)
from schemas.dto.requests.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginAdminRequest,
    LoginLandlordRequest,
    RegisterLandlordRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    VerifyEmailRequest,
)
from schemas.dto.responses.auth import (
    AdminAuthData,
    AdminAuthResponse,
    AdminProfile,
    LandlordAuthData,
    LandlordAuthResponse,
    LandlordProfile,
    VerifyEmailResponse,
)
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from schemas.models.account import LandlordDoc
from services.account_service import GENERIC_RESET_MESSAGE, AccountService

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
    },
)


@router.post(
    "/register-landlord",
    status_code=status.HTTP_201_CREATED,
    response_model=LandlordAuthResponse,
)
async def register_landlord(
    body: RegisterLandlordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> LandlordAuthResponse:
    landlord, token = await accounts.register_landlord(
        full_name=body.full_name,
        phone_number=body.phone_number,
        email=str(body.email),
        password=body.password,
        channel=body.channel,
    )
    return LandlordAuthResponse(
        message="Landlord registered successfully. Please check your email for the verification code.",
        data=LandlordAuthData(
            landlord=LandlordProfile(**accounts.landlord_profile(landlord)),
            token=token,
        ),
    )


@router.post("/login-landlord", response_model=LandlordAuthResponse)
async def login_landlord(
    body: LoginLandlordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> LandlordAuthResponse:
    landlord, token = await accounts.login_landlord(body.phone_number, body.password)
    return LandlordAuthResponse(
        message="Login successful",
        data=LandlordAuthData(
            landlord=LandlordProfile(**accounts.landlord_profile(landlord)),
            token=token,
        ),
    )


@router.post("/login-admin", response_model=AdminAuthResponse)
async def login_admin(
    body: LoginAdminRequest,
    accounts: AccountService = Depends(get_account_service),
) -> AdminAuthResponse:
    admin, token = await accounts.login_admin(body.email, body.password)
    return AdminAuthResponse(
        message="Admin login successful",
        data=AdminAuthData(admin=AdminProfile(**accounts.admin_profile(admin)), token=token),
    )


@router.post("/verify-email", response_model=VerifyEmailResponse)
async def verify_email(
    body: VerifyEmailRequest,
    accounts: AccountService = Depends(get_account_service),
) -> VerifyEmailResponse:
    landlord = await accounts.verify_email(body.email, body.code)
    return VerifyEmailResponse(
        message="Email verified successfully", is_verified=landlord.is_verified
    )


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    body: ResendVerificationRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.resend_verification(body.email, body.channel)
    return MessageResponse(message="Verification code sent. Please check your email.")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.forgot_password(body.email)
    return MessageResponse(message=GENERIC_RESET_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.reset_password(body.email, body.code, body.password)
    return MessageResponse(message="Password reset successfully")


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    landlord: LandlordDoc = Depends(require_verified_landlord),
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.change_password(landlord, body.current_password, body.new_password)
    return MessageResponse(message="Password changed successfully")


@router.get("/me", response_model=LandlordProfile)
async def me(
    landlord: LandlordDoc = Depends(get_current_landlord),
    accounts: AccountService = Depends(get_account_service),
) -> LandlordProfile:
    return LandlordProfile(**accounts.landlord_profile(landlord))
