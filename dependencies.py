"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Long-lived objects (settings, account service)
are built once by the app lifespan and stored on app.state.
"""

from __future__ import annotations

from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import AppSettings
from errors import AuthenticationError, ForbiddenError
from schemas.models.account import LandlordDoc
from services.account_service import AccountService
from shared.jwt_tokens import ROLE_LANDLORD, verify_access_jwt

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    settings: AppSettings = Depends(get_settings),
) -> dict:
    """Decode the Bearer JWT; 401 when absent or invalid."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("no token, authorization denied")
    try:
        return verify_access_jwt(settings.jwt, credentials.credentials)
    except jwt.InvalidTokenError:
        raise AuthenticationError("token is not valid")


async def get_current_landlord(
    claims: dict = Depends(get_token_claims),
    accounts: AccountService = Depends(get_account_service),
) -> LandlordDoc:
    if claims.get("role") != ROLE_LANDLORD:
        raise ForbiddenError("access denied, landlords only")
    landlord = await accounts.get_landlord(claims.get("sub"))
    if landlord is None:
        raise AuthenticationError("token is not valid")
    return landlord


async def require_verified_landlord(
    landlord: LandlordDoc = Depends(get_current_landlord),
) -> LandlordDoc:
    if not landlord.is_verified:
        raise ForbiddenError("please verify your email to access this feature")
    return landlord
