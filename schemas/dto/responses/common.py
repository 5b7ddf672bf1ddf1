"""
Common response DTOs shared across multiple endpoints.

ErrorResponse    — standard error shape from AppError.to_dict()
HealthResponse   — GET /api/health
MessageResponse  — generic {success, message} shape used by many endpoints
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error JSON body produced by the AppError exception handler."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None


class HealthResponse(BaseModel):
    """Response body for GET /api/health."""

    status: str
    checks: dict[str, str]
    delivery: dict[str, int]


class MessageResponse(BaseModel):
    """Generic success/message response returned by several endpoints."""

    success: bool = True
    message: Optional[str] = None
