"""EmailTransport protocol and the DeliveryResult every transport returns.

Services depend on this, not on the concrete Brevo/SMTP implementations.
Transports never raise for a delivery problem: the outcome, including the
failure class, is always a DeliveryResult.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol


class ErrorKind(str, Enum):
    CONFIGURATION_MISSING = "configuration_missing"
    PROVIDER_REJECTED = "provider_rejected"
    PROVIDER_UNREACHABLE = "provider_unreachable"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    provider: str
    message_id: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    error_detail: Optional[str] = None
    skipped: bool = False

    @classmethod
    def ok(cls, provider: str, message_id: Optional[str] = None) -> "DeliveryResult":
        return cls(success=True, provider=provider, message_id=message_id)

    @classmethod
    def failed(
        cls, provider: str, kind: ErrorKind, detail: Optional[str] = None
    ) -> "DeliveryResult":
        return cls(success=False, provider=provider, error_kind=kind, error_detail=detail)

    @classmethod
    def skipped_result(cls) -> "DeliveryResult":
        return cls(success=True, provider="skip", skipped=True)

    def to_log_dict(self) -> dict:
        data: dict = {"success": self.success, "provider": self.provider}
        if self.message_id:
            data["message_id"] = self.message_id
        if self.error_kind is not None:
            data["error_kind"] = self.error_kind.value
        if self.error_detail:
            data["error_detail"] = self.error_detail[:200]
        if self.skipped:
            data["skipped"] = True
        return data


class EmailTransport(Protocol):
    name: str

    async def send(self, to: str, subject: str, html_body: str) -> DeliveryResult: ...
