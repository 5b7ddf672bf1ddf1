"""Brevo transactional-email API transport (primary).

- non-2xx API response       → ProviderRejected
- httpx timeout               → Timeout
- connection/transport error  → ProviderUnreachable
- api key or sender missing   → ConfigurationMissing, no request made
"""

from __future__ import annotations

import httpx

from config import EmailSettings
from infrastructure.email.protocol import DeliveryResult, ErrorKind
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


class BrevoTransport:
    name = "brevo"

    def __init__(self, settings: EmailSettings, http_client: HttpClient) -> None:
        self._settings = settings
        self._http = http_client

    def _build_payload(self, to: str, subject: str, html_body: str) -> dict:
        return {
            "sender": {
                "name": self._settings.brevo_sender_name,
                "email": self._settings.brevo_sender_email,
            },
            "to": [{"email": to}],
            "subject": subject,
            "htmlContent": html_body,
        }

    async def send(self, to: str, subject: str, html_body: str) -> DeliveryResult:
        if not self._settings.brevo_api_key:
            log.warning("brevo_send_skipped", reason="api_key_not_configured")
            return DeliveryResult.failed(
                self.name, ErrorKind.CONFIGURATION_MISSING, "BREVO_API_KEY is not set"
            )
        if not self._settings.brevo_sender_email:
            log.warning("brevo_send_skipped", reason="sender_not_configured")
            return DeliveryResult.failed(
                self.name,
                ErrorKind.CONFIGURATION_MISSING,
                "BREVO_SENDER_EMAIL is not set",
            )

        headers = {
            "api-key": self._settings.brevo_api_key,
            "accept": "application/json",
            "content-type": "application/json",
        }

        try:
            response = await self._http.post(
                BREVO_API_URL,
                json=self._build_payload(to, subject, html_body),
                headers=headers,
            )
        except httpx.TimeoutException as e:
            log.error("brevo_send_timeout", to_email=to, error=str(e))
            return DeliveryResult.failed(self.name, ErrorKind.TIMEOUT, str(e) or "timeout")
        except (httpx.HTTPError, OSError) as e:
            log.error(
                "brevo_send_error",
                to_email=to,
                error=str(e),
                error_type=type(e).__name__,
            )
            return DeliveryResult.failed(
                self.name, ErrorKind.PROVIDER_UNREACHABLE, str(e) or type(e).__name__
            )

        if 200 <= response.status_code < 300:
            message_id = None
            try:
                message_id = response.json().get("messageId")
            except ValueError:
                pass
            log.info("brevo_send_success", to_email=to, message_id=message_id)
            return DeliveryResult.ok(self.name, message_id)

        log.error(
            "brevo_send_rejected",
            to_email=to,
            status_code=response.status_code,
            response=response.text[:200],
        )
        return DeliveryResult.failed(
            self.name,
            ErrorKind.PROVIDER_REJECTED,
            f"HTTP {response.status_code}: {response.text[:200]}",
        )
