"""Direct SMTP submission transport (fallback), via aiosmtplib.

Every send opens a fresh connection: connect + STARTTLS + login is the
pre-flight check. When that check fails the message is never submitted and
the result is ConfigurationMissing.
"""

from __future__ import annotations

import asyncio
import re
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Any, Callable, Optional

import aiosmtplib

from config import EmailSettings
from infrastructure.email.protocol import DeliveryResult, ErrorKind
from shared.logging import get_logger

log = get_logger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\n\s*\n+")


def html_to_text(html_body: str) -> str:
    """Crude plain-text alternative for clients that do not render HTML."""
    text = _TAG_RE.sub("", html_body)
    return _SPACE_RE.sub("\n\n", text).strip()


class SmtpTransport:
    name = "smtp"

    def __init__(
        self,
        settings: EmailSettings,
        timeout: float = 10.0,
        smtp_factory: Callable[..., Any] = aiosmtplib.SMTP,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._smtp_factory = smtp_factory

    @property
    def configured(self) -> bool:
        return self._settings.smtp_configured

    async def _open(self) -> Any:
        client = self._smtp_factory(
            hostname=self._settings.smtp_host,
            port=self._settings.smtp_port,
            timeout=self._timeout,
            start_tls=self._settings.smtp_start_tls,
        )
        try:
            await client.connect()
            await client.login(self._settings.smtp_username, self._settings.smtp_password)
        except (Exception, asyncio.CancelledError):
            client.close()
            raise
        return client

    async def verify(self) -> bool:
        """Connect and authenticate, then hang up. True when both succeed."""
        if not self.configured:
            return False
        try:
            client = await self._open()
        except (aiosmtplib.SMTPException, OSError) as e:
            log.warning(
                "smtp_verify_failed",
                host=self._settings.smtp_host,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        await self._quit(client)
        return True

    def _build_message(self, to: str, subject: str, html_body: str) -> EmailMessage:
        sender = self._settings.smtp_username
        domain = sender.split("@")[-1] if "@" in sender else None
        msg = EmailMessage()
        msg["From"] = formataddr((self._settings.brevo_sender_name, sender))
        msg["To"] = to
        msg["Subject"] = subject
        msg["Message-ID"] = make_msgid(domain=domain)
        msg.set_content(html_to_text(html_body))
        msg.add_alternative(html_body, subtype="html")
        return msg

    async def _quit(self, client: Any) -> None:
        try:
            await client.quit()
        except (aiosmtplib.SMTPException, OSError):
            client.close()
        except asyncio.CancelledError:
            client.close()
            raise

    async def send(self, to: str, subject: str, html_body: str) -> DeliveryResult:
        if not self.configured:
            log.warning("smtp_send_skipped", reason="credentials_not_configured")
            return DeliveryResult.failed(
                self.name,
                ErrorKind.CONFIGURATION_MISSING,
                "SMTP host or credentials are not set",
            )

        try:
            client = await self._open()
        except (aiosmtplib.SMTPException, OSError) as e:
            log.error(
                "smtp_verify_failed",
                host=self._settings.smtp_host,
                error=str(e),
                error_type=type(e).__name__,
            )
            return DeliveryResult.failed(
                self.name, ErrorKind.CONFIGURATION_MISSING, f"SMTP verify failed: {e}"
            )

        msg = self._build_message(to, subject, html_body)
        try:
            await client.send_message(msg)
        except asyncio.CancelledError:
            # cancelled by the caller's deadline; the connection must not outlive it
            client.close()
            log.warning("smtp_send_cancelled", to_email=to)
            raise
        except (aiosmtplib.SMTPTimeoutError, aiosmtplib.SMTPConnectTimeoutError) as e:
            client.close()
            log.error("smtp_send_timeout", to_email=to, error=str(e))
            return DeliveryResult.failed(self.name, ErrorKind.TIMEOUT, str(e))
        except (aiosmtplib.SMTPServerDisconnected, OSError) as e:
            client.close()
            log.error("smtp_send_error", to_email=to, error=str(e))
            return DeliveryResult.failed(self.name, ErrorKind.PROVIDER_UNREACHABLE, str(e))
        except aiosmtplib.SMTPException as e:
            await self._quit(client)
            log.error(
                "smtp_send_rejected",
                to_email=to,
                error_code=getattr(e, "code", None),
                error=str(e)[:200],
            )
            return DeliveryResult.failed(self.name, ErrorKind.PROVIDER_REJECTED, str(e))

        await self._quit(client)
        message_id: Optional[str] = msg["Message-ID"]
        log.info("smtp_send_success", to_email=to, message_id=message_id)
        return DeliveryResult.ok(self.name, message_id)
