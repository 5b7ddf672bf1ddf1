"""
Account notification entry points.

Each deliver_* call renders its email, wraps it in a DeliveryJob and hands
it to the DeliveryQueue, then returns. The caller never learns the delivery
outcome; it only shows up in the logs.
"""

from __future__ import annotations

from urllib.parse import urlencode

from infrastructure.email.renderer import EmailRenderer
from schemas.models.delivery import DeliveryJob, DeliveryPurpose
from services.delivery_queue import DeliveryQueue
from shared.logging import get_logger

log = get_logger(__name__)


class NotificationService:
    def __init__(
        self,
        queue: DeliveryQueue,
        renderer: EmailRenderer,
        app_url: str,
        verify_ttl_hours: int = 24,
        reset_ttl_hours: int = 1,
    ) -> None:
        self._queue = queue
        self._renderer = renderer
        self._app_url = app_url.rstrip("/")
        self._verify_ttl_hours = verify_ttl_hours
        self._reset_ttl_hours = reset_ttl_hours

    def _submit(self, address: str, purpose: DeliveryPurpose, **context) -> None:
        try:
            subject, html_body = self._renderer.render(purpose, **context)
        except Exception as e:
            log.error(
                "notification_render_failed",
                purpose=purpose.value,
                to_email=address,
                error=str(e),
                error_type=type(e).__name__,
            )
            return
        job = DeliveryJob(
            recipient=address,
            purpose=purpose,
            subject=subject,
            html_body=html_body,
            payload=context,
        )
        if not self._queue.enqueue(job):
            log.error(
                "notification_not_queued", purpose=purpose.value, to_email=address
            )

    def verification_link(self, address: str, token: str) -> str:
        return f"{self._app_url}/verify-email?{urlencode({'email': address, 'token': token})}"

    def deliver_verification_notice(
        self, address: str, code: str, display_name: str, as_link: bool = False
    ) -> None:
        """Queue the verification email.

        ``as_link`` renders a clickable link (web channel) instead of a code
        to type into the app.
        """
        self._submit(
            address,
            DeliveryPurpose.VERIFICATION,
            code=code,
            display_name=display_name,
            link_url=self.verification_link(address, code) if as_link else None,
            expires_in_hours=self._verify_ttl_hours,
        )

    def deliver_password_reset_notice(
        self, address: str, code: str, display_name: str
    ) -> None:
        self._submit(
            address,
            DeliveryPurpose.PASSWORD_RESET,
            code=code,
            display_name=display_name,
            expires_in_hours=self._reset_ttl_hours,
        )

    def deliver_password_changed_notice(self, address: str, display_name: str) -> None:
        self._submit(
            address, DeliveryPurpose.PASSWORD_CHANGED, display_name=display_name
        )
