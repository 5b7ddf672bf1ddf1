"""
Transport selection for a single delivery attempt.

deliver() tries each configured transport in order (primary first) and stops
at the first success. Each transport call runs under a hard timeout; a
timeout or an unexpected exception is turned into a failed DeliveryResult so
nothing ever propagates to the caller.

Skip mode is checked here, once, before any transport is touched.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from infrastructure.email.protocol import DeliveryResult, EmailTransport, ErrorKind
from schemas.models.delivery import DeliveryJob
from shared.logging import get_logger

log = get_logger(__name__)


class DeliveryOrchestrator:
    def __init__(
        self,
        primary: Optional[EmailTransport],
        fallback: Optional[EmailTransport] = None,
        *,
        skip: bool = False,
        send_timeout: float = 10.0,
    ) -> None:
        self._transports: Sequence[EmailTransport] = [
            t for t in (primary, fallback) if t is not None
        ]
        self._skip = skip
        self._send_timeout = send_timeout

    @property
    def skip_mode(self) -> bool:
        return self._skip

    @property
    def transport_names(self) -> list[str]:
        return [t.name for t in self._transports]

    async def _attempt(self, transport: EmailTransport, job: DeliveryJob) -> DeliveryResult:
        try:
            return await asyncio.wait_for(
                transport.send(job.recipient, job.subject, job.html_body),
                timeout=self._send_timeout,
            )
        except asyncio.TimeoutError:
            return DeliveryResult.failed(
                transport.name,
                ErrorKind.TIMEOUT,
                f"no response within {self._send_timeout}s",
            )
        except Exception as e:
            log.error(
                "delivery_transport_crashed",
                job_id=job.job_id,
                transport=transport.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return DeliveryResult.failed(
                transport.name, ErrorKind.PROVIDER_UNREACHABLE, str(e) or type(e).__name__
            )

    async def deliver(self, job: DeliveryJob) -> DeliveryResult:
        """Send *job* through the first transport that accepts it.

        Returns the successful result, or the result of the last transport
        tried when all of them fail.
        """
        if self._skip:
            log.info(
                "delivery_skipped",
                job_id=job.job_id,
                purpose=job.purpose.value,
                to_email=job.recipient,
            )
            return DeliveryResult.skipped_result()

        if not self._transports:
            return DeliveryResult.failed(
                "none", ErrorKind.CONFIGURATION_MISSING, "no email transport configured"
            )

        result: Optional[DeliveryResult] = None
        for index, transport in enumerate(self._transports):
            result = await self._attempt(transport, job)
            if result.success:
                return result

            has_next = index + 1 < len(self._transports)
            log.warning(
                "delivery_transport_failed",
                job_id=job.job_id,
                falling_back=has_next,
                **result.to_log_dict(),
            )
        return result
