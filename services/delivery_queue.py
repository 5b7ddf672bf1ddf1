"""
In-process FIFO delivery queue with bounded retries.

One worker task drains the pending list, so at most one send is in flight at
any moment. A failed job is re-appended to the tail of the list after a fixed
backoff (a loop timer, so the worker keeps serving other jobs meanwhile) until
it has failed ``max_retries`` times, after which it is discarded and logged.

Nothing is persisted: jobs still pending at shutdown are dropped.

The pending list is private to this object and only touched from the event
loop thread, which serializes every append/pop without a lock.
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Optional

from infrastructure.email.protocol import DeliveryResult, ErrorKind
from schemas.models.delivery import DeliveryJob, JobState
from services.delivery_orchestrator import DeliveryOrchestrator
from shared.logging import get_logger, log_with_context

log = get_logger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_SECONDS = 2.0


class DeliveryQueue:
    def __init__(
        self,
        orchestrator: DeliveryOrchestrator,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._orchestrator = orchestrator
        self._max_retries = max_retries
        self._retry_delay = retry_delay

        self._pending: deque[DeliveryJob] = deque()
        self._retry_handles: dict[str, asyncio.TimerHandle] = {}
        self._owned: set[str] = set()
        self._wakeup = asyncio.Event()
        self._idle = asyncio.Event()
        self._idle.set()
        self._worker: Optional[asyncio.Task] = None
        self._accepting = True
        self._in_flight = 0
        self._delivered = 0
        self._discarded = 0

    # ── Introspection ────────────────────────────────────────────────────────

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def scheduled_retries(self) -> int:
        return len(self._retry_handles)

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def contains(self, job: DeliveryJob) -> bool:
        return job.job_id in self._owned

    def stats(self) -> dict[str, int]:
        return {
            "pending": self.pending,
            "in_flight": self.in_flight,
            "scheduled_retries": self.scheduled_retries,
            "delivered": self._delivered,
            "discarded": self._discarded,
        }

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Spawn the worker task on the running loop. Idempotent."""
        if self.running:
            return
        self._accepting = True
        self._worker = asyncio.create_task(self._run(), name="delivery-queue-worker")
        self._worker.add_done_callback(self._on_worker_done)
        log.info(
            "delivery_queue_started",
            max_retries=self._max_retries,
            retry_delay=self._retry_delay,
        )

    async def join(self) -> None:
        """Wait until every accepted job reached a terminal state."""
        await self._idle.wait()

    async def stop(self, timeout: float = 5.0) -> None:
        """Stop accepting jobs, wait up to *timeout* for outstanding work, then cancel."""
        self._accepting = False

        if self.running and timeout > 0:
            try:
                await asyncio.wait_for(self.join(), timeout=timeout)
            except asyncio.TimeoutError:
                log.warning("delivery_queue_drain_timeout", timeout=timeout)

        for handle in self._retry_handles.values():
            handle.cancel()

        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass

        dropped = len(self._pending) + len(self._retry_handles) + self._in_flight
        if dropped:
            log.warning("delivery_queue_dropped_jobs", count=dropped)
        self._pending.clear()
        self._retry_handles.clear()
        self._owned.clear()
        self._in_flight = 0
        self._idle.set()
        self._worker = None
        log.info("delivery_queue_stopped", **self.stats())

    # ── Producer side ────────────────────────────────────────────────────────

    def enqueue(self, job: DeliveryJob) -> bool:
        """Append *job* to the tail of the pending list and return immediately.

        Returns False (and logs) when the queue is stopped, the job already
        reached a terminal state, or the job is already owned by the queue.
        """
        if not self._accepting:
            log.warning(
                "delivery_enqueue_rejected", job_id=job.job_id, reason="queue_stopped"
            )
            return False
        if job.state.is_terminal:
            log.warning(
                "delivery_enqueue_rejected",
                job_id=job.job_id,
                reason="terminal_state",
                state=job.state.value,
            )
            return False
        if job.job_id in self._owned:
            log.warning(
                "delivery_enqueue_rejected", job_id=job.job_id, reason="already_queued"
            )
            return False

        job.state = JobState.PENDING
        self._owned.add(job.job_id)
        self._pending.append(job)
        self._idle.clear()
        self._wakeup.set()
        log.info(
            "delivery_job_enqueued",
            job_id=job.job_id,
            purpose=job.purpose.value,
            to_email=job.recipient,
            pending=len(self._pending),
        )
        return True

    # ── Worker side ──────────────────────────────────────────────────────────

    async def _next_job(self) -> DeliveryJob:
        while not self._pending:
            self._wakeup.clear()
            await self._wakeup.wait()
        return self._pending.popleft()

    async def _run(self) -> None:
        while True:
            job = await self._next_job()
            await self._process(job)

    async def _process(self, job: DeliveryJob) -> None:
        jlog = log_with_context(log, job_id=job.job_id, purpose=job.purpose.value)
        job.state = JobState.SENDING
        self._in_flight += 1
        try:
            result = await self._orchestrator.deliver(job)
        except Exception as e:
            jlog.error(
                "delivery_attempt_crashed",
                error=str(e),
                error_type=type(e).__name__,
            )
            result = DeliveryResult.failed(
                "orchestrator", ErrorKind.PROVIDER_UNREACHABLE, str(e)
            )
        finally:
            self._in_flight -= 1

        if result.success:
            job.state = JobState.DELIVERED
            self._delivered += 1
            self._release(job)
            jlog.info(
                "delivery_job_delivered",
                attempt=job.attempts + 1,
                **result.to_log_dict(),
            )
            return

        job.attempts += 1
        job.last_error = result.error_detail or (
            result.error_kind.value if result.error_kind else "unknown"
        )

        if job.attempts < self._max_retries:
            job.state = JobState.RETRY_SCHEDULED
            loop = asyncio.get_running_loop()
            self._retry_handles[job.job_id] = loop.call_later(
                self._retry_delay, self._requeue, job
            )
            jlog.warning(
                "delivery_retry_scheduled",
                attempts=job.attempts,
                max_retries=self._max_retries,
                retry_in=self._retry_delay,
                **result.to_log_dict(),
            )
            return

        job.state = JobState.DISCARDED
        self._discarded += 1
        self._release(job)
        jlog.error(
            "delivery_job_discarded",
            to_email=job.recipient,
            attempts=job.attempts,
            **result.to_log_dict(),
        )

    def _requeue(self, job: DeliveryJob) -> None:
        self._retry_handles.pop(job.job_id, None)
        job.state = JobState.PENDING
        self._pending.append(job)
        self._wakeup.set()

    def _release(self, job: DeliveryJob) -> None:
        self._owned.discard(job.job_id)
        if not self._owned:
            self._idle.set()

    def _on_worker_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(
                "delivery_queue_worker_died",
                error=str(exc),
                error_type=type(exc).__name__,
            )
