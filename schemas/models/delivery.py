"""
In-memory delivery job model.

A DeliveryJob is one outbound notification plus its retry bookkeeping.
Jobs are never persisted: once enqueued they belong to the DeliveryQueue,
and a job that reaches a terminal state is dropped.

State machine:
    pending → sending → delivered
                      → retry_scheduled → pending
                      → discarded
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class DeliveryPurpose(str, Enum):
    VERIFICATION = "verification"
    PASSWORD_RESET = "password_reset"
    PASSWORD_CHANGED = "password_changed"


class JobState(str, Enum):
    PENDING = "pending"
    SENDING = "sending"
    RETRY_SCHEDULED = "retry_scheduled"
    DELIVERED = "delivered"
    DISCARDED = "discarded"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.DELIVERED, JobState.DISCARDED)


def _new_job_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class DeliveryJob:
    recipient: str
    purpose: DeliveryPurpose
    subject: str
    html_body: str
    payload: dict[str, Any] = field(default_factory=dict)
    attempts: int = 0
    state: JobState = JobState.PENDING
    job_id: str = field(default_factory=_new_job_id)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_error: Optional[str] = None
