"""
Shared test doubles.

FakeTransport              — scripted EmailTransport that records calls and
                             tracks how many sends overlap
InMemoryAccountRepository  — dict-backed stand-in for AccountRepository
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Optional, Sequence, Union

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from config import JWTSettings, TokenSettings
from infrastructure.email.protocol import DeliveryResult
from schemas.models.account import AdminDoc, LandlordDoc
from shared.tokens import ensure_utc

ScriptedOutcome = Union[DeliveryResult, BaseException]


class FakeTransport:
    """EmailTransport double.

    ``outcomes`` are consumed in order, the last one repeating. An exception
    outcome is raised instead of returned. When ``gate`` is given every send
    blocks until it is set.
    """

    def __init__(
        self,
        name: str = "fake",
        outcomes: Optional[Sequence[ScriptedOutcome]] = None,
        gate: Optional[asyncio.Event] = None,
        delay: float = 0.0,
    ) -> None:
        self.name = name
        self.calls: list[tuple[str, str, str]] = []
        self._outcomes = list(outcomes or [DeliveryResult.ok(name, "msg-1")])
        self.gate = gate
        self.delay = delay
        self.active = 0
        self.max_active = 0

    async def send(self, to: str, subject: str, html_body: str) -> DeliveryResult:
        self.calls.append((to, subject, html_body))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        finally:
            self.active -= 1

    @property
    def recipients(self) -> list[str]:
        return [call[0] for call in self.calls]


class InMemoryAccountRepository:
    """Mirrors AccountRepository's async interface over plain dicts."""

    def __init__(self) -> None:
        self.landlords: dict[ObjectId, LandlordDoc] = {}
        self.admins: dict[ObjectId, AdminDoc] = {}

    async def ensure_indexes(self) -> None:
        return None

    async def find_landlord_by_id(self, landlord_id: Any) -> Optional[LandlordDoc]:
        try:
            oid = ObjectId(str(landlord_id))
        except Exception:
            return None
        doc = self.landlords.get(oid)
        return doc.model_copy(deep=True) if doc else None

    async def find_landlord_by_phone(self, phone_number: str) -> Optional[LandlordDoc]:
        for doc in self.landlords.values():
            if doc.phone_number == phone_number:
                return doc.model_copy(deep=True)
        return None

    async def find_landlord_by_email(self, email: str) -> Optional[LandlordDoc]:
        for doc in self.landlords.values():
            if doc.email == email:
                return doc.model_copy(deep=True)
        return None

    async def insert_landlord(self, landlord: LandlordDoc) -> LandlordDoc:
        for doc in self.landlords.values():
            if doc.phone_number == landlord.phone_number or doc.email == landlord.email:
                raise DuplicateKeyError("duplicate key")
        landlord.id = ObjectId()
        self.landlords[landlord.id] = landlord.model_copy(deep=True)
        return landlord

    async def update_landlord(self, landlord_id: Any, fields: dict) -> Optional[LandlordDoc]:
        oid = ObjectId(str(landlord_id))
        if oid not in self.landlords:
            return None
        self.landlords[oid] = self.landlords[oid].model_copy(update=fields)
        return self.landlords[oid].model_copy(deep=True)

    # The conditional writes below never await between check and write, so on
    # one event loop they are as atomic as the filtered MongoDB updates.

    async def reissue_landlord_code(
        self, landlord_id: Any, issued_field: str, issued_before: datetime, fields: dict
    ) -> Optional[LandlordDoc]:
        doc = self.landlords.get(ObjectId(str(landlord_id)))
        if doc is None:
            return None
        issued = getattr(doc, issued_field)
        if issued is not None and ensure_utc(issued) > ensure_utc(issued_before):
            return None
        return await self.update_landlord(landlord_id, fields)

    async def claim_landlord_attempt(self, landlord_id: Any, field: str, limit: int) -> bool:
        oid = ObjectId(str(landlord_id))
        doc = self.landlords[oid]
        if getattr(doc, field) >= limit:
            return False
        self.landlords[oid] = doc.model_copy(update={field: getattr(doc, field) + 1})
        return True

    async def consume_landlord_code(
        self, landlord_id: Any, token_field: str, token_hash: str, fields: dict
    ) -> Optional[LandlordDoc]:
        doc = self.landlords.get(ObjectId(str(landlord_id)))
        if doc is None or getattr(doc, token_field) != token_hash:
            return None
        return await self.update_landlord(landlord_id, fields)

    async def find_admin_by_email(self, email: str) -> Optional[AdminDoc]:
        for doc in self.admins.values():
            if doc.email == email:
                return doc.model_copy(deep=True)
        return None

    async def insert_admin(self, admin: AdminDoc) -> AdminDoc:
        admin.id = ObjectId()
        self.admins[admin.id] = admin.model_copy(deep=True)
        return admin


@pytest.fixture
def token_settings() -> TokenSettings:
    return TokenSettings(
        verify_token_ttl_hours=24,
        reset_token_ttl_hours=1,
        min_resend_interval_seconds=60,
        short_code_length=6,
        max_code_attempts=5,
    )


@pytest.fixture
def jwt_settings() -> JWTSettings:
    return JWTSettings(
        jwt_secret="test-secret",
        jwt_issuer="frental",
        jwt_audience="frental.api",
        access_token_ttl_seconds=3600,
    )


@pytest.fixture
def account_repo() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def fake_transport():
    """Factory for FakeTransport instances."""
    return FakeTransport
