"""
Landlord/admin account persistence over pymongo's async client.

The repository only moves documents in and out of MongoDB; every rule about
codes, expiry and throttling lives in AccountService. Writes that depend on
the current document state (resend interval, attempt limit, single-use codes)
carry that state in the update filter so the check and the write are one
server-side operation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument

from schemas.models.account import AdminDoc, LandlordDoc
from shared.logging import get_logger

log = get_logger(__name__)

LANDLORDS_COLLECTION = "landlords"
ADMINS_COLLECTION = "admins"


def _object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


class AccountRepository:
    def __init__(self, db: Any) -> None:
        self._landlords = db[LANDLORDS_COLLECTION]
        self._admins = db[ADMINS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._landlords.create_index([("phone_number", ASCENDING)], unique=True)
        await self._landlords.create_index([("email", ASCENDING)], unique=True)
        await self._admins.create_index([("email", ASCENDING)], unique=True)
        log.info("account_indexes_ensured")

    # ── Landlords ────────────────────────────────────────────────────────────

    async def find_landlord_by_id(self, landlord_id: Any) -> Optional[LandlordDoc]:
        oid = _object_id(landlord_id)
        if oid is None:
            return None
        return LandlordDoc.from_mongo(await self._landlords.find_one({"_id": oid}))

    async def find_landlord_by_phone(self, phone_number: str) -> Optional[LandlordDoc]:
        return LandlordDoc.from_mongo(
            await self._landlords.find_one({"phone_number": phone_number})
        )

    async def find_landlord_by_email(self, email: str) -> Optional[LandlordDoc]:
        return LandlordDoc.from_mongo(await self._landlords.find_one({"email": email}))

    async def insert_landlord(self, landlord: LandlordDoc) -> LandlordDoc:
        """Insert *landlord* and return it with its generated id.

        Raises:
            pymongo.errors.DuplicateKeyError: phone number or email taken.
        """
        now = datetime.now(timezone.utc)
        if landlord.created_at is None:
            landlord.created_at = now
        landlord.updated_at = now
        result = await self._landlords.insert_one(landlord.to_mongo())
        landlord.id = result.inserted_id
        return landlord

    async def update_landlord(
        self, landlord_id: Any, fields: dict[str, Any]
    ) -> Optional[LandlordDoc]:
        """``$set`` *fields* on the landlord and return the updated document."""
        oid = _object_id(landlord_id)
        if oid is None:
            return None
        updated = await self._landlords.find_one_and_update(
            {"_id": oid},
            {"$set": {**fields, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        return LandlordDoc.from_mongo(updated)

    async def reissue_landlord_code(
        self,
        landlord_id: Any,
        issued_field: str,
        issued_before: datetime,
        fields: dict[str, Any],
    ) -> Optional[LandlordDoc]:
        """``$set`` *fields* only when *issued_field* is unset or not later than *issued_before*.

        Returns None when a code was issued more recently, so concurrent
        requests cannot both pass the resend interval.
        """
        oid = _object_id(landlord_id)
        if oid is None:
            return None
        updated = await self._landlords.find_one_and_update(
            {
                "_id": oid,
                "$or": [
                    {issued_field: None},
                    {issued_field: {"$lte": issued_before}},
                ],
            },
            {"$set": {**fields, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        return LandlordDoc.from_mongo(updated)

    async def claim_landlord_attempt(self, landlord_id: Any, field: str, limit: int) -> bool:
        """``$inc`` the *field* counter unless it already reached *limit*.

        False means no attempts are left.
        """
        oid = _object_id(landlord_id)
        if oid is None:
            return False
        result = await self._landlords.update_one(
            {
                "_id": oid,
                "$or": [{field: {"$exists": False}}, {field: {"$lt": limit}}],
            },
            {"$inc": {field: 1}},
        )
        return result.modified_count == 1

    async def consume_landlord_code(
        self,
        landlord_id: Any,
        token_field: str,
        token_hash: str,
        fields: dict[str, Any],
    ) -> Optional[LandlordDoc]:
        """``$set`` *fields* only while *token_field* still holds *token_hash*.

        None means the code was already used or replaced.
        """
        oid = _object_id(landlord_id)
        if oid is None:
            return None
        updated = await self._landlords.find_one_and_update(
            {"_id": oid, token_field: token_hash},
            {"$set": {**fields, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        return LandlordDoc.from_mongo(updated)

    # ── Admins ───────────────────────────────────────────────────────────────

    async def find_admin_by_email(self, email: str) -> Optional[AdminDoc]:
        return AdminDoc.from_mongo(await self._admins.find_one({"email": email}))

    async def insert_admin(self, admin: AdminDoc) -> AdminDoc:
        if admin.created_at is None:
            admin.created_at = datetime.now(timezone.utc)
        result = await self._admins.insert_one(admin.to_mongo())
        admin.id = result.inserted_id
        return admin
