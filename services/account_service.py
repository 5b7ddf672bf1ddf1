"""
Landlord/admin account workflows.

Every workflow that sends an email hands it to NotificationService and
returns without waiting: the business operation succeeds whatever happens to
the email, which only surfaces in the logs.

Codes:
- one live code per (landlord, purpose); issuing a new one overwrites the old
- only SHA-256 hashes are stored, with an expiry and the issue time
- a new code for the same purpose may be requested once per
  ``min_resend_interval_seconds``, measured from the stored issue time
- each code can be checked at most ``max_code_attempts`` times; an attempt is
  counted before the comparison, and a matching code is cleared by the same
  write that uses it

The interval, the attempt counter and single use are enforced by conditional
repository writes, not by the values read at the start of the request.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Literal, Optional

from pymongo.errors import DuplicateKeyError

from config import JWTSettings, TokenSettings
from errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from repositories.account_repository import AccountRepository
from schemas.models.account import AdminDoc, LandlordDoc
from services.notification_service import NotificationService
from shared.crypto import hash_password, hash_token, token_matches, verify_password
from shared.jwt_tokens import ROLE_ADMIN, ROLE_LANDLORD, generate_access_jwt
from shared.logging import get_logger
from shared.tokens import (
    compute_expiry,
    generate_opaque_token,
    generate_short_code,
    is_expired,
    seconds_until,
    utc_now,
)
from shared.validators import (
    normalize_email,
    normalize_phone_number,
    validate_password,
    validate_phone_number,
)

log = get_logger(__name__)

Channel = Literal["app", "web"]

GENERIC_RESET_MESSAGE = "if the email exists, a reset code has been sent"


class AccountService:
    def __init__(
        self,
        repository: AccountRepository,
        notifications: NotificationService,
        token_settings: TokenSettings,
        jwt_settings: JWTSettings,
    ) -> None:
        self._repo = repository
        self._notifications = notifications
        self._tokens = token_settings
        self._jwt = jwt_settings

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _issue_code(self, channel: Channel) -> str:
        if channel == "web":
            return generate_opaque_token()
        return generate_short_code(self._tokens.short_code_length)

    def _check_resend_interval(
        self, issued_at: Optional[datetime], now: datetime, what: str
    ) -> None:
        if issued_at is None:
            return
        wait = self._tokens.min_resend_interval_seconds + seconds_until(issued_at, now)
        if wait > 0:
            raise self._throttled(what, wait)

    @staticmethod
    def _throttled(what: str, wait: float) -> RateLimitError:
        return RateLimitError(
            f"please wait before requesting another {what}",
            retry_after_seconds=wait,
        )

    async def _reissue(
        self,
        landlord: LandlordDoc,
        prefix: str,
        now: datetime,
        fields: dict,
        what: str,
    ) -> None:
        """Write a new ``<prefix>_*`` code unless one was issued within the interval.

        The stored issue time is checked again inside the update, so of several
        concurrent requests at most one gets through.
        """
        interval = self._tokens.min_resend_interval_seconds
        updated = await self._repo.reissue_landlord_code(
            landlord.id,
            f"{prefix}_issued_at",
            now - timedelta(seconds=interval),
            {**fields, f"{prefix}_issued_at": now, f"{prefix}_attempts": 0},
        )
        if updated is None:
            log.warning("code_reissue_throttled", landlord_id=str(landlord.id), purpose=prefix)
            raise self._throttled(what, interval)

    async def _claim_attempt(self, landlord: LandlordDoc, field: str) -> None:
        claimed = await self._repo.claim_landlord_attempt(
            landlord.id, field, self._tokens.max_code_attempts
        )
        if not claimed:
            log.warning("code_attempts_exhausted", landlord_id=str(landlord.id), field=field)
            raise ValidationError(
                "too many failed attempts, please request a new code", field="code"
            )

    @staticmethod
    def _check_password_policy(password: str) -> None:
        is_valid, missing = validate_password(password)
        if not is_valid:
            raise ValidationError(
                "password does not meet requirements",
                field="password",
                details={"missing_requirements": missing},
            )

    @staticmethod
    def _check_code(code: str, token_hash: str, expires_at: datetime) -> Optional[str]:
        """Return an error message, or None when *code* is valid."""
        if is_expired(expires_at):
            return "code has expired"
        if not token_matches(code.strip(), token_hash):
            return "invalid code"
        return None

    def landlord_profile(self, landlord: LandlordDoc) -> dict:
        return {
            "id": str(landlord.id),
            "full_name": landlord.full_name,
            "phone_number": landlord.phone_number,
            "email": landlord.email,
            "is_verified": landlord.is_verified,
            "created_at": landlord.created_at,
        }

    @staticmethod
    def admin_profile(admin: AdminDoc) -> dict:
        return {"id": str(admin.id), "username": admin.username, "email": admin.email}

    async def get_landlord(self, landlord_id: Optional[str]) -> Optional[LandlordDoc]:
        if not landlord_id:
            return None
        return await self._repo.find_landlord_by_id(landlord_id)

    # ── Registration & login ─────────────────────────────────────────────────

    async def register_landlord(
        self,
        full_name: str,
        phone_number: str,
        email: str,
        password: str,
        channel: Channel = "app",
    ) -> tuple[LandlordDoc, str]:
        """Create a landlord, queue the verification email, return (landlord, jwt)."""
        phone_number = normalize_phone_number(phone_number)
        email = normalize_email(email)
        full_name = full_name.strip()

        if not full_name:
            raise ValidationError("full name is required", field="full_name")
        if not validate_phone_number(phone_number):
            raise ValidationError("invalid phone number", field="phone_number")
        self._check_password_policy(password)

        if await self._repo.find_landlord_by_phone(phone_number):
            raise ConflictError(
                "landlord with this phone number already exists", field="phone_number"
            )
        if await self._repo.find_landlord_by_email(email):
            raise ConflictError("landlord with this email already exists", field="email")

        now = utc_now()
        code = self._issue_code(channel)
        landlord = LandlordDoc(
            full_name=full_name,
            phone_number=phone_number,
            email=email,
            password_hash=hash_password(password),
            verify_token=hash_token(code),
            verify_expires=compute_expiry(self._tokens.verify_token_ttl_hours, now),
            verify_issued_at=now,
        )
        try:
            landlord = await self._repo.insert_landlord(landlord)
        except DuplicateKeyError:
            raise ConflictError("landlord with this phone number or email already exists")

        log.info("landlord_registered", landlord_id=str(landlord.id), channel=channel)
        self._notifications.deliver_verification_notice(
            landlord.email, code, landlord.full_name, as_link=channel == "web"
        )

        token = generate_access_jwt(self._jwt, str(landlord.id), ROLE_LANDLORD)
        return landlord, token

    async def login_landlord(self, phone_number: str, password: str) -> tuple[LandlordDoc, str]:
        landlord = await self._repo.find_landlord_by_phone(
            normalize_phone_number(phone_number)
        )
        if landlord is None or not verify_password(password, landlord.password_hash):
            log.warning("landlord_login_failed")
            raise AuthenticationError("invalid phone number or password")

        log.info("landlord_login", landlord_id=str(landlord.id))
        return landlord, generate_access_jwt(self._jwt, str(landlord.id), ROLE_LANDLORD)

    async def login_admin(self, email: str, password: str) -> tuple[AdminDoc, str]:
        admin = await self._repo.find_admin_by_email(normalize_email(email))
        if admin is None or not verify_password(password, admin.password_hash):
            log.warning("admin_login_failed")
            raise AuthenticationError("invalid email or password")

        log.info("admin_login", admin_id=str(admin.id))
        return admin, generate_access_jwt(self._jwt, str(admin.id), ROLE_ADMIN)

    # ── Email verification ───────────────────────────────────────────────────

    async def verify_email(self, email: str, code: str) -> LandlordDoc:
        landlord = await self._repo.find_landlord_by_email(normalize_email(email))
        if landlord is None:
            raise ValidationError("invalid email or code")
        if landlord.is_verified:
            raise ValidationError("email already verified")

        if not landlord.verify_token or landlord.verify_expires is None:
            raise ValidationError("invalid or expired code", field="code")

        await self._claim_attempt(landlord, "verify_attempts")
        error = self._check_code(code, landlord.verify_token, landlord.verify_expires)
        if error is not None:
            log.warning(
                "email_verification_failed", landlord_id=str(landlord.id), reason=error
            )
            raise ValidationError(error, field="code")

        updated = await self._repo.consume_landlord_code(
            landlord.id,
            "verify_token",
            landlord.verify_token,
            {
                "is_verified": True,
                "verify_token": None,
                "verify_expires": None,
                "verify_attempts": 0,
            },
        )
        if updated is None:
            raise ValidationError("invalid or expired code", field="code")
        log.info("email_verified", landlord_id=str(landlord.id))
        return updated

    async def resend_verification(self, email: str, channel: Channel = "app") -> None:
        landlord = await self._repo.find_landlord_by_email(normalize_email(email))
        if landlord is None:
            raise NotFoundError("landlord not found")
        if landlord.is_verified:
            raise ValidationError("email already verified")

        now = utc_now()
        self._check_resend_interval(landlord.verify_issued_at, now, "verification code")

        code = self._issue_code(channel)
        await self._reissue(
            landlord,
            "verify",
            now,
            {
                "verify_token": hash_token(code),
                "verify_expires": compute_expiry(self._tokens.verify_token_ttl_hours, now),
            },
            "verification code",
        )
        log.info("verification_code_reissued", landlord_id=str(landlord.id))
        self._notifications.deliver_verification_notice(
            landlord.email, code, landlord.full_name, as_link=channel == "web"
        )

    # ── Password reset ───────────────────────────────────────────────────────

    async def forgot_password(self, email: str) -> None:
        """Issue a reset code. Unknown emails succeed silently (no enumeration)."""
        landlord = await self._repo.find_landlord_by_email(normalize_email(email))
        if landlord is None:
            log.warning("password_reset_requested_nonexistent")
            return

        now = utc_now()
        self._check_resend_interval(landlord.reset_issued_at, now, "reset code")

        code = generate_short_code(self._tokens.short_code_length)
        await self._reissue(
            landlord,
            "reset",
            now,
            {
                "reset_token": hash_token(code),
                "reset_expires": compute_expiry(self._tokens.reset_token_ttl_hours, now),
            },
            "reset code",
        )
        log.info("password_reset_code_issued", landlord_id=str(landlord.id))
        self._notifications.deliver_password_reset_notice(
            landlord.email, code, landlord.full_name
        )

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        landlord = await self._repo.find_landlord_by_email(normalize_email(email))
        if landlord is None:
            raise ValidationError("invalid email or code")

        self._check_password_policy(new_password)

        if not landlord.reset_token or landlord.reset_expires is None:
            raise ValidationError("invalid or expired code", field="code")

        await self._claim_attempt(landlord, "reset_attempts")
        error = self._check_code(code, landlord.reset_token, landlord.reset_expires)
        if error is not None:
            log.warning("password_reset_failed", landlord_id=str(landlord.id), reason=error)
            raise ValidationError(error, field="code")

        updated = await self._repo.consume_landlord_code(
            landlord.id,
            "reset_token",
            landlord.reset_token,
            {
                "password_hash": hash_password(new_password),
                "reset_token": None,
                "reset_expires": None,
                "reset_attempts": 0,
            },
        )
        if updated is None:
            raise ValidationError("invalid or expired code", field="code")
        log.info("password_reset_success", landlord_id=str(landlord.id))
        self._notifications.deliver_password_changed_notice(
            landlord.email, landlord.full_name
        )

    async def change_password(
        self, landlord: LandlordDoc, current_password: str, new_password: str
    ) -> None:
        if not verify_password(current_password, landlord.password_hash):
            raise AuthenticationError("current password is incorrect", field="current_password")
        self._check_password_policy(new_password)

        await self._repo.update_landlord(
            landlord.id, {"password_hash": hash_password(new_password)}
        )
        log.info("password_changed", landlord_id=str(landlord.id))
        self._notifications.deliver_password_changed_notice(
            landlord.email, landlord.full_name
        )
