"""
Input validators — framework-agnostic, pure functions.
"""

from __future__ import annotations

import re

_PHONE_RE = re.compile(r"^\+?[0-9]{7,15}$")


def validate_password(password: str) -> tuple[bool, list[str]]:
    """
    Check *password* against the account password policy.

    Returns:
        (is_valid, missing_requirements) — the list is empty when valid.
    """
    if not password:
        return False, ["Password is required"]

    missing = []
    if len(password) < 8:
        missing.append("At least 8 characters")
    if len(password) > 128:
        missing.append("Maximum 128 characters")
    if not re.search(r"[A-Za-z]", password):
        missing.append("At least one letter")
    if not re.search(r"[0-9]", password):
        missing.append("At least one number")

    return not missing, missing


def normalize_phone_number(phone_number: str) -> str:
    """Strip spaces, dashes and parentheses from a phone number."""
    return re.sub(r"[\s\-()]", "", phone_number or "")


def validate_phone_number(phone_number: str) -> bool:
    """Return True for 7–15 digits with an optional leading ``+``."""
    return bool(_PHONE_RE.match(normalize_phone_number(phone_number)))


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()
