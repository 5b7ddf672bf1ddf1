#!/usr/bin/env python3
"""
Admin account seeder.

Creates the admin account used to log in through /api/auth/login-admin.
An existing admin with the same email is left untouched.

Usage:
    python seed_admin.py --email admin@frental.com --username admin --password '...'
"""

import argparse
import asyncio
import sys

from pymongo import AsyncMongoClient

from config import AppSettings
from repositories.account_repository import AccountRepository
from schemas.models.account import AdminDoc
from shared.crypto import hash_password
from shared.validators import normalize_email


async def seed_admin(settings: AppSettings, email: str, username: str, password: str) -> bool:
    """Insert the admin unless one exists. Returns True when created."""
    client = AsyncMongoClient(settings.db.mongodb_uri, tz_aware=True)
    try:
        repository = AccountRepository(client[settings.db.db_name])
        await repository.ensure_indexes()
        email = normalize_email(email)
        if await repository.find_admin_by_email(email):
            return False
        await repository.insert_admin(
            AdminDoc(username=username, email=email, password_hash=hash_password(password))
        )
        return True
    finally:
        await client.close()


def main():
    parser = argparse.ArgumentParser(description="Create the admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--username", default="admin")
    parser.add_argument("--password", required=True)
    args = parser.parse_args()

    try:
        created = asyncio.run(
            seed_admin(AppSettings(), args.email, args.username, args.password)
        )
    except Exception as e:
        print(f"❌ Seeding failed: {e}")
        sys.exit(1)

    if created:
        print(f"✅ Admin created: {args.username} ({args.email})")
    else:
        print(f"ℹ️  Admin already exists: {args.email}")


if __name__ == "__main__":
    main()
