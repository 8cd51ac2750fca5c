#!/usr/bin/env python3
"""
Create or update an admin account.

Usage:
    python scripts/create_admin_user.py --login admin --password secret
    python scripts/create_admin_user.py --login admin --password new-secret --update
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from rinart_cms.core.logging import configure_logging
from rinart_cms.core.security import hash_password
from rinart_cms.db import dispose_engine, get_sessionmaker, init_db
from rinart_cms.repositories.admin import SqlAlchemyAdminRepository


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or update an admin user")
    parser.add_argument("--login", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--update", action="store_true", help="Change the password of an existing user")
    return parser.parse_args(argv)


async def run(login: str, password: str, update: bool) -> int:
    login = login.strip()
    if not login or not password:
        print("Login and password must not be empty")
        return 1

    await init_db()
    try:
        async with get_sessionmaker()() as session:
            repo = SqlAlchemyAdminRepository(session)
            password_hash = hash_password(password)
            if update:
                user = await repo.update_password(login, password_hash)
                if user is None:
                    print(f"Admin user '{login}' not found")
                    return 1
                print(f"Password updated for '{login}'")
                return 0
            try:
                await repo.create_user(login, password_hash)
            except ValueError as exc:
                print(f"{exc}; pass --update to change the password")
                return 1
            print(f"Admin user '{login}' created")
            return 0
    finally:
        await dispose_engine()


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = parse_args(argv)
    return asyncio.run(run(args.login, args.password, args.update))


if __name__ == "__main__":
    sys.exit(main())
