#!/usr/bin/env python3
"""CLI script to create an agent login.

Usage:
    python scripts/create_user.py --email agent@example.com --password changeme
    python scripts/create_user.py --email agent@example.com --password changeme --name "Jane Agent" --role admin

Connects directly to the database using DATABASE_URL from environment or .env file.
Creates the tables if they don't exist yet.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.crm
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def create_user(email: str, password: str, name: str | None, role: str) -> int:
    """Insert the user unless the email is already taken. Returns an exit code."""
    from sqlalchemy import func, select
    from sqlalchemy.ext.asyncio import AsyncSession

    from src.crm.core.database import close_db, get_engine, init_db
    from src.crm.core.security import hash_password
    from src.crm.models import User

    await init_db()

    try:
        async with AsyncSession(get_engine(), expire_on_commit=False) as session:
            existing = await session.scalar(
                select(User).where(func.lower(User.email) == email.lower())
            )
            if existing is not None:
                print(f"User already exists: {existing.email}", file=sys.stderr)
                return 1

            user = User(
                email=email.lower(),
                name=name,
                role=role,
                is_active=True,
                hashed_password=hash_password(password),
            )
            session.add(user)
            await session.commit()

        print("User created successfully:")
        print(f"  ID:    {user.id}")
        print(f"  Email: {user.email}")
        print(f"  Role:  {user.role}")
        return 0
    finally:
        await close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a CRM login")
    parser.add_argument("--email", required=True, help="Login email")
    parser.add_argument("--password", required=True, help="Login password")
    parser.add_argument("--name", default=None, help="Display name")
    parser.add_argument("--role", default="agent", choices=["agent", "admin"], help="User role")
    args = parser.parse_args()

    if len(args.password) < 8:
        parser.error("--password must be at least 8 characters")

    sys.exit(asyncio.run(create_user(args.email, args.password, args.name, args.role)))


if __name__ == "__main__":
    main()
