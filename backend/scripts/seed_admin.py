"""
Seed the first administrator.

Every catalogue and user-management endpoint needs the Admin role, and
signing up never grants it. This script creates the account (or picks
up an existing one with the same email) and gives it the Admin role.
It is idempotent.

Usage:
    python scripts/seed_admin.py --email jsmadja@xebia.fr --name "Julien Smadja" --password changeme123

Security:
    IMPORTANT: Change the password immediately after first login!
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict

# Add backend directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlalchemy.ext.asyncio import AsyncSession

from skillz.core.database import async_session_maker, init_db
from skillz.core.security import ADMIN_ROLE, get_password_hash
from skillz.repositories.user import UserRepository


async def seed_admin(session: AsyncSession, name: str, email: str, password: str) -> Dict[str, Any]:
    """
    Create the admin user if needed and grant the Admin role.

    Returns:
        The user row, ``created`` set to True when the account is new
    """
    repo = UserRepository(session)

    user = await repo.find_user_by_email(email)
    created = user is None
    if created:
        user = await repo.create_user(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
        )

    await repo.add_role(user, ADMIN_ROLE)
    user = dict(user)
    user.pop("password", None)
    user["created"] = created
    return user


async def main(args: argparse.Namespace) -> None:
    await init_db()
    async with async_session_maker() as session:
        try:
            user = await seed_admin(session, args.name, args.email, args.password)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    if user["created"]:
        print(f"Admin user created: {user['email']} (id {user['id']})")
        print("WARNING: Please change this password immediately after first login!")
    else:
        print(f"Admin role granted to existing user {user['email']} (id {user['id']})")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or promote the first Skillz administrator")
    parser.add_argument("--email", required=True, help="Login email of the administrator")
    parser.add_argument("--name", default="Administrator", help="Display name for a new account")
    parser.add_argument("--password", default="changeme123", help="Password for a new account")
    return parser.parse_args()


if __name__ == "__main__":
    asyncio.run(main(parse_args()))
