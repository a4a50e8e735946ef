"""
Create the super operator account.

The SUPER permission bit cannot be granted through the API, so the first
account is provisioned here, directly against the database.

Usage:
    python scripts/create_superuser.py --email admin@example.com --name Admin
"""

import argparse
import asyncio
import sys

sys.path.insert(0, ".")

from modelvault.database import async_session_maker, close_db, init_db
from modelvault.errors import ConflictError
from modelvault.kernel.identity.identity_service import IdentityService
from modelvault.kernel.permissions import RequiredRole
from modelvault.kernel.permissions.evaluator import ROLE_REQUIREMENTS


async def create_superuser(email: str, name: str, password: str = None) -> int:
    await init_db()
    try:
        async with async_session_maker() as session:
            service = IdentityService(session)
            try:
                user, plain_password = await service.create_user(
                    name=name,
                    email=email,
                    password=password,
                    permissions=int(ROLE_REQUIREMENTS[RequiredRole.SUPER_ADMIN]),
                )
            except ConflictError as e:
                print(f"{email}: {e.detail}")
                return 1
            await session.commit()
    finally:
        await close_db()

    print(f"Created super operator {user.email} ({user.id})")
    if not password:
        print(f"Generated PIN: {plain_password}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the super operator account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True)
    parser.add_argument("--password", help="defaults to a random 4-digit PIN")
    args = parser.parse_args()
    return asyncio.run(create_superuser(args.email, args.name, args.password))


if __name__ == "__main__":
    sys.exit(main())
