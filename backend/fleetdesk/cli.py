"""Management CLI.

Usage:
    python -m fleetdesk.cli seed-permissions                     # Insert missing catalog permissions
    python -m fleetdesk.cli create-super-admin EMAIL PASSWORD    # Bootstrap the first account
    python -m fleetdesk.cli list-companies                       # Show all companies
"""

import asyncio
import sys

from sqlalchemy import func, select

from fleetdesk.auth.password import hash_password
from fleetdesk.config import settings
from fleetdesk.database import async_session
from fleetdesk.models.company import Company
from fleetdesk.models.role import Role
from fleetdesk.models.user import User
from fleetdesk.services.catalog import seed_catalog


async def seed_permissions():
    async with async_session() as db:
        created = await seed_catalog(db)
        await db.commit()
    print(f"  {created} permission(s) created")


async def create_super_admin(email: str, password: str):
    """Create (or promote) a super-admin account with no company."""
    email = email.strip().lower()
    async with async_session() as db:
        result = await db.execute(
            select(Role).where(func.lower(Role.name) == settings.super_admin_role.lower())
        )
        role = result.scalar_one_or_none()
        if role is None:
            role = Role(name=settings.super_admin_role, permissions=[], status="active")
            db.add(role)
            await db.flush()
            print(f"  Created role {role.name}")

        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                email=email,
                hashed_password=hash_password(password),
                full_name="Super Admin",
                role_id=role.id,
                company_id=None,
            )
            db.add(user)
            print(f"  Created super-admin {email}")
        else:
            user.role_id = role.id
            user.hashed_password = hash_password(password)
            user.status = "active"
            print(f"  Promoted {email} to super-admin")
        await db.commit()


async def list_companies():
    async with async_session() as db:
        result = await db.execute(select(Company).order_by(Company.name))
        companies = result.scalars().all()
    for c in companies:
        state = "deleted" if c.deleted_at else c.status
        print(f"  {c.id}  {c.name:<30} {state}")
    print(f"\n{len(companies)} company(ies)")


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "seed-permissions":
        asyncio.run(seed_permissions())
    elif cmd == "create-super-admin" and len(sys.argv) == 4:
        asyncio.run(create_super_admin(sys.argv[2], sys.argv[3]))
    elif cmd == "list-companies":
        asyncio.run(list_companies())
    else:
        print(
            "Usage: python -m fleetdesk.cli "
            "[seed-permissions|create-super-admin EMAIL PASSWORD|list-companies]"
        )
