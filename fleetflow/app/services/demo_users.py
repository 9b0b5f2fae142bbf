"""
Demo account provisioning.

Creates one account per role with a shared password so the dashboard can be
tried without registering. Existing accounts are reset to the demo password,
name and role.
"""

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fleetflow.app.core.security import get_password_hash
from fleetflow.app.models.enums import UserRole
from fleetflow.app.models.user import User
from fleetflow.app.schemas.admin import DemoUserResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DemoAccount:
    email: str
    full_name: str
    role: UserRole


DEMO_ACCOUNTS = (
    DemoAccount("raja@gmail.com", "Raja", UserRole.SAFETY_OFFICER),
    DemoAccount("vishal@gmail.com", "Vishal", UserRole.FLEET_MANAGER),
    DemoAccount("shruthika@gmail.com", "Shruthika", UserRole.DISPATCHER),
    DemoAccount("sahil@gmail.com", "Sahil", UserRole.FINANCIAL_ANALYST),
)


async def provision_demo_users(db: AsyncSession, password: str) -> List[DemoUserResult]:
    """
    Create or update every demo account.

    Each account is committed on its own; a failure is reported in that
    account's result and the rest still go through.
    """
    hashed_password = get_password_hash(password)
    results = []

    for account in DEMO_ACCOUNTS:
        try:
            result = await db.execute(select(User).where(User.email == account.email))
            user = result.scalar_one_or_none()

            if user is None:
                db.add(User(
                    email=account.email,
                    full_name=account.full_name,
                    hashed_password=hashed_password,
                    role=account.role,
                    is_active=True,
                ))
                outcome = "created"
            else:
                user.full_name = account.full_name
                user.hashed_password = hashed_password
                user.role = account.role
                user.is_active = True
                outcome = "updated"

            await db.commit()
            results.append(DemoUserResult(email=account.email, status=outcome))
            logger.info("Demo user %s %s", account.email, outcome)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to provision demo user %s: %s", account.email, e)
            results.append(DemoUserResult(email=account.email, status="error", message=str(e)))

    return results
