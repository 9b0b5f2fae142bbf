"""
Commit helpers for write endpoints.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fleetflow.app.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


async def commit_or_raise(db: AsyncSession, action: str) -> None:
    """
    Commit the session, or roll back and raise ``PersistenceError`` carrying
    the database driver's message.
    """
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        message = str(getattr(e, "orig", None) or e)
        logger.error("Failed to %s: %s", action, message)
        raise PersistenceError(message) from e
