"""
Token Revocation System using Redis.

Sign-out revokes the presented token; a password change revokes every token
the user was issued before the change.
"""

import logging
import time
from typing import Optional

from fleetflow.app.core import redis_client as redis_module
from fleetflow.app.core.config import settings

logger = logging.getLogger(__name__)

# Redis key prefixes
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"
USER_TOKENS_PREFIX = "user:tokens:"


def _token_ttl_seconds() -> int:
    # Tokens expire on their own after this, so the markers can too.
    return settings.access_token_expire_minutes * 60


async def revoke_token(token: str, user_id: int) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        token: The JWT token string to revoke
        user_id: User ID who owns the token

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        await redis_module.redis_client.set(key, str(user_id), ex=_token_ttl_seconds())
        return True
    except Exception as e:
        logger.error("Error revoking token for user %s: %s", user_id, e)
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    If Redis is unreachable the request is allowed through.
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        exists = await redis_module.redis_client.exists(key)
        return exists > 0
    except Exception as e:
        logger.warning("Error checking token revocation: %s", e)
        return False


async def revoke_user_tokens_issued_before_now(user_id: int) -> bool:
    """
    Revoke every token issued to ``user_id`` up to this moment.

    Tokens issued afterwards (a fresh sign-in) remain valid.
    """
    try:
        key = f"{USER_TOKENS_PREFIX}{user_id}:revoked_before"
        await redis_module.redis_client.set(key, repr(time.time()), ex=_token_ttl_seconds())
        return True
    except Exception as e:
        logger.error("Error revoking all tokens for user %s: %s", user_id, e)
        return False


async def is_issued_before_revocation(user_id: int, issued_at: Optional[float]) -> bool:
    """Return True when the token's ``iat`` predates the user's revocation mark."""
    try:
        key = f"{USER_TOKENS_PREFIX}{user_id}:revoked_before"
        revoked_before = await redis_module.redis_client.get(key)
    except Exception as e:
        logger.warning("Error checking user token revocation: %s", e)
        return False

    if revoked_before is None:
        return False
    if issued_at is None:
        return True
    return float(issued_at) <= float(revoked_before)
