"""
Security guards for role-based access control.

Provides dependencies that admit a session only into the dashboard sections
its role grants (see ``core.navigation``).
"""

import secrets

from fastapi import Depends, HTTPException, Header, status
from typing import Optional

from fleetflow.app.core.config import settings
from fleetflow.app.core.dependencies import get_current_user
from fleetflow.app.core.navigation import Section, capabilities_for, MENU_ITEMS


def require_section(section: Section):
    """
    Dependency factory for section-based access control.

    Usage:
        @router.get("/drivers")
        async def list_drivers(current_user: dict = Depends(require_section(Section.DRIVERS))):
            ...

    Args:
        section: Dashboard section the endpoint belongs to

    Returns:
        FastAPI dependency function that validates the user's role

    Raises:
        HTTPException 403 if the role cannot open the section
    """
    async def section_checker(current_user: dict = Depends(get_current_user)) -> dict:
        capabilities = capabilities_for(current_user.get("role"))

        if not capabilities.can_access(section):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Your role ({current_user.get('role')}) cannot open {MENU_ITEMS[section].label}."
            )

        return current_user

    return section_checker


def require_service_key(x_service_key: Optional[str] = Header(default=None)) -> str:
    """
    Dependency for endpoints that run with the elevated service credential.

    Raises:
        HTTPException 500 when no service key is configured
        HTTPException 403 when the request does not present it
    """
    if not settings.service_role_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Service role key missing!"
        )

    if x_service_key is None or not secrets.compare_digest(
        x_service_key.encode("utf-8"), settings.service_role_key.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid service key"
        )

    return x_service_key
