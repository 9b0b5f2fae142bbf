"""
Command Center API Endpoints.

The landing page every role can open, plus the role's sidebar menu.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from fleetflow.app.core.config import settings
from fleetflow.app.core.dependencies import get_current_user
from fleetflow.app.core.exceptions import ResourceNotFoundError
from fleetflow.app.core.guards import require_section
from fleetflow.app.core.navigation import Section, menu_for, resolve_role
from fleetflow.app.db.session import get_db
from fleetflow.app.models.user import User
from fleetflow.app.schemas.dashboard import (
    CommandCenterResponse, NavigationResponse, MenuItemResponse
)
from fleetflow.app.services import cache
from fleetflow.app.services.analytics import AnalyticsService
from fleetflow.app.services.cache import CacheService

router = APIRouter(prefix="/dashboard", tags=["Command Center"])


async def build_navigation(db: AsyncSession, current_user: dict) -> NavigationResponse:
    """Sidebar for the signed-in user: display name, role and menu."""
    user = (await db.execute(
        select(User).where(User.id == current_user["user_id"])
    )).scalar_one_or_none()
    if not user:
        raise ResourceNotFoundError("User", current_user["user_id"])

    return NavigationResponse(
        role=resolve_role(current_user.get("role")),
        display_name=user.display_name,
        email=user.email,
        menu=[
            MenuItemResponse(section=item.section.value, label=item.label, path=item.path)
            for item in menu_for(current_user.get("role"))
        ]
    )


@router.get("/navigation", response_model=NavigationResponse)
async def get_navigation(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await build_navigation(db, current_user)


@router.get("", response_model=CommandCenterResponse)
async def get_command_center(
    current_user: dict = Depends(require_section(Section.COMMAND_CENTER)),
    db: AsyncSession = Depends(get_db)
):
    """
    Command center: fleet KPIs, the 20 most recent trips, vehicles and
    drivers with their lock state.
    """
    today = date.today()
    variant = cache.variant_for(
        user=current_user["user_id"], role=current_user["role"], day=today.isoformat()
    )
    cached = await CacheService.get(cache.DASHBOARD, variant)
    if cached is not None:
        return cached

    navigation = await build_navigation(db, current_user)
    response = await AnalyticsService.get_command_center(db, navigation, today=today)
    await CacheService.set(
        cache.DASHBOARD, response.model_dump(mode="json"),
        ttl_seconds=settings.page_cache_ttl_seconds, variant=variant
    )
    return response
