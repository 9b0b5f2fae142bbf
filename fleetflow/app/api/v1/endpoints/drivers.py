"""
Driver Profiles API Endpoints.

Safety Officers keep driver licenses and duty status current. Every driver is
returned with its assignment lock so the dispatcher can see who is blocked.
"""

from datetime import date

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import Optional

from fleetflow.app.core.config import settings
from fleetflow.app.core.exceptions import ResourceNotFoundError
from fleetflow.app.core.guards import require_section
from fleetflow.app.core.navigation import Section
from fleetflow.app.db.persistence import commit_or_raise
from fleetflow.app.db.session import get_db
from fleetflow.app.models.driver import Driver
from fleetflow.app.models.driver_enums import DutyStatus
from fleetflow.app.schemas.driver import (
    DriverCreate, DriverUpdate, DriverStatusUpdate,
    DriverResponse, DriverListResponse
)
from fleetflow.app.services import cache
from fleetflow.app.services.cache import CacheService

router = APIRouter(prefix="/drivers", tags=["Driver Profiles"])

AFFECTED_PAGES = (cache.DRIVERS, cache.DASHBOARD, cache.TRIPS)


async def _get_driver(db: AsyncSession, driver_id: int) -> Driver:
    result = await db.execute(select(Driver).where(Driver.id == driver_id))
    driver = result.scalar_one_or_none()
    if not driver:
        raise ResourceNotFoundError("Driver", driver_id)
    return driver


@router.get("", response_model=DriverListResponse)
async def list_drivers(
    duty_status: Optional[DutyStatus] = Query(None),
    search: Optional[str] = Query(None, description="Matches name or license number"),
    current_user: dict = Depends(require_section(Section.DRIVERS)),
    db: AsyncSession = Depends(get_db)
):
    """List drivers, newest first."""
    today = date.today()
    # Lock state depends on the date, so the day is part of the key
    variant = cache.variant_for(duty_status=duty_status, search=search, day=today.isoformat())
    cached = await CacheService.get(cache.DRIVERS, variant)
    if cached is not None:
        return cached

    query = select(Driver)
    if duty_status:
        query = query.where(Driver.duty_status == duty_status)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Driver.name.ilike(pattern), Driver.license_number.ilike(pattern)))

    drivers = (await db.execute(
        query.order_by(Driver.created_at.desc(), Driver.id.desc())
    )).scalars().all()

    response = DriverListResponse(
        drivers=[DriverResponse.from_driver(d, today) for d in drivers],
        total=len(drivers)
    )
    await CacheService.set(
        cache.DRIVERS, response.model_dump(mode="json"),
        ttl_seconds=settings.page_cache_ttl_seconds, variant=variant
    )
    return response


@router.get("/{driver_id}", response_model=DriverResponse)
async def get_driver(
    driver_id: int = Path(..., description="Driver ID"),
    current_user: dict = Depends(require_section(Section.DRIVERS)),
    db: AsyncSession = Depends(get_db)
):
    driver = await _get_driver(db, driver_id)
    return DriverResponse.from_driver(driver, date.today())


@router.post("", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def create_driver(
    driver_data: DriverCreate,
    current_user: dict = Depends(require_section(Section.DRIVERS)),
    db: AsyncSession = Depends(get_db)
):
    """Add a driver. Safety score and completion rate start at 100, complaints at 0."""
    driver = Driver(
        **driver_data.model_dump(),
        safety_score=100.0,
        completion_rate=100.0,
        complaints=0
    )
    db.add(driver)
    await commit_or_raise(db, "create driver")
    await db.refresh(driver)

    await CacheService.revalidate(*AFFECTED_PAGES)
    return DriverResponse.from_driver(driver, date.today())


@router.patch("/{driver_id}", response_model=DriverResponse)
async def update_driver(
    driver_data: DriverUpdate,
    driver_id: int = Path(..., description="Driver ID"),
    current_user: dict = Depends(require_section(Section.DRIVERS)),
    db: AsyncSession = Depends(get_db)
):
    driver = await _get_driver(db, driver_id)
    for field, value in driver_data.model_dump(exclude_unset=True).items():
        setattr(driver, field, value)

    await commit_or_raise(db, "update driver")
    await db.refresh(driver)

    await CacheService.revalidate(*AFFECTED_PAGES)
    return DriverResponse.from_driver(driver, date.today())


@router.patch("/{driver_id}/status", response_model=DriverResponse)
async def update_driver_status(
    status_data: DriverStatusUpdate,
    driver_id: int = Path(..., description="Driver ID"),
    current_user: dict = Depends(require_section(Section.DRIVERS)),
    db: AsyncSession = Depends(get_db)
):
    """Put a driver On Duty, Off Duty or Suspended."""
    driver = await _get_driver(db, driver_id)
    driver.duty_status = status_data.duty_status

    await commit_or_raise(db, "update driver status")
    await db.refresh(driver)

    await CacheService.revalidate(*AFFECTED_PAGES)
    return DriverResponse.from_driver(driver, date.today())


@router.delete("/{driver_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_driver(
    driver_id: int = Path(..., description="Driver ID"),
    current_user: dict = Depends(require_section(Section.DRIVERS)),
    db: AsyncSession = Depends(get_db)
):
    driver = await _get_driver(db, driver_id)
    await db.delete(driver)
    await commit_or_raise(db, "delete driver")

    await CacheService.revalidate(*AFFECTED_PAGES)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
