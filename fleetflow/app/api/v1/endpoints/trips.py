"""
Trip Dispatcher API Endpoints.

Dispatchers create trips against Ready vehicles and assignable drivers, then
move them through their lifecycle.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlalchemy import select, or_, cast, String
from typing import Optional

from fleetflow.app.core.config import settings
from fleetflow.app.core.exceptions import ResourceNotFoundError
from fleetflow.app.core.guards import require_section
from fleetflow.app.core.navigation import Section
from fleetflow.app.db.persistence import commit_or_raise
from fleetflow.app.db.session import get_db
from fleetflow.app.models.driver import Driver
from fleetflow.app.models.trip import Trip
from fleetflow.app.models.trip_enums import TripStatus
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.models.vehicle_enums import VehicleStatus
from fleetflow.app.schemas.trip import (
    TripCreate, TripStatusUpdate, TripResponse, TripListResponse,
    DispatchOptions, DispatchVehicle, DispatchDriver
)
from fleetflow.app.services import cache
from fleetflow.app.services.cache import CacheService
from fleetflow.app.services.dispatch import (
    TRIP_VEHICLE_STATUS, validate_trip_assignment, vehicle_status_for_trip
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["Trip Dispatcher"])

AFFECTED_PAGES = (cache.TRIPS, cache.DASHBOARD, cache.EXPENSES, cache.ANALYTICS)


async def _get_trip(db: AsyncSession, trip_id: int) -> Trip:
    result = await db.execute(
        select(Trip)
        .options(selectinload(Trip.vehicle))
        .where(Trip.id == trip_id)
        .execution_options(populate_existing=True)
    )
    trip = result.scalar_one_or_none()
    if not trip:
        raise ResourceNotFoundError("Trip", trip_id)
    return trip


async def _sync_vehicle_status(db: AsyncSession, vehicle_id: Optional[int], trip_status: TripStatus) -> bool:
    """
    Apply the vehicle status a trip status implies, as its own commit.

    Returns False when the write failed; the failure is logged and rolled
    back without touching the trip.
    """
    if vehicle_id is None:
        return True

    vehicle = (await db.execute(
        select(Vehicle).where(Vehicle.id == vehicle_id)
    )).scalar_one_or_none()
    new_status = vehicle_status_for_trip(trip_status, vehicle.status) if vehicle else None
    if new_status is None:
        return True

    vehicle.status = new_status
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to set vehicle %s to %s: %s", vehicle_id, new_status.value, e)
        return False
    return True


@router.get("", response_model=TripListResponse)
async def list_trips(
    status_filter: Optional[TripStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Matches driver, origin, destination or trip ID"),
    current_user: dict = Depends(require_section(Section.TRIPS)),
    db: AsyncSession = Depends(get_db)
):
    """List trips with their vehicle, newest first."""
    variant = cache.variant_for(status=status_filter, search=search)
    cached = await CacheService.get(cache.TRIPS, variant)
    if cached is not None:
        return cached

    query = select(Trip).options(selectinload(Trip.vehicle))
    if status_filter:
        query = query.where(Trip.status == status_filter)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            Trip.driver_name.ilike(pattern),
            Trip.origin.ilike(pattern),
            Trip.destination.ilike(pattern),
            cast(Trip.id, String).ilike(pattern)
        ))

    trips = (await db.execute(
        query.order_by(Trip.created_at.desc(), Trip.id.desc())
    )).scalars().all()

    response = TripListResponse(
        trips=[TripResponse.model_validate(t) for t in trips],
        total=len(trips)
    )
    await CacheService.set(
        cache.TRIPS, response.model_dump(mode="json"),
        ttl_seconds=settings.page_cache_ttl_seconds, variant=variant
    )
    return response


@router.get("/dispatch-options", response_model=DispatchOptions)
async def get_dispatch_options(
    current_user: dict = Depends(require_section(Section.TRIPS)),
    db: AsyncSession = Depends(get_db)
):
    """
    Choices for the dispatch form: Ready vehicles with their parsed capacity
    and every driver by name, locked ones flagged with the reason.
    """
    today = date.today()
    vehicles = (await db.execute(
        select(Vehicle).where(Vehicle.status == VehicleStatus.READY).order_by(Vehicle.plate_number)
    )).scalars().all()
    drivers = (await db.execute(select(Driver).order_by(Driver.name))).scalars().all()

    return DispatchOptions(
        vehicles=[DispatchVehicle.model_validate(v) for v in vehicles],
        drivers=[DispatchDriver.from_driver(d, today) for d in drivers]
    )


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(require_section(Section.TRIPS)),
    db: AsyncSession = Depends(get_db)
):
    trip = await _get_trip(db, trip_id)
    return TripResponse.model_validate(trip)


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    current_user: dict = Depends(require_section(Section.TRIPS)),
    db: AsyncSession = Depends(get_db)
):
    """
    Dispatch a new trip.

    Validates:
    - Driver license has not expired
    - Driver is On Duty
    - Cargo weight fits the vehicle's capacity

    The driver's name is copied onto the trip. A trip created already
    Dispatched, On Way or On Trip puts its vehicle On Trip, the same way a
    status update does. Recording a trip as Completed or Cancelled leaves
    the vehicle alone.
    """
    driver = None
    if trip_data.driver_id is not None:
        driver = (await db.execute(
            select(Driver).where(Driver.id == trip_data.driver_id)
        )).scalar_one_or_none()
        if not driver:
            raise ResourceNotFoundError("Driver", trip_data.driver_id)

    vehicle = None
    if trip_data.vehicle_id is not None:
        vehicle = (await db.execute(
            select(Vehicle).where(Vehicle.id == trip_data.vehicle_id)
        )).scalar_one_or_none()
        if not vehicle:
            raise ResourceNotFoundError("Vehicle", trip_data.vehicle_id)

    validate_trip_assignment(driver, vehicle, trip_data.cargo_weight, date.today())

    trip = Trip(**trip_data.model_dump(exclude={"driver_name"}))
    trip.driver_name = driver.name if driver else trip_data.driver_name
    db.add(trip)
    await commit_or_raise(db, "create trip")
    trip_id = trip.id

    logger.info("Trip %s created as %s", trip_id, trip.status.value)
    if TRIP_VEHICLE_STATUS.get(trip.status) == VehicleStatus.ON_TRIP:
        await _sync_vehicle_status(db, trip.vehicle_id, trip.status)
    await CacheService.revalidate(*AFFECTED_PAGES, cache.VEHICLES)

    trip = await _get_trip(db, trip_id)
    return TripResponse.model_validate(trip)


@router.patch("/{trip_id}/status", response_model=TripResponse)
async def update_trip_status(
    status_data: TripStatusUpdate,
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(require_section(Section.TRIPS)),
    db: AsyncSession = Depends(get_db)
):
    """
    Move a trip to a new status.

    Dispatched, On Way and On Trip put the vehicle On Trip; Completed and
    Cancelled release it to Ready. A vehicle In Shop, Out of Service or
    Retired keeps its status. The vehicle update is a separate write; if it
    fails the trip keeps its new status and the failure is logged.
    """
    trip = await _get_trip(db, trip_id)
    trip.status = status_data.status
    await commit_or_raise(db, "update trip status")

    await _sync_vehicle_status(db, trip.vehicle_id, status_data.status)

    await CacheService.revalidate(*AFFECTED_PAGES, cache.VEHICLES)

    trip = await _get_trip(db, trip_id)
    return TripResponse.model_validate(trip)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(require_section(Section.TRIPS)),
    db: AsyncSession = Depends(get_db)
):
    trip = await _get_trip(db, trip_id)
    await db.delete(trip)
    await commit_or_raise(db, "delete trip")

    await CacheService.revalidate(*AFFECTED_PAGES)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
