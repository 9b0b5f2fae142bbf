"""
Vehicle Registry API Endpoints.

Fleet Managers register vehicles and keep their status current.
"""

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import Optional

from fleetflow.app.core.config import settings
from fleetflow.app.core.exceptions import DuplicateResourceError, ResourceNotFoundError
from fleetflow.app.core.guards import require_section
from fleetflow.app.core.navigation import Section
from fleetflow.app.db.persistence import commit_or_raise
from fleetflow.app.db.session import get_db
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.models.vehicle_enums import VehicleType, VehicleStatus
from fleetflow.app.schemas.vehicle import (
    VehicleCreate, VehicleUpdate, VehicleStatusUpdate,
    VehicleResponse, VehicleRegistryResponse
)
from fleetflow.app.services import cache
from fleetflow.app.services.analytics import AnalyticsService
from fleetflow.app.services.cache import CacheService

router = APIRouter(prefix="/vehicles", tags=["Vehicle Registry"])

# Pages listing vehicles or their status
AFFECTED_PAGES = (cache.VEHICLES, cache.DASHBOARD, cache.TRIPS, cache.EXPENSES, cache.ANALYTICS)


async def _get_vehicle(db: AsyncSession, vehicle_id: int) -> Vehicle:
    result = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = result.scalar_one_or_none()
    if not vehicle:
        raise ResourceNotFoundError("Vehicle", vehicle_id)
    return vehicle


async def _ensure_plate_available(db: AsyncSession, plate_number: str, exclude_id: Optional[int] = None):
    query = select(Vehicle.id).where(Vehicle.plate_number == plate_number)
    if exclude_id is not None:
        query = query.where(Vehicle.id != exclude_id)
    if (await db.execute(query)).first():
        raise DuplicateResourceError(
            f"Vehicle with plate number {plate_number} already exists",
            field="plate_number"
        )


@router.get("", response_model=VehicleRegistryResponse)
async def list_vehicles(
    status_filter: Optional[VehicleStatus] = Query(None, alias="status"),
    type_filter: Optional[VehicleType] = Query(None, alias="type"),
    region: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Matches plate number or model"),
    current_user: dict = Depends(require_section(Section.VEHICLES)),
    db: AsyncSession = Depends(get_db)
):
    """
    Vehicle registry page: KPIs over the whole fleet plus the (filtered)
    vehicle list, newest first.
    """
    variant = cache.variant_for(status=status_filter, type=type_filter, region=region, search=search)
    cached = await CacheService.get(cache.VEHICLES, variant)
    if cached is not None:
        return cached

    query = select(Vehicle)
    if status_filter:
        query = query.where(Vehicle.status == status_filter)
    if type_filter:
        query = query.where(Vehicle.type == type_filter)
    if region:
        query = query.where(Vehicle.region == region)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Vehicle.plate_number.ilike(pattern), Vehicle.model.ilike(pattern)))

    vehicles = (await db.execute(
        query.order_by(Vehicle.created_at.desc(), Vehicle.id.desc())
    )).scalars().all()

    response = VehicleRegistryResponse(
        kpis=await AnalyticsService.get_vehicle_registry_kpis(db),
        vehicles=[VehicleResponse.model_validate(v) for v in vehicles]
    )
    await CacheService.set(
        cache.VEHICLES, response.model_dump(mode="json"),
        ttl_seconds=settings.page_cache_ttl_seconds, variant=variant
    )
    return response


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: dict = Depends(require_section(Section.VEHICLES)),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await _get_vehicle(db, vehicle_id)
    return VehicleResponse.model_validate(vehicle)


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    current_user: dict = Depends(require_section(Section.VEHICLES)),
    db: AsyncSession = Depends(get_db)
):
    """Register a new vehicle. Plate numbers are unique."""
    await _ensure_plate_available(db, vehicle_data.plate_number)

    vehicle = Vehicle(**vehicle_data.model_dump())
    db.add(vehicle)
    await commit_or_raise(db, "create vehicle")
    await db.refresh(vehicle)

    await CacheService.revalidate(*AFFECTED_PAGES)
    return VehicleResponse.model_validate(vehicle)


@router.patch("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_data: VehicleUpdate,
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: dict = Depends(require_section(Section.VEHICLES)),
    db: AsyncSession = Depends(get_db)
):
    """Update the provided fields of a vehicle."""
    vehicle = await _get_vehicle(db, vehicle_id)
    changes = vehicle_data.model_dump(exclude_unset=True)

    if changes.get("plate_number") and changes["plate_number"] != vehicle.plate_number:
        await _ensure_plate_available(db, changes["plate_number"], exclude_id=vehicle.id)

    for field, value in changes.items():
        setattr(vehicle, field, value)

    await commit_or_raise(db, "update vehicle")
    await db.refresh(vehicle)

    await CacheService.revalidate(*AFFECTED_PAGES)
    return VehicleResponse.model_validate(vehicle)


@router.patch("/{vehicle_id}/status", response_model=VehicleResponse)
async def update_vehicle_status(
    status_data: VehicleStatusUpdate,
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: dict = Depends(require_section(Section.VEHICLES)),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await _get_vehicle(db, vehicle_id)
    vehicle.status = status_data.status

    await commit_or_raise(db, "update vehicle status")
    await db.refresh(vehicle)

    await CacheService.revalidate(*AFFECTED_PAGES)
    return VehicleResponse.model_validate(vehicle)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: dict = Depends(require_section(Section.VEHICLES)),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await _get_vehicle(db, vehicle_id)
    await db.delete(vehicle)
    await commit_or_raise(db, "delete vehicle")

    await CacheService.revalidate(*AFFECTED_PAGES, cache.MAINTENANCE)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
