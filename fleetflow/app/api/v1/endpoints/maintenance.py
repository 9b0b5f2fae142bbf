"""
Maintenance & Service Logs API Endpoints.

Logging a service sends the vehicle to the shop; completing it stamps the
completion date used by the financial reports.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlalchemy import select

from fleetflow.app.core.config import settings
from fleetflow.app.core.exceptions import ResourceNotFoundError
from fleetflow.app.core.guards import require_section
from fleetflow.app.core.navigation import Section
from fleetflow.app.db.persistence import commit_or_raise
from fleetflow.app.db.session import get_db
from fleetflow.app.models.maintenance_enums import MaintenanceStatus
from fleetflow.app.models.maintenance_log import MaintenanceLog
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.models.vehicle_enums import VehicleStatus
from fleetflow.app.schemas.maintenance import (
    MaintenanceLogCreate, MaintenanceStatusUpdate, MaintenanceLogResponse,
    MaintenanceCreateResponse, MaintenanceOverview
)
from fleetflow.app.services import cache
from fleetflow.app.services.analytics import AnalyticsService
from fleetflow.app.services.cache import CacheService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/maintenance", tags=["Maintenance & Service Logs"])

AFFECTED_PAGES = (cache.MAINTENANCE, cache.VEHICLES, cache.DASHBOARD, cache.EXPENSES, cache.ANALYTICS)


def _to_response(log: MaintenanceLog) -> MaintenanceLogResponse:
    response = MaintenanceLogResponse.model_validate(log)
    response.vehicle_plate = log.vehicle.plate_number if log.vehicle else None
    return response


async def _get_log(db: AsyncSession, log_id: int) -> MaintenanceLog:
    result = await db.execute(
        select(MaintenanceLog)
        .options(selectinload(MaintenanceLog.vehicle))
        .where(MaintenanceLog.id == log_id)
        .execution_options(populate_existing=True)
    )
    log = result.scalar_one_or_none()
    if not log:
        raise ResourceNotFoundError("Maintenance log", log_id)
    return log


@router.get("", response_model=MaintenanceOverview)
async def list_maintenance_logs(
    current_user: dict = Depends(require_section(Section.MAINTENANCE)),
    db: AsyncSession = Depends(get_db)
):
    """Maintenance page: status KPIs and every log, newest first."""
    cached = await CacheService.get(cache.MAINTENANCE)
    if cached is not None:
        return cached

    logs = (await db.execute(
        select(MaintenanceLog)
        .options(selectinload(MaintenanceLog.vehicle))
        .order_by(MaintenanceLog.created_at.desc(), MaintenanceLog.id.desc())
    )).scalars().all()

    response = MaintenanceOverview(
        kpis=await AnalyticsService.get_maintenance_kpis(db),
        logs=[_to_response(log) for log in logs]
    )
    await CacheService.set(
        cache.MAINTENANCE, response.model_dump(mode="json"),
        ttl_seconds=settings.page_cache_ttl_seconds
    )
    return response


@router.post("", response_model=MaintenanceCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_maintenance_log(
    log_data: MaintenanceLogCreate,
    current_user: dict = Depends(require_section(Section.MAINTENANCE)),
    db: AsyncSession = Depends(get_db)
):
    """
    Log a service as Scheduled and put the vehicle In Shop.

    The vehicle update is committed on its own after the log. If it fails the
    log stays and ``vehicle_status_updated`` is false.
    """
    vehicle = None
    if log_data.vehicle_id is not None:
        vehicle = (await db.execute(
            select(Vehicle).where(Vehicle.id == log_data.vehicle_id)
        )).scalar_one_or_none()
        if not vehicle:
            raise ResourceNotFoundError("Vehicle", log_data.vehicle_id)

    log = MaintenanceLog(**log_data.model_dump(), status=MaintenanceStatus.SCHEDULED)
    db.add(log)
    await commit_or_raise(db, "create maintenance log")
    log_id = log.id

    vehicle_status_updated = False
    if vehicle is not None:
        vehicle_id = vehicle.id
        vehicle.status = VehicleStatus.IN_SHOP
        try:
            await db.commit()
            vehicle_status_updated = True
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to set vehicle %s In Shop after maintenance log %s: %s", vehicle_id, log_id, e)

    await CacheService.revalidate(*AFFECTED_PAGES)

    log = await _get_log(db, log_id)
    return MaintenanceCreateResponse(log=_to_response(log), vehicle_status_updated=vehicle_status_updated)


@router.patch("/{log_id}/status", response_model=MaintenanceLogResponse)
async def update_maintenance_status(
    status_data: MaintenanceStatusUpdate,
    log_id: int = Path(..., description="Maintenance log ID"),
    current_user: dict = Depends(require_section(Section.MAINTENANCE)),
    db: AsyncSession = Depends(get_db)
):
    """Move a log to a new status; Completed stamps today's date."""
    log = await _get_log(db, log_id)
    log.status = status_data.status
    if status_data.status == MaintenanceStatus.COMPLETED:
        log.completed_date = date.today()

    await commit_or_raise(db, "update maintenance status")

    await CacheService.revalidate(*AFFECTED_PAGES)
    return _to_response(await _get_log(db, log_id))


@router.delete("/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_maintenance_log(
    log_id: int = Path(..., description="Maintenance log ID"),
    current_user: dict = Depends(require_section(Section.MAINTENANCE)),
    db: AsyncSession = Depends(get_db)
):
    log = await _get_log(db, log_id)
    await db.delete(log)
    await commit_or_raise(db, "delete maintenance log")

    await CacheService.revalidate(*AFFECTED_PAGES)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
