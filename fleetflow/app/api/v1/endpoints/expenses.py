"""
Expense & Fuel Logging API Endpoints.

Fuel and miscellaneous spend can only be logged against completed trips.
"""

from datetime import date

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select, or_, cast, String
from typing import List, Optional

from fleetflow.app.core.config import settings
from fleetflow.app.core.exceptions import BusinessRuleError, ResourceNotFoundError
from fleetflow.app.core.guards import require_section
from fleetflow.app.core.navigation import Section
from fleetflow.app.db.persistence import commit_or_raise
from fleetflow.app.db.session import get_db
from fleetflow.app.models.expense import Expense
from fleetflow.app.models.trip import Trip
from fleetflow.app.models.trip_enums import TripStatus
from fleetflow.app.schemas.expense import (
    ExpenseCreate, ExpenseResponse, ExpenseTripOption,
    ExpenseOverview, VehicleOperationalCost
)
from fleetflow.app.services import cache
from fleetflow.app.services.analytics import AnalyticsService
from fleetflow.app.services.cache import CacheService

router = APIRouter(prefix="/expenses", tags=["Expense & Fuel Logging"])

AFFECTED_PAGES = (cache.EXPENSES, cache.ANALYTICS)


@router.get("", response_model=ExpenseOverview)
async def list_expenses(
    search: Optional[str] = Query(None, description="Matches trip ID or driver name"),
    current_user: dict = Depends(require_section(Section.EXPENSES)),
    db: AsyncSession = Depends(get_db)
):
    """Expenses page: logged expenses, newest first, and operational cost per vehicle."""
    variant = cache.variant_for(search=search)
    cached = await CacheService.get(cache.EXPENSES, variant)
    if cached is not None:
        return cached

    query = select(Expense)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            Expense.driver_name.ilike(pattern),
            cast(Expense.trip_id, String).ilike(pattern)
        ))

    expenses = (await db.execute(
        query.order_by(Expense.date.desc(), Expense.id.desc())
    )).scalars().all()

    response = ExpenseOverview(
        expenses=[ExpenseResponse.model_validate(e) for e in expenses],
        vehicle_costs=await AnalyticsService.get_vehicle_operational_costs(db)
    )
    await CacheService.set(
        cache.EXPENSES, response.model_dump(mode="json"),
        ttl_seconds=settings.page_cache_ttl_seconds, variant=variant
    )
    return response


@router.get("/trip-options", response_model=List[ExpenseTripOption])
async def get_expense_trip_options(
    current_user: dict = Depends(require_section(Section.EXPENSES)),
    db: AsyncSession = Depends(get_db)
):
    """Completed trips an expense can be logged against."""
    trips = (await db.execute(
        select(Trip)
        .options(selectinload(Trip.vehicle))
        .where(Trip.status == TripStatus.COMPLETED)
        .order_by(Trip.created_at.desc(), Trip.id.desc())
    )).scalars().all()
    return [ExpenseTripOption.model_validate(t) for t in trips]


@router.get("/vehicle-costs", response_model=List[VehicleOperationalCost])
async def get_vehicle_costs(
    current_user: dict = Depends(require_section(Section.EXPENSES)),
    db: AsyncSession = Depends(get_db)
):
    """Fuel plus completed maintenance per vehicle, costliest first."""
    return await AnalyticsService.get_vehicle_operational_costs(db)


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    current_user: dict = Depends(require_section(Section.EXPENSES)),
    db: AsyncSession = Depends(get_db)
):
    """
    Log an expense for a completed trip.

    Vehicle and driver default to the trip's; the date defaults to today.
    """
    trip = (await db.execute(
        select(Trip).where(Trip.id == expense_data.trip_id)
    )).scalar_one_or_none()
    if not trip:
        raise ResourceNotFoundError("Trip", expense_data.trip_id)

    if trip.status != TripStatus.COMPLETED:
        raise BusinessRuleError(
            "Expenses can only be logged for completed trips.",
            details={"trip_id": trip.id, "status": trip.status.value}
        )

    expense = Expense(
        trip_id=trip.id,
        vehicle_id=expense_data.vehicle_id if expense_data.vehicle_id is not None else trip.vehicle_id,
        driver_name=expense_data.driver_name or trip.driver_name,
        fuel_liters=expense_data.fuel_liters,
        fuel_cost=expense_data.fuel_cost,
        misc_expense=expense_data.misc_expense,
        date=expense_data.date or date.today()
    )
    db.add(expense)
    await commit_or_raise(db, "log expense")
    await db.refresh(expense)

    await CacheService.revalidate(*AFFECTED_PAGES)
    return ExpenseResponse.model_validate(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int = Path(..., description="Expense ID"),
    current_user: dict = Depends(require_section(Section.EXPENSES)),
    db: AsyncSession = Depends(get_db)
):
    expense = (await db.execute(
        select(Expense).where(Expense.id == expense_id)
    )).scalar_one_or_none()
    if not expense:
        raise ResourceNotFoundError("Expense", expense_id)

    await db.delete(expense)
    await commit_or_raise(db, "delete expense")

    await CacheService.revalidate(*AFFECTED_PAGES)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
