"""
Analytics Service.

Handles data aggregation for the command center, the registry pages and the
financial reports. Focused on READ-ONLY operations.

The aggregations are plain functions over loaded rows; the ``AnalyticsService``
methods fetch the rows and hand them over.
"""

from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetflow.app.models.driver import Driver
from fleetflow.app.models.expense import Expense
from fleetflow.app.models.maintenance_enums import MaintenanceStatus
from fleetflow.app.models.maintenance_log import MaintenanceLog
from fleetflow.app.models.trip import Trip
from fleetflow.app.models.trip_enums import TripStatus
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.models.vehicle_enums import VehicleStatus
from fleetflow.app.schemas.analytics import (
    FleetKpis, MonthlyFinancials, CostliestVehicle, FinancialReport
)
from fleetflow.app.schemas.dashboard import (
    CommandCenterKpis, CommandCenterResponse, NavigationResponse, RecentTrip
)
from fleetflow.app.schemas.expense import VehicleOperationalCost
from fleetflow.app.schemas.maintenance import MaintenanceKpis
from fleetflow.app.schemas.trip import DispatchDriver
from fleetflow.app.schemas.vehicle import VehicleRegistryKpis, VehicleResponse

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

TOP_COSTLIEST_LIMIT = 5
RECENT_TRIPS_LIMIT = 20


def _amount(value: Optional[float]) -> float:
    return float(value or 0)


def fleet_kpis(
    trips: Iterable[Trip],
    expenses: Iterable[Expense],
    maintenance_logs: Iterable[MaintenanceLog],
    vehicles: Sequence[Vehicle],
) -> FleetKpis:
    """
    Headline KPIs.

    ROI is (revenue - (fuel + maintenance)) over the summed acquisition cost,
    in percent; 0 when nothing has an acquisition cost. Utilization is the
    share of vehicles On Trip.
    """
    total_fuel = sum(_amount(e.fuel_cost) for e in expenses)
    total_revenue = sum(_amount(t.revenue) for t in trips)
    total_maintenance = sum(_amount(m.cost) for m in maintenance_logs)
    total_acquisition = sum(_amount(v.acquisition_cost) for v in vehicles)

    roi = 0.0
    if total_acquisition > 0:
        roi = (total_revenue - (total_fuel + total_maintenance)) / total_acquisition * 100

    utilization = 0.0
    if vehicles:
        on_trip = sum(1 for v in vehicles if v.status == VehicleStatus.ON_TRIP)
        utilization = on_trip / len(vehicles) * 100

    return FleetKpis(
        total_fuel_cost=round(total_fuel, 2),
        total_revenue=round(total_revenue, 2),
        fleet_roi=round(roi, 2),
        utilization_rate=round(utilization, 2),
    )


def monthly_financials(
    trips: Iterable[Trip],
    expenses: Iterable[Expense],
    maintenance_logs: Iterable[MaintenanceLog],
    year: int,
    today: date,
) -> List[MonthlyFinancials]:
    """
    Per-month revenue, cost and fuel efficiency for ``year``.

    Trips are bucketed by creation time, expenses by their date and
    maintenance by completion date. In the current year, months after this
    one are left out unless they already carry revenue or expenses; a future
    year only lists months with data.
    """
    buckets: List[Dict[str, float]] = [defaultdict(float) for _ in range(12)]

    for expense in expenses:
        if expense.date is None or expense.date.year != year:
            continue
        bucket = buckets[expense.date.month - 1]
        fuel = _amount(expense.fuel_cost)
        misc = _amount(expense.misc_expense)
        bucket["fuel_cost"] += fuel
        bucket["expenses"] += fuel + misc
        bucket["liters"] += _amount(expense.fuel_liters)

    for log in maintenance_logs:
        if log.completed_date is None or log.completed_date.year != year:
            continue
        bucket = buckets[log.completed_date.month - 1]
        cost = _amount(log.cost)
        bucket["maintenance"] += cost
        bucket["expenses"] += cost

    for trip in trips:
        created = trip.created_at or today
        if created.year != year:
            continue
        bucket = buckets[created.month - 1]
        bucket["revenue"] += _amount(trip.revenue)
        bucket["km"] += _amount(trip.distance_km)

    if year < today.year:
        last_month = 12
    elif year == today.year:
        last_month = today.month
    else:
        last_month = 0

    months = []
    for index, bucket in enumerate(buckets):
        revenue = bucket["revenue"]
        spent = bucket["expenses"]
        if index + 1 > last_month and revenue <= 0 and spent <= 0:
            continue
        liters = bucket["liters"]
        months.append(MonthlyFinancials(
            month=index + 1,
            name=MONTH_NAMES[index],
            revenue=revenue,
            expenses=spent,
            fuel_cost=bucket["fuel_cost"],
            maintenance=bucket["maintenance"],
            net_profit=revenue - spent,
            km=bucket["km"],
            liters=liters,
            efficiency=round(bucket["km"] / liters, 2) if liters > 0 else 0.0,
        ))
    return months


def costliest_vehicles(
    expenses: Iterable[Expense],
    maintenance_logs: Iterable[MaintenanceLog],
    vehicles: Sequence[Vehicle],
    limit: int = TOP_COSTLIEST_LIMIT,
) -> List[CostliestVehicle]:
    """Vehicles ranked by fuel + misc + maintenance spend, highest first."""
    costs: Dict[int, float] = {v.id: 0.0 for v in vehicles}

    for expense in expenses:
        if expense.vehicle_id in costs:
            costs[expense.vehicle_id] += _amount(expense.fuel_cost) + _amount(expense.misc_expense)

    for log in maintenance_logs:
        if log.vehicle_id in costs:
            costs[log.vehicle_id] += _amount(log.cost)

    plates = {v.id: v.plate_number for v in vehicles}
    ranked = sorted(costs.items(), key=lambda item: item[1], reverse=True)
    return [
        CostliestVehicle(vehicle_id=vehicle_id, plate_number=plates[vehicle_id], cost=cost)
        for vehicle_id, cost in ranked[:limit]
    ]


def vehicle_operational_costs(
    expenses: Iterable[Expense],
    maintenance_logs: Iterable[MaintenanceLog],
    vehicles: Sequence[Vehicle],
) -> List[VehicleOperationalCost]:
    """
    Fuel plus maintenance spend per vehicle, highest total first.

    Vehicles with no spend at all are left out.
    """
    by_id = {v.id: v for v in vehicles}
    fuel: Dict[int, float] = defaultdict(float)
    maintenance: Dict[int, float] = defaultdict(float)

    for expense in expenses:
        if expense.vehicle_id in by_id:
            fuel[expense.vehicle_id] += _amount(expense.fuel_cost)

    for log in maintenance_logs:
        if log.vehicle_id in by_id:
            maintenance[log.vehicle_id] += _amount(log.cost)

    rows = []
    for vehicle_id in set(fuel) | set(maintenance):
        vehicle = by_id[vehicle_id]
        rows.append(VehicleOperationalCost(
            vehicle_id=vehicle_id,
            plate_number=vehicle.plate_number,
            type=vehicle.type.value,
            fuel=fuel[vehicle_id],
            maintenance=maintenance[vehicle_id],
            total=fuel[vehicle_id] + maintenance[vehicle_id],
        ))
    rows.sort(key=lambda row: (-row.total, row.plate_number))
    return rows


def command_center_kpis(vehicle_counts: Dict[VehicleStatus, int], trip_counts: Dict[TripStatus, int]) -> CommandCenterKpis:
    """
    Command center figures from status counts.

    Utilization counts busy vehicles (Busy or On Trip) together with active
    trips, over the whole fleet.
    """
    total = sum(vehicle_counts.values())
    active_fleet = trip_counts.get(TripStatus.ON_TRIP, 0)
    busy = vehicle_counts.get(VehicleStatus.BUSY, 0) + vehicle_counts.get(VehicleStatus.ON_TRIP, 0)

    utilization = 0
    if total > 0:
        utilization = round((busy + active_fleet) / total * 100)

    return CommandCenterKpis(
        active_fleet=active_fleet,
        maintenance_alerts=vehicle_counts.get(VehicleStatus.IN_SHOP, 0),
        pending_cargo=trip_counts.get(TripStatus.PENDING, 0),
        total_vehicles=total,
        busy_vehicles=busy,
        idle_vehicles=vehicle_counts.get(VehicleStatus.READY, 0),
        utilization_rate=utilization,
    )


class AnalyticsService:

    @staticmethod
    async def status_counts(db: AsyncSession, column) -> Dict[Any, int]:
        """Row count per value of an enum status column."""
        result = await db.execute(select(column, func.count()).group_by(column))
        return {value: count for value, count in result.all()}

    @staticmethod
    async def get_financial_report(db: AsyncSession, year: Optional[int] = None, today: Optional[date] = None) -> FinancialReport:
        """
        Financial report over completed trips, completed maintenance, all
        expenses and all vehicles.
        """
        today = today or date.today()
        year = year or today.year

        expenses = (await db.execute(select(Expense))).scalars().all()
        trips = (await db.execute(
            select(Trip).where(Trip.status == TripStatus.COMPLETED)
        )).scalars().all()
        vehicles = (await db.execute(select(Vehicle).order_by(Vehicle.id))).scalars().all()
        maintenance_logs = (await db.execute(
            select(MaintenanceLog).where(MaintenanceLog.status == MaintenanceStatus.COMPLETED)
        )).scalars().all()

        return FinancialReport(
            year=year,
            kpis=fleet_kpis(trips, expenses, maintenance_logs, vehicles),
            monthly=monthly_financials(trips, expenses, maintenance_logs, year, today),
            top_costliest_vehicles=costliest_vehicles(expenses, maintenance_logs, vehicles),
        )

    @staticmethod
    async def get_vehicle_operational_costs(db: AsyncSession) -> List[VehicleOperationalCost]:
        expenses = (await db.execute(select(Expense))).scalars().all()
        vehicles = (await db.execute(select(Vehicle))).scalars().all()
        maintenance_logs = (await db.execute(
            select(MaintenanceLog).where(MaintenanceLog.status == MaintenanceStatus.COMPLETED)
        )).scalars().all()
        return vehicle_operational_costs(expenses, maintenance_logs, vehicles)

    @staticmethod
    async def get_command_center(db: AsyncSession, navigation: NavigationResponse, today: Optional[date] = None) -> CommandCenterResponse:
        """Everything the command center page shows for one user."""
        today = today or date.today()

        vehicle_counts = await AnalyticsService.status_counts(db, Vehicle.status)
        trip_counts = await AnalyticsService.status_counts(db, Trip.status)

        recent = (await db.execute(
            select(Trip)
            .options(selectinload(Trip.vehicle))
            .order_by(Trip.created_at.desc(), Trip.id.desc())
            .limit(RECENT_TRIPS_LIMIT)
        )).scalars().all()
        vehicles = (await db.execute(select(Vehicle).order_by(Vehicle.created_at.desc(), Vehicle.id.desc()))).scalars().all()
        drivers = (await db.execute(select(Driver).order_by(Driver.name))).scalars().all()

        vehicle_rows = [VehicleResponse.model_validate(v) for v in vehicles]
        return CommandCenterResponse(
            kpis=command_center_kpis(vehicle_counts, trip_counts),
            recent_trips=[RecentTrip.model_validate(t) for t in recent],
            available_vehicles=[v for v in vehicle_rows if v.status == VehicleStatus.READY],
            vehicles=vehicle_rows,
            drivers=[DispatchDriver.from_driver(d, today) for d in drivers],
            navigation=navigation,
        )

    @staticmethod
    async def get_vehicle_registry_kpis(db: AsyncSession) -> VehicleRegistryKpis:
        counts = await AnalyticsService.status_counts(db, Vehicle.status)
        return VehicleRegistryKpis(
            total=sum(counts.values()),
            ready=counts.get(VehicleStatus.READY, 0),
            in_shop=counts.get(VehicleStatus.IN_SHOP, 0),
            unavailable=counts.get(VehicleStatus.OUT_OF_SERVICE, 0) + counts.get(VehicleStatus.RETIRED, 0),
        )

    @staticmethod
    async def get_maintenance_kpis(db: AsyncSession) -> MaintenanceKpis:
        counts = await AnalyticsService.status_counts(db, MaintenanceLog.status)
        return MaintenanceKpis(
            total=sum(counts.values()),
            scheduled=counts.get(MaintenanceStatus.SCHEDULED, 0),
            in_progress=counts.get(MaintenanceStatus.IN_PROGRESS, 0),
            completed=counts.get(MaintenanceStatus.COMPLETED, 0),
        )
