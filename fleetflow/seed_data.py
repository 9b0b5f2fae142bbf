"""
Database seeding script for demo fleet data.

Creates sample vehicles, drivers, trips, maintenance logs and an expense so
every dashboard page has something to show. Safe to re-run: vehicles and
drivers that already exist are skipped, and the relational rows are only
added when their table is empty.

Usage:
    python -m fleetflow.seed_data
"""

import asyncio
import calendar
from datetime import date

from sqlalchemy import select, func

from fleetflow.app.db.session import AsyncSessionLocal, engine, Base
from fleetflow.app.models.driver import Driver
from fleetflow.app.models.driver_enums import DutyStatus
from fleetflow.app.models.expense import Expense
from fleetflow.app.models.maintenance_enums import MaintenanceStatus
from fleetflow.app.models.maintenance_log import MaintenanceLog
from fleetflow.app.models.trip import Trip
from fleetflow.app.models.trip_enums import TripStatus
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.models.vehicle_enums import VehicleType, VehicleStatus


def shift_months(day: date, months: int) -> date:
    """Same day ``months`` later (or earlier), clamped to the month's length."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


VEHICLES = [
    dict(plate_number="VAN-05", type=VehicleType.VAN, status=VehicleStatus.READY,
         model="2022 Ford Transit", capacity="500 kg", odometer=12500),
    dict(plate_number="TRK-01", type=VehicleType.TRUCK, status=VehicleStatus.ON_TRIP,
         model="2023 Volvo FH", capacity="20000 kg", odometer=85000),
    dict(plate_number="TRK-02", type=VehicleType.TRUCK, status=VehicleStatus.IN_SHOP,
         model="2021 Scania R500", capacity="18000 kg", odometer=150000),
    dict(plate_number="MIN-01", type=VehicleType.MINI, status=VehicleStatus.READY,
         model="2023 Suzuki Carry", capacity="800 kg", odometer=5000),
    dict(plate_number="BIK-01", type=VehicleType.BIKE, status=VehicleStatus.READY,
         model="2024 Honda Cargo", capacity="50 kg", odometer=1200),
]


def driver_rows(today: date):
    return [
        dict(name="Alex", license_number="DL-ALEX-001", license_expiry=shift_months(today, 12),
             duty_status=DutyStatus.ON_DUTY, safety_score=98, completion_rate=100, complaints=0),
        dict(name="Sarah Connor", license_number="DL-SARAH-002", license_expiry=shift_months(today, 1),
             duty_status=DutyStatus.ON_DUTY, safety_score=100, completion_rate=100, complaints=0),
        dict(name="John Doe", license_number="DL-JOHN-003", license_expiry=shift_months(today, -1),
             duty_status=DutyStatus.OFF_DUTY, safety_score=85, completion_rate=90, complaints=2),
        dict(name="Mike Ross", license_number="DL-MIKE-004", license_expiry=shift_months(today, 24),
             duty_status=DutyStatus.SUSPENDED, safety_score=60, completion_rate=80, complaints=5),
    ]


async def _is_empty(db, model) -> bool:
    return (await db.execute(select(func.count(model.id)))).scalar() == 0


async def seed_data():
    """
    Seed demo fleet data.

    Creates:
    - 5 vehicles (van, two trucks, mini, bike)
    - 4 drivers, two of them locked (expired license, suspended)
    - 3 trips, 2 maintenance logs and 1 expense
    """
    today = date.today()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting fleet data seeding...")

        for row in VEHICLES:
            exists = (await db.execute(
                select(Vehicle.id).where(Vehicle.plate_number == row["plate_number"])
            )).first()
            if exists:
                print(f"ℹ️  Vehicle {row['plate_number']} already exists, skipping")
                continue
            db.add(Vehicle(**row))
            print(f"✅ Created vehicle {row['plate_number']}")

        for row in driver_rows(today):
            exists = (await db.execute(
                select(Driver.id).where(Driver.license_number == row["license_number"])
            )).first()
            if exists:
                print(f"ℹ️  Driver {row['name']} already exists, skipping")
                continue
            db.add(Driver(**row))
            print(f"✅ Created driver {row['name']}")

        await db.commit()

        vehicles = {v.plate_number: v for v in (await db.execute(select(Vehicle))).scalars()}
        drivers = {d.name: d for d in (await db.execute(select(Driver))).scalars()}
        van, truck, shop_truck = vehicles["VAN-05"], vehicles["TRK-01"], vehicles["TRK-02"]
        alex, sarah = drivers["Alex"], drivers["Sarah Connor"]

        if await _is_empty(db, Trip):
            completed_trip = Trip(
                driver_id=alex.id, driver_name=alex.name, vehicle_id=van.id,
                status=TripStatus.COMPLETED, origin="Warehouse A", destination="Store 2",
                cargo_weight=400, estimated_fuel_cost=45,
            )
            db.add_all([
                Trip(driver_id=alex.id, driver_name=alex.name, vehicle_id=van.id,
                     status=TripStatus.PENDING, origin="Warehouse A", destination="Store 1",
                     cargo_weight=450, estimated_fuel_cost=50),
                Trip(driver_id=sarah.id, driver_name=sarah.name, vehicle_id=truck.id,
                     status=TripStatus.ON_TRIP, origin="Port City", destination="Distribution Center",
                     cargo_weight=15000, estimated_fuel_cost=1500),
                completed_trip,
            ])
            await db.commit()
            print("✅ Created 3 trips")

            if await _is_empty(db, Expense):
                db.add(Expense(
                    trip_id=completed_trip.id, vehicle_id=van.id, driver_name=alex.name,
                    fuel_liters=30, fuel_cost=45, misc_expense=10, date=today,
                ))
                await db.commit()
                print("✅ Created 1 expense")
        else:
            print("ℹ️  Trips already exist, skipping trips and expenses")

        if await _is_empty(db, MaintenanceLog):
            last_month = shift_months(today, -1)
            db.add_all([
                MaintenanceLog(vehicle_id=shop_truck.id, description="Engine Overhaul required after 150k km",
                               service_type="Major Repair", status=MaintenanceStatus.SCHEDULED,
                               cost=5000, scheduled_date=shift_months(today, 1)),
                MaintenanceLog(vehicle_id=van.id, description="Routine Oil Change",
                               service_type="Preventative Maintenance", status=MaintenanceStatus.COMPLETED,
                               cost=150, scheduled_date=last_month, completed_date=last_month),
            ])
            await db.commit()
            print("✅ Created 2 maintenance logs")
        else:
            print("ℹ️  Maintenance logs already exist, skipping")

        print("\n🎉 Fleet data seeding completed successfully!")
        print("\nNote: demo accounts are created via POST /v1/admin/setup-test-users")


if __name__ == "__main__":
    asyncio.run(seed_data())
