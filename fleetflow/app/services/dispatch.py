"""
Trip dispatch rules.

Driver eligibility, cargo capacity checks and the vehicle status implied by a
trip status. Pure functions over already-loaded rows; the trip endpoints do
the reads and writes.
"""

import re
from datetime import date
from typing import Optional, Union

from fleetflow.app.core.exceptions import TripValidationError
from fleetflow.app.models.driver import Driver
from fleetflow.app.models.driver_enums import DutyStatus
from fleetflow.app.models.trip_enums import TripStatus
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.models.vehicle_enums import VehicleStatus

LICENSE_EXPIRED = "License Expired"

_NON_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")

# Vehicle status a trip moving into the given status puts its vehicle in.
TRIP_VEHICLE_STATUS = {
    TripStatus.DISPATCHED: VehicleStatus.ON_TRIP,
    TripStatus.ON_WAY: VehicleStatus.ON_TRIP,
    TripStatus.ON_TRIP: VehicleStatus.ON_TRIP,
    TripStatus.COMPLETED: VehicleStatus.READY,
    TripStatus.CANCELLED: VehicleStatus.READY,
}

# Statuses set by maintenance or retirement that trip updates never override.
PROTECTED_VEHICLE_STATUSES = frozenset({
    VehicleStatus.IN_SHOP,
    VehicleStatus.OUT_OF_SERVICE,
    VehicleStatus.RETIRED,
})


def parse_capacity(capacity: Optional[str]) -> Optional[float]:
    """
    Extract the numeric payload from a free-text capacity.

    Every character other than digits and ``.`` is dropped, then the leading
    decimal number is read: "500 kg" -> 500.0, "1,200 kg" -> 1200.0,
    "n/a" -> None.
    """
    if not capacity:
        return None
    match = _LEADING_NUMBER.match(_NON_NUMERIC.sub("", capacity))
    if not match:
        return None
    return float(match.group())


def format_quantity(value: Union[int, float]) -> str:
    """Render 600.0 as "600" and 12.5 as "12.5"."""
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def driver_lock_reason(driver: Driver, today: date) -> Optional[str]:
    """
    Why ``driver`` cannot take a new trip, or None when assignable.

    An expired license is reported ahead of the duty status.
    """
    if driver.license_expiry < today:
        return LICENSE_EXPIRED
    if driver.duty_status != DutyStatus.ON_DUTY:
        return driver.duty_status.value
    return None


def is_driver_locked(driver: Driver, today: date) -> bool:
    return driver_lock_reason(driver, today) is not None


def validate_trip_assignment(
    driver: Optional[Driver],
    vehicle: Optional[Vehicle],
    cargo_weight: float,
    today: date,
) -> None:
    """
    Check a new trip against its driver and vehicle.

    Raises:
        TripValidationError: driver license expired, driver not On Duty,
            or cargo heavier than the vehicle's parsed capacity
    """
    if driver is not None:
        if driver.license_expiry < today:
            raise TripValidationError(
                "Assignment Blocked: Driver license has expired.",
                reason="license_expired",
            )
        if driver.duty_status != DutyStatus.ON_DUTY:
            raise TripValidationError(
                f"Assignment Blocked: Driver is currently {driver.duty_status.value}.",
                reason="driver_unavailable",
            )

    if vehicle is not None and cargo_weight > 0:
        max_capacity = parse_capacity(vehicle.capacity)
        if max_capacity and max_capacity > 0 and cargo_weight > max_capacity:
            raise TripValidationError(
                f"Too heavy! Cargo weight ({format_quantity(cargo_weight)} kg) exceeds "
                f"vehicle max capacity of {format_quantity(max_capacity)} kg.",
                reason="overweight",
            )


def vehicle_status_for_trip(trip_status: TripStatus, current: VehicleStatus) -> Optional[VehicleStatus]:
    """
    New vehicle status implied by moving a trip to ``trip_status``.

    Returns None when the vehicle should be left as it is.
    """
    target = TRIP_VEHICLE_STATUS.get(trip_status)
    if target is None or current in PROTECTED_VEHICLE_STATUSES or current == target:
        return None
    return target
