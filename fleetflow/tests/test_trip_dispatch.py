"""
Tests for trip dispatch: driver locks, cargo capacity and vehicle status sync.
"""

from datetime import date, timedelta

import pytest

from fleetflow.app.core.exceptions import TripValidationError
from fleetflow.app.models.driver import Driver
from fleetflow.app.models.driver_enums import DutyStatus
from fleetflow.app.models.trip_enums import TripStatus
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.models.vehicle_enums import VehicleType, VehicleStatus
from fleetflow.app.services.dispatch import (
    parse_capacity, driver_lock_reason, validate_trip_assignment, vehicle_status_for_trip
)

TODAY = date(2026, 3, 15)


def _driver(expiry=TODAY + timedelta(days=30), duty=DutyStatus.ON_DUTY):
    return Driver(name="Alex", license_number="DL-1", license_expiry=expiry, duty_status=duty)


def _vehicle(capacity="500 kg"):
    return Vehicle(plate_number="VAN-05", type=VehicleType.VAN, status=VehicleStatus.READY, capacity=capacity)


# --- Capacity parsing ---

@pytest.mark.parametrize("capacity,expected", [
    ("500 kg", 500.0),
    ("1,200 kg", 1200.0),
    ("20000", 20000.0),
    ("2.5 t", 2.5),
    ("n/a", None),
    ("", None),
    (None, None),
])
def test_parse_capacity(capacity, expected):
    assert parse_capacity(capacity) == expected


# --- Driver locks ---

def test_expired_license_locks_driver():
    assert driver_lock_reason(_driver(expiry=TODAY - timedelta(days=1)), TODAY) == "License Expired"


def test_license_expiring_today_is_still_valid():
    assert driver_lock_reason(_driver(expiry=TODAY), TODAY) is None


def test_expired_license_reported_before_duty_status():
    driver = _driver(expiry=TODAY - timedelta(days=1), duty=DutyStatus.SUSPENDED)
    assert driver_lock_reason(driver, TODAY) == "License Expired"


@pytest.mark.parametrize("duty", [DutyStatus.OFF_DUTY, DutyStatus.SUSPENDED])
def test_driver_not_on_duty_is_locked(duty):
    assert driver_lock_reason(_driver(duty=duty), TODAY) == duty.value


# --- Assignment validation ---

def test_overweight_cargo_rejected():
    with pytest.raises(TripValidationError) as exc:
        validate_trip_assignment(_driver(), _vehicle("500 kg"), 600, TODAY)
    assert exc.value.message == "Too heavy! Cargo weight (600 kg) exceeds vehicle max capacity of 500 kg."
    assert exc.value.details == {"reason": "overweight"}


def test_cargo_within_capacity_accepted():
    validate_trip_assignment(_driver(), _vehicle("500 kg"), 400, TODAY)
    validate_trip_assignment(_driver(), _vehicle("500 kg"), 500, TODAY)


def test_capacity_check_skipped_without_parsable_capacity():
    validate_trip_assignment(_driver(), _vehicle("unknown"), 10000, TODAY)
    validate_trip_assignment(_driver(), _vehicle("0 kg"), 10000, TODAY)


def test_expired_driver_rejected():
    with pytest.raises(TripValidationError) as exc:
        validate_trip_assignment(_driver(expiry=TODAY - timedelta(days=1)), _vehicle(), 100, TODAY)
    assert exc.value.message == "Assignment Blocked: Driver license has expired."


def test_off_duty_driver_rejected():
    with pytest.raises(TripValidationError) as exc:
        validate_trip_assignment(_driver(duty=DutyStatus.OFF_DUTY), _vehicle(), 100, TODAY)
    assert exc.value.message == "Assignment Blocked: Driver is currently Off Duty."


def test_trip_without_driver_or_vehicle_passes():
    validate_trip_assignment(None, None, 1000, TODAY)


# --- Vehicle status sync ---

@pytest.mark.parametrize("trip_status,current,expected", [
    (TripStatus.DISPATCHED, VehicleStatus.READY, VehicleStatus.ON_TRIP),
    (TripStatus.ON_WAY, VehicleStatus.READY, VehicleStatus.ON_TRIP),
    (TripStatus.COMPLETED, VehicleStatus.ON_TRIP, VehicleStatus.READY),
    (TripStatus.CANCELLED, VehicleStatus.BUSY, VehicleStatus.READY),
    (TripStatus.PENDING, VehicleStatus.READY, None),
    (TripStatus.ON_TRIP, VehicleStatus.ON_TRIP, None),
    (TripStatus.DISPATCHED, VehicleStatus.IN_SHOP, None),
    (TripStatus.COMPLETED, VehicleStatus.RETIRED, None),
])
def test_vehicle_status_for_trip(trip_status, current, expected):
    assert vehicle_status_for_trip(trip_status, current) == expected


# --- API ---

def _trip_payload(**overrides):
    payload = {
        "origin": "Warehouse A",
        "destination": "Store 1",
        "cargo_weight": 400,
        "revenue": 1200,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_trip_defaults_to_draft(client, auth_headers, make_vehicle, make_driver):
    headers = await auth_headers("Dispatcher")
    vehicle = await make_vehicle(capacity="500 kg")
    driver = await make_driver(name="Alex")

    response = await client.post("/v1/trips", headers=headers, json=_trip_payload(
        driver_id=driver.id, vehicle_id=vehicle.id, driver_name="Someone Else"
    ))

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "Draft"
    assert data["driver_name"] == "Alex"
    assert data["vehicle"]["plate_number"] == "VAN-05"


@pytest.mark.asyncio
async def test_create_trip_without_route(client, auth_headers):
    headers = await auth_headers("Dispatcher")

    response = await client.post("/v1/trips", headers=headers, json={"cargo_weight": 100})

    assert response.status_code == 201
    data = response.json()
    assert data["origin"] == ""
    assert data["destination"] == ""


@pytest.mark.asyncio
async def test_create_trip_rejects_overweight_cargo(client, auth_headers, make_vehicle, make_driver):
    headers = await auth_headers("Dispatcher")
    vehicle = await make_vehicle(capacity="500 kg")
    driver = await make_driver()

    response = await client.post("/v1/trips", headers=headers, json=_trip_payload(
        driver_id=driver.id, vehicle_id=vehicle.id, cargo_weight=600
    ))

    assert response.status_code == 400
    data = response.json()
    assert data["error_code"] == "ERR_TRIP_001"
    assert data["message"] == "Too heavy! Cargo weight (600 kg) exceeds vehicle max capacity of 500 kg."


@pytest.mark.asyncio
async def test_create_trip_rejects_expired_driver(client, auth_headers, make_vehicle, make_driver):
    headers = await auth_headers("Dispatcher")
    vehicle = await make_vehicle()
    driver = await make_driver(license_expiry=date.today() - timedelta(days=1))

    response = await client.post("/v1/trips", headers=headers, json=_trip_payload(
        driver_id=driver.id, vehicle_id=vehicle.id
    ))

    assert response.status_code == 400
    assert response.json()["message"] == "Assignment Blocked: Driver license has expired."


@pytest.mark.asyncio
async def test_create_trip_rejects_suspended_driver(client, auth_headers, make_vehicle, make_driver):
    headers = await auth_headers("Dispatcher")
    vehicle = await make_vehicle()
    driver = await make_driver(duty_status=DutyStatus.SUSPENDED)

    response = await client.post("/v1/trips", headers=headers, json=_trip_payload(
        driver_id=driver.id, vehicle_id=vehicle.id
    ))

    assert response.status_code == 400
    assert response.json()["message"] == "Assignment Blocked: Driver is currently Suspended."


@pytest.mark.asyncio
async def test_create_trip_unknown_driver_returns_404(client, auth_headers, make_vehicle):
    headers = await auth_headers("Dispatcher")
    vehicle = await make_vehicle()

    response = await client.post("/v1/trips", headers=headers, json=_trip_payload(
        driver_id=999, vehicle_id=vehicle.id
    ))

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_trip_status_updates_vehicle(client, auth_headers, make_vehicle, make_driver, db_session):
    headers = await auth_headers("Dispatcher")
    vehicle = await make_vehicle()
    driver = await make_driver()
    created = await client.post("/v1/trips", headers=headers, json=_trip_payload(
        driver_id=driver.id, vehicle_id=vehicle.id
    ))
    trip_id = created.json()["id"]

    response = await client.patch(f"/v1/trips/{trip_id}/status", headers=headers, json={"status": "Dispatched"})
    assert response.status_code == 200
    assert response.json()["status"] == "Dispatched"

    await db_session.refresh(vehicle)
    assert vehicle.status == VehicleStatus.ON_TRIP

    response = await client.patch(f"/v1/trips/{trip_id}/status", headers=headers, json={"status": "Completed"})
    assert response.status_code == 200

    await db_session.refresh(vehicle)
    assert vehicle.status == VehicleStatus.READY


@pytest.mark.asyncio
async def test_trip_created_on_trip_takes_vehicle(client, auth_headers, make_vehicle, make_driver, db_session):
    headers = await auth_headers("Dispatcher")
    vehicle = await make_vehicle()
    driver = await make_driver()

    response = await client.post("/v1/trips", headers=headers, json=_trip_payload(
        driver_id=driver.id, vehicle_id=vehicle.id, status="On Trip"
    ))

    assert response.status_code == 201
    assert response.json()["status"] == "On Trip"

    await db_session.refresh(vehicle)
    assert vehicle.status == VehicleStatus.ON_TRIP

    options = (await client.get("/v1/trips/dispatch-options", headers=headers)).json()
    assert options["vehicles"] == []


@pytest.mark.asyncio
async def test_recording_completed_trip_leaves_busy_vehicle(client, auth_headers, make_vehicle, db_session):
    headers = await auth_headers("Dispatcher")
    vehicle = await make_vehicle(status=VehicleStatus.ON_TRIP)

    response = await client.post("/v1/trips", headers=headers, json=_trip_payload(
        vehicle_id=vehicle.id, status="Completed"
    ))
    assert response.status_code == 201

    await db_session.refresh(vehicle)
    assert vehicle.status == VehicleStatus.ON_TRIP


@pytest.mark.asyncio
async def test_trip_status_kept_when_vehicle_update_fails(
    client, auth_headers, make_vehicle, make_trip, db_session, reject_vehicle_writes
):
    headers = await auth_headers("Dispatcher")
    vehicle = await make_vehicle()
    trip = await make_trip(vehicle_id=vehicle.id, status=TripStatus.PENDING)

    response = await client.patch(f"/v1/trips/{trip.id}/status", headers=headers, json={"status": "Dispatched"})
    assert response.status_code == 200
    assert response.json()["status"] == "Dispatched"

    response = await client.get(f"/v1/trips/{trip.id}", headers=headers)
    assert response.json()["status"] == "Dispatched"

    await db_session.refresh(vehicle)
    assert vehicle.status == VehicleStatus.READY


@pytest.mark.asyncio
async def test_trip_status_leaves_vehicle_in_shop(client, auth_headers, make_vehicle, make_trip, db_session):
    headers = await auth_headers("Dispatcher")
    vehicle = await make_vehicle(status=VehicleStatus.IN_SHOP)
    trip = await make_trip(vehicle_id=vehicle.id, status=TripStatus.PENDING)

    response = await client.patch(f"/v1/trips/{trip.id}/status", headers=headers, json={"status": "On Trip"})
    assert response.status_code == 200

    await db_session.refresh(vehicle)
    assert vehicle.status == VehicleStatus.IN_SHOP


@pytest.mark.asyncio
async def test_dispatch_options_flag_locked_drivers(client, auth_headers, make_vehicle, make_driver):
    headers = await auth_headers("Dispatcher")
    await make_vehicle(plate_number="VAN-05", capacity="500 kg")
    await make_vehicle(plate_number="TRK-02", status=VehicleStatus.IN_SHOP)
    await make_driver(name="Alex")
    await make_driver(name="John Doe", license_number="DL-2", license_expiry=date.today() - timedelta(days=30))

    response = await client.get("/v1/trips/dispatch-options", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert [v["plate_number"] for v in data["vehicles"]] == ["VAN-05"]
    assert data["vehicles"][0]["capacity_kg"] == 500.0
    drivers = {d["name"]: d for d in data["drivers"]}
    assert drivers["Alex"]["is_locked"] is False
    assert drivers["John Doe"]["is_locked"] is True
    assert drivers["John Doe"]["lock_reason"] == "License Expired"


@pytest.mark.asyncio
async def test_trip_list_reflects_new_trip(client, auth_headers):
    headers = await auth_headers("Dispatcher")

    first = await client.get("/v1/trips", headers=headers)
    assert first.json()["total"] == 0

    await client.post("/v1/trips", headers=headers, json=_trip_payload())

    second = await client.get("/v1/trips", headers=headers)
    assert second.json()["total"] == 1


@pytest.mark.asyncio
async def test_delete_trip(client, auth_headers, make_trip):
    headers = await auth_headers("Dispatcher")
    trip = await make_trip()

    response = await client.delete(f"/v1/trips/{trip.id}", headers=headers)
    assert response.status_code == 204

    response = await client.get(f"/v1/trips/{trip.id}", headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_safety_officer_cannot_dispatch(client, auth_headers):
    headers = await auth_headers("Safety Officer")

    response = await client.post("/v1/trips", headers=headers, json=_trip_payload())

    assert response.status_code == 403
    assert "Trip Dispatcher" in response.json()["message"]
