"""
Tests for the driver profile endpoints.
"""

from datetime import date, timedelta

import pytest

from fleetflow.app.models.driver_enums import DutyStatus


@pytest.mark.asyncio
async def test_create_driver_starts_with_clean_record(client, auth_headers):
    headers = await auth_headers("Safety Officer")

    response = await client.post("/v1/drivers", headers=headers, json={
        "name": "Sarah Connor",
        "license_number": "DL-SARAH-002",
        "license_expiry": (date.today() + timedelta(days=30)).isoformat()
    })

    assert response.status_code == 201
    data = response.json()
    assert data["duty_status"] == "On Duty"
    assert data["safety_score"] == 100
    assert data["completion_rate"] == 100
    assert data["complaints"] == 0
    assert data["is_locked"] is False
    assert data["lock_reason"] is None


@pytest.mark.asyncio
async def test_list_drivers_with_lock_state(client, auth_headers, make_driver):
    headers = await auth_headers("Safety Officer")
    await make_driver(name="Alex")
    await make_driver(name="John Doe", license_number="DL-JOHN-003",
                      license_expiry=date.today() - timedelta(days=30), duty_status=DutyStatus.OFF_DUTY)
    await make_driver(name="Mike Ross", license_number="DL-MIKE-004", duty_status=DutyStatus.SUSPENDED)

    response = await client.get("/v1/drivers", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    reasons = {d["name"]: d["lock_reason"] for d in data["drivers"]}
    assert reasons == {"Alex": None, "John Doe": "License Expired", "Mike Ross": "Suspended"}


@pytest.mark.asyncio
async def test_list_drivers_filters(client, auth_headers, make_driver):
    headers = await auth_headers("Safety Officer")
    await make_driver(name="Alex", license_number="DL-ALEX-001")
    await make_driver(name="Mike Ross", license_number="DL-MIKE-004", duty_status=DutyStatus.SUSPENDED)

    response = await client.get("/v1/drivers", headers=headers, params={"duty_status": "Suspended"})
    assert [d["name"] for d in response.json()["drivers"]] == ["Mike Ross"]

    response = await client.get("/v1/drivers", headers=headers, params={"search": "alex-001"})
    assert [d["name"] for d in response.json()["drivers"]] == ["Alex"]


@pytest.mark.asyncio
async def test_update_driver_status(client, auth_headers, make_driver):
    headers = await auth_headers("Safety Officer")
    driver = await make_driver()

    response = await client.patch(
        f"/v1/drivers/{driver.id}/status", headers=headers, json={"duty_status": "Off Duty"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["duty_status"] == "Off Duty"
    assert data["is_locked"] is True


@pytest.mark.asyncio
async def test_renewing_license_unlocks_driver(client, auth_headers, make_driver):
    headers = await auth_headers("Safety Officer")
    driver = await make_driver(license_expiry=date.today() - timedelta(days=1))

    response = await client.patch(f"/v1/drivers/{driver.id}", headers=headers, json={
        "license_expiry": (date.today() + timedelta(days=365)).isoformat()
    })

    assert response.status_code == 200
    assert response.json()["is_locked"] is False


@pytest.mark.asyncio
async def test_delete_driver_keeps_trip_history(client, auth_headers, make_driver, make_trip, db_session):
    headers = await auth_headers("Fleet Manager")
    driver = await make_driver(name="Alex")
    trip = await make_trip(driver_id=driver.id, driver_name="Alex")

    response = await client.delete(f"/v1/drivers/{driver.id}", headers=headers)
    assert response.status_code == 204

    await db_session.refresh(trip)
    assert trip.driver_id is None
    assert trip.driver_name == "Alex"


@pytest.mark.asyncio
async def test_unknown_driver_returns_404(client, auth_headers):
    headers = await auth_headers("Safety Officer")

    response = await client.get("/v1/drivers/999", headers=headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Driver with ID 999 not found"


@pytest.mark.asyncio
async def test_financial_analyst_cannot_open_drivers(client, auth_headers):
    headers = await auth_headers("Financial Analyst")

    response = await client.get("/v1/drivers", headers=headers)

    assert response.status_code == 403
