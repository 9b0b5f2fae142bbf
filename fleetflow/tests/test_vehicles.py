"""
Tests for the vehicle registry endpoints.
"""

import pytest

from fleetflow.app.models.vehicle_enums import VehicleStatus


VAN = {
    "plate_number": "VAN-05",
    "type": "Van",
    "model": "2022 Ford Transit",
    "capacity": "500 kg",
    "odometer": 12500,
    "acquisition_cost": 30000
}


@pytest.mark.asyncio
async def test_create_vehicle(client, manager_headers):
    response = await client.post("/v1/vehicles", headers=manager_headers, json=VAN)

    assert response.status_code == 201
    data = response.json()
    assert data["plate_number"] == "VAN-05"
    assert data["status"] == "Ready"
    assert data["region"] == "North"
    assert data["capacity_kg"] == 500.0


@pytest.mark.asyncio
async def test_duplicate_plate_rejected(client, manager_headers, make_vehicle):
    await make_vehicle(plate_number="VAN-05")

    response = await client.post("/v1/vehicles", headers=manager_headers, json=VAN)

    assert response.status_code == 400
    data = response.json()
    assert data["error_code"] == "ERR_DUPLICATE_001"
    assert data["details"] == {"field": "plate_number"}


@pytest.mark.asyncio
async def test_registry_kpis_and_filters(client, manager_headers, make_vehicle):
    await make_vehicle(plate_number="VAN-05")
    await make_vehicle(plate_number="TRK-01", status=VehicleStatus.ON_TRIP, model="2023 Volvo FH")
    await make_vehicle(plate_number="TRK-02", status=VehicleStatus.IN_SHOP, model="2021 Scania R500")
    await make_vehicle(plate_number="OLD-01", status=VehicleStatus.RETIRED)

    response = await client.get("/v1/vehicles", headers=manager_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["kpis"] == {"total": 4, "ready": 1, "in_shop": 1, "unavailable": 1}
    assert len(data["vehicles"]) == 4

    response = await client.get("/v1/vehicles", headers=manager_headers, params={"status": "In Shop"})
    assert [v["plate_number"] for v in response.json()["vehicles"]] == ["TRK-02"]

    response = await client.get("/v1/vehicles", headers=manager_headers, params={"search": "volvo"})
    assert [v["plate_number"] for v in response.json()["vehicles"]] == ["TRK-01"]


@pytest.mark.asyncio
async def test_registry_refreshes_after_write(client, manager_headers):
    response = await client.get("/v1/vehicles", headers=manager_headers)
    assert response.json()["kpis"]["total"] == 0

    await client.post("/v1/vehicles", headers=manager_headers, json=VAN)

    response = await client.get("/v1/vehicles", headers=manager_headers)
    assert response.json()["kpis"]["total"] == 1


@pytest.mark.asyncio
async def test_update_vehicle(client, manager_headers, make_vehicle):
    vehicle = await make_vehicle()

    response = await client.patch(
        f"/v1/vehicles/{vehicle.id}", headers=manager_headers,
        json={"odometer": 13000, "region": "South"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["odometer"] == 13000
    assert data["region"] == "South"
    assert data["plate_number"] == "VAN-05"


@pytest.mark.asyncio
async def test_update_vehicle_status(client, manager_headers, make_vehicle):
    vehicle = await make_vehicle()

    response = await client.patch(
        f"/v1/vehicles/{vehicle.id}/status", headers=manager_headers,
        json={"status": "Out of Service"}
    )

    assert response.status_code == 200
    assert response.json()["status"] == "Out of Service"


@pytest.mark.asyncio
async def test_delete_vehicle(client, manager_headers, make_vehicle):
    vehicle = await make_vehicle()

    response = await client.delete(f"/v1/vehicles/{vehicle.id}", headers=manager_headers)
    assert response.status_code == 204

    response = await client.get(f"/v1/vehicles/{vehicle.id}", headers=manager_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_dispatcher_cannot_open_registry(client, auth_headers):
    headers = await auth_headers("Dispatcher")

    response = await client.get("/v1/vehicles", headers=headers)

    assert response.status_code == 403
    assert response.json()["error_code"] == "ERR_FORBIDDEN"
