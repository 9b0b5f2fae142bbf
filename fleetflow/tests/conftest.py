"""
Centralized Test Configuration.
"""

from datetime import date, timedelta

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from fleetflow.app.main import app
from fleetflow.app.db.session import get_db, Base
from fleetflow.app.models.driver import Driver
from fleetflow.app.models.driver_enums import DutyStatus
from fleetflow.app.models.trip import Trip
from fleetflow.app.models.trip_enums import TripStatus
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.models.vehicle_enums import VehicleType, VehicleStatus
from fleetflow.app.services.cache import CacheService
import fleetflow.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


# Redis Fixture (Session Scope)
@pytest.fixture(scope="session")
def redis_client_session():
    return MockRedis()

@pytest.fixture(scope="session", autouse=True)
def apply_overrides(redis_client_session):
    """Apply overrides once for the session.
    Global override is safer here than per-test override to avoid app state flux.
    """

    # Patch the global redis client used for token revocation
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = redis_client_session

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield

    # Restore and clear
    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client

@pytest.fixture(autouse=True)
async def setup_database(redis_client_session):
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await redis_client_session.flushdb()
    await CacheService.clear()

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


# --- Auth helpers ---

@pytest.fixture
def register_user(client):
    """Register a user with the given role and return the login payload."""
    async def _register(role: str = "Fleet Manager", email: str = None, password: str = "secret123"):
        email = email or f"{role.lower().replace(' ', '.')}@fleetflow.io"
        response = await client.post("/v1/auth/register", json={
            "email": email,
            "password": password,
            "full_name": role,
            "role": role,
        })
        assert response.status_code == 201, response.text
        return response.json()
    return _register

@pytest.fixture
def auth_headers(register_user):
    """Authorization headers for a freshly registered user with the given role."""
    async def _headers(role: str = "Fleet Manager", email: str = None):
        data = await register_user(role=role, email=email)
        return {"Authorization": f"Bearer {data['access_token']}"}
    return _headers

@pytest.fixture
async def manager_headers(auth_headers):
    return await auth_headers("Fleet Manager")


# --- Data factories ---

@pytest.fixture
def make_vehicle(db_session):
    async def _make(**overrides) -> Vehicle:
        values = {
            "plate_number": "VAN-05",
            "type": VehicleType.VAN,
            "status": VehicleStatus.READY,
            "model": "2022 Ford Transit",
            "capacity": "500 kg",
            "acquisition_cost": 12500.0,
        }
        values.update(overrides)
        vehicle = Vehicle(**values)
        db_session.add(vehicle)
        await db_session.commit()
        await db_session.refresh(vehicle)
        return vehicle
    return _make

@pytest.fixture
def make_driver(db_session):
    async def _make(**overrides) -> Driver:
        values = {
            "name": "Alex",
            "license_number": "DL-1001",
            "license_expiry": date.today() + timedelta(days=365),
            "duty_status": DutyStatus.ON_DUTY,
        }
        values.update(overrides)
        driver = Driver(**values)
        db_session.add(driver)
        await db_session.commit()
        await db_session.refresh(driver)
        return driver
    return _make

@pytest.fixture
def make_trip(db_session):
    async def _make(**overrides) -> Trip:
        values = {
            "origin": "Warehouse A",
            "destination": "Store 1",
            "status": TripStatus.COMPLETED,
        }
        values.update(overrides)
        trip = Trip(**values)
        db_session.add(trip)
        await db_session.commit()
        await db_session.refresh(trip)
        return trip
    return _make

@pytest.fixture
def reject_vehicle_writes(monkeypatch):
    """Make any commit that carries a modified vehicle fail, as a lost connection would."""
    original_commit = AsyncSession.commit

    async def commit(self):
        if any(isinstance(obj, Vehicle) for obj in self.dirty):
            raise SQLAlchemyError("vehicle write rejected")
        await original_commit(self)

    monkeypatch.setattr(AsyncSession, "commit", commit)
