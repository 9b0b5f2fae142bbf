"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from fleetflow.app.api.v1.endpoints import (
    auth, admin, dashboard,
    vehicles, drivers, trips,
    maintenance, expenses, analytics
)

router = APIRouter()

# Include authentication endpoints
router.include_router(auth.router)

# Include admin endpoints
router.include_router(admin.router)

# Command center and sidebar
router.include_router(dashboard.router)

# Fleet registry
router.include_router(vehicles.router)
router.include_router(drivers.router)

# Dispatch
router.include_router(trips.router)

# Service and spend
router.include_router(maintenance.router)
router.include_router(expenses.router)

# Reports
router.include_router(analytics.router)
