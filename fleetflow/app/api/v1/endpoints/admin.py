"""
Admin API Endpoints.

Service-level operations authorized by the service role key rather than a
user session.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fleetflow.app.core.config import settings
from fleetflow.app.core.guards import require_service_key
from fleetflow.app.db.session import get_db
from fleetflow.app.schemas.admin import DemoUserSetupResponse
from fleetflow.app.services import cache
from fleetflow.app.services.cache import CacheService
from fleetflow.app.services.demo_users import provision_demo_users

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/setup-test-users", response_model=DemoUserSetupResponse)
async def setup_test_users(
    service_key: str = Depends(require_service_key),
    db: AsyncSession = Depends(get_db)
):
    """
    Create or reset the demo accounts, one per role.

    Requires the ``X-Service-Key`` header to match the configured service
    role key. Returns one result per account. Cached command center pages
    are dropped since names and roles may have changed.
    """
    results = await provision_demo_users(db, settings.demo_user_password)
    logger.info("Demo user setup finished: %s", ", ".join(f"{r.email}={r.status}" for r in results))
    await CacheService.revalidate(cache.DASHBOARD)
    return DemoUserSetupResponse(success=True, results=results)
