"""
Analytics & Reports API Endpoints.

Read-only financial reporting for Financial Analysts.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from fleetflow.app.core.config import settings
from fleetflow.app.core.guards import require_section
from fleetflow.app.core.navigation import Section
from fleetflow.app.db.session import get_db
from fleetflow.app.schemas.analytics import FinancialReport
from fleetflow.app.services import cache
from fleetflow.app.services.analytics import AnalyticsService
from fleetflow.app.services.cache import CacheService

router = APIRouter(prefix="/analytics", tags=["Analytics & Reports"])


@router.get("/report", response_model=FinancialReport)
async def get_financial_report(
    year: Optional[int] = Query(None, ge=1900, le=9999, description="Calendar year (defaults to the current year)"),
    current_user: dict = Depends(require_section(Section.ANALYTICS)),
    db: AsyncSession = Depends(get_db)
):
    """KPIs, monthly rollup and the costliest vehicles."""
    today = date.today()
    year = year or today.year

    # Month cut-off moves with the date
    variant = cache.variant_for(year=year, day=today.isoformat())
    cached = await CacheService.get(cache.ANALYTICS, variant)
    if cached is not None:
        return cached

    report = await AnalyticsService.get_financial_report(db, year=year, today=today)
    await CacheService.set(
        cache.ANALYTICS, report.model_dump(mode="json"),
        ttl_seconds=settings.page_cache_ttl_seconds, variant=variant
    )
    return report
