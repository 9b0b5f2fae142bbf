"""
Page cache.

Read endpoints that assemble a whole dashboard page cache the assembled
payload under the page path. Write endpoints call ``revalidate`` with the
paths whose data they touched, so the next read rebuilds the page.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from fleetflow.app.core.config import settings

logger = logging.getLogger(__name__)

# Dashboard page paths
DASHBOARD = "/dashboard"
VEHICLES = "/dashboard/vehicles"
TRIPS = "/dashboard/trips"
DRIVERS = "/dashboard/drivers"
MAINTENANCE = "/dashboard/maintenance"
EXPENSES = "/dashboard/expenses"
ANALYTICS = "/dashboard/analytics"

_cache_store: Dict[str, dict] = {}


def _key(path: str, variant: str = "") -> str:
    return f"{path}?{variant}" if variant else path


class CacheService:

    @staticmethod
    async def get(path: str, variant: str = "") -> Optional[Any]:
        entry = _cache_store.get(_key(path, variant))
        if not entry:
            return None

        if datetime.utcnow() > entry["expires_at"]:
            _cache_store.pop(_key(path, variant), None)
            return None

        return entry["data"]

    @staticmethod
    async def set(path: str, data: Any, ttl_seconds: int = 300, variant: str = ""):
        """
        Store a page payload.

        Expired entries are dropped first; when the store is still full the
        oldest entries go, so one-off search variants cannot pile up.
        """
        key = _key(path, variant)
        now = datetime.utcnow()
        for stale in [k for k, entry in _cache_store.items() if now > entry["expires_at"]]:
            del _cache_store[stale]

        _cache_store.pop(key, None)
        while _cache_store and len(_cache_store) >= settings.page_cache_max_entries:
            del _cache_store[next(iter(_cache_store))]

        _cache_store[key] = {
            "path": path,
            "data": data,
            "expires_at": now + timedelta(seconds=ttl_seconds)
        }

    @staticmethod
    async def revalidate(*paths: str):
        """Drop every cached variant of the given page paths."""
        targets = set(paths)
        stale = [key for key, entry in _cache_store.items() if entry["path"] in targets]
        for key in stale:
            del _cache_store[key]
        if stale:
            logger.debug("Revalidated %s (%d entries)", ", ".join(sorted(targets)), len(stale))

    @staticmethod
    async def clear():
        _cache_store.clear()


def variant_for(**params: Any) -> str:
    """Cache variant for a filtered page read; unset filters are ignored."""
    parts = []
    for name in sorted(params):
        value = params[name]
        if value is None or value == "":
            continue
        if hasattr(value, "value"):
            value = value.value
        parts.append(f"{name}={value}")
    return "&".join(parts)
