# storefront_reco/api/v1/routers/health.py
import logging
import time
from typing import Awaitable, Callable, Optional

from fastapi import APIRouter

from storefront_reco.core.config import get_settings
from storefront_reco.db import mongo
from storefront_reco.db.redis import get_redis
from storefront_reco.domain.services.constants import ALL_KINDS

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])
START_TIME = time.time()


async def _probe(name: str, ping: Optional[Callable[[], Awaitable]]) -> str:
    """'ok', 'skipped' when the store is not configured, or 'error: ...'."""
    if ping is None:
        return "skipped"
    try:
        await ping()
        return "ok"
    except Exception as e:
        logger.warning("health %s ping failed: %s", name, e)
        return f"error: {e}"


async def _mongo_ping():
    # no client at all is an error, not a skip: the catalog lives there
    await mongo.get_db().command("ping")


@router.get("/health")
async def health():
    """
    Store reachability plus what the service can answer.
    Redis is optional: when it is not configured the result cache is
    disabled and the service still reports ok.
    """
    settings = get_settings()
    redis = get_redis()

    checks = {
        "mongodb": await _probe("mongodb", _mongo_ping),
        "redis": await _probe("redis", redis.ping if redis else None),
    }
    status = "ok" if all(v in ("ok", "skipped") for v in checks.values()) else "error"

    return {
        "status": status,
        "checks": checks,
        "cache": "enabled" if redis else "disabled",
        "kinds": sorted(ALL_KINDS),
        "app_name": settings.APP_NAME,
        "version": settings.GIT_SHA,
        "uptime_seconds": int(time.time() - START_TIME),
    }
