# storefront_reco/db/redis.py
import logging
import redis.asyncio as redis
from storefront_reco.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()
redis_client: redis.Redis | None = None


async def connect():
    """
    Connect Redis when REDIS_URL is set.
    Missing or unreachable Redis only disables the result cache.
    """
    global redis_client
    if not settings.REDIS_URL:
        logger.warning("No REDIS_URL configured, recommendation cache disabled.")
        redis_client = None
        return

    try:
        logger.info("Connecting to Redis at %s", settings.REDIS_URL)
        redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        await redis_client.ping()
        logger.info("Redis connection successful")
    except Exception as e:
        logger.warning("Failed to connect to Redis: %s", e)
        redis_client = None  # fallback: cache disabled


async def disconnect():
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis disconnected")


def get_redis() -> redis.Redis | None:
    """
    Returns None if Redis is not configured or unavailable.
    Callers must handle it.
    """
    return redis_client
