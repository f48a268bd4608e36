import logging
from typing import Iterable, Optional
from redis.asyncio import Redis
from storefront_reco.domain.models.product import Product
from storefront_reco.utils.cache import cache_get, cache_set

logger = logging.getLogger(__name__)


class RecoCacheRepo:
    """
    Adapter memoizing strategy outputs in Redis.
    Stores lists of Product under keys like 'recommendations:similar-42-10'.
    A None client disables caching; Redis errors behave as a miss.
    """
    def __init__(self, redis: Optional[Redis], key_prefix: str = "recommendations"):
        self.cache = redis
        self.prefix = key_prefix

    @property
    def enabled(self) -> bool:
        return self.cache is not None

    def key(self, kind: str, *parts) -> str:
        """
        Build the cache key for one strategy call: kind, primary key, limit.
        e.g. key("category", 42, 5) -> "recommendations:category-42-5"
        """
        return f"{self.prefix}:" + "-".join([kind, *(str(p) for p in parts)])

    async def get(self, key: str) -> Optional[list[Product]]:
        """Cached products for key, None on miss."""
        if not self.enabled:
            return None
        try:
            data = await cache_get(self.cache, key)
        except Exception as e:
            logger.warning("reco cache get error key=%s err=%s", key, e)
            return None
        if data is None:
            return None
        return [Product.model_validate(x) for x in data]

    async def set(self, key: str, products: Iterable[Product], ttl: int) -> None:
        if not self.enabled:
            return
        payload = [p.model_dump() for p in products]
        try:
            await cache_set(self.cache, key, payload, ex=ttl)
            logger.debug("reco cache_set key=%s ttl=%ss items=%s", key, ttl, len(payload))
        except Exception as e:
            logger.warning("reco cache set error key=%s err=%s", key, e)

