import logging
import time
from typing import Awaitable, Callable, List, Optional
from storefront_reco.core.config import get_settings
from storefront_reco.domain.models.product import Product
from storefront_reco.domain.repositories.product_repo import ProductRepo
from storefront_reco.domain.repositories.interaction_repo import InteractionRepo
from storefront_reco.domain.repositories.reco_cache_repo import RecoCacheRepo


class RecoStrategy:
    """
    Shared plumbing of every recommendation strategy.

    Subclasses implement the ranking in an async `_compute` and call `_run`,
    which adds the two cross-cutting rules:
      - cache: look up / store the result under `cache.key(kind, *key_parts)`
        when the strategy is cacheable and a cache is configured;
      - fail-soft: any exception raised while computing is logged and
        turned into an empty list. Failed results are never cached.
    """

    kind: str = ""
    cacheable: bool = True

    def __init__(
        self,
        catalog: ProductRepo,
        interactions: InteractionRepo,
        cache: Optional[RecoCacheRepo] = None,
        *,
        cache_ttl: Optional[int] = None,
    ):
        self.catalog = catalog
        self.interactions = interactions
        self.cache = cache
        self.cache_ttl = cache_ttl if cache_ttl is not None else get_settings().recommendation_cache_ttl
        self.logger = logging.getLogger(type(self).__module__)

    async def _run(
        self,
        key_parts: tuple,
        compute: Callable[[], Awaitable[List[Product]]],
    ) -> List[Product]:
        t0 = time.perf_counter()
        label = "-".join(str(p) for p in key_parts) or "-"
        self.logger.info("%s start key=%s", self.kind, label)

        cache_key = None
        if self.cacheable and self.cache is not None:
            cache_key = self.cache.key(self.kind, *key_parts)
            cached = await self.cache.get(cache_key)
            if cached is not None:
                self.logger.info("%s cache_hit key=%s items=%s", self.kind, cache_key, len(cached))
                return cached

        try:
            products = await compute()
        except Exception:
            self.logger.exception("%s failed key=%s; returning no recommendations", self.kind, label)
            return []

        if cache_key is not None:
            await self.cache.set(cache_key, products, ttl=self.cache_ttl)

        self.logger.info(
            "%s done key=%s items=%s total_time=%.3fs",
            self.kind, label, len(products), time.perf_counter() - t0,
        )
        return products
