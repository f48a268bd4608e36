from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
from storefront_reco.domain.models.product import Product
from storefront_reco.domain.services.constants import KIND_TRENDING, TREND_DAYS
from storefront_reco.domain.services.filters import is_eligible
from storefront_reco.domain.services.strategy import RecoStrategy

# Products resolved per catalog round-trip while walking the popularity list
_PAGE_SIZE = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrendingStrategy(RecoStrategy):
    """
    All-time most viewed products that were still viewed within the last
    TREND_DAYS days, in popularity order.
    """

    kind = KIND_TRENDING

    def __init__(self, *args, clock: Optional[Callable[[], datetime]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.clock = clock or _utcnow

    async def recommend(self, limit: int) -> List[Product]:
        if limit <= 0:
            return []
        return await self._run((limit,), lambda: self._compute(limit))

    async def _compute(self, limit: int) -> List[Product]:
        since = self.clock() - timedelta(days=TREND_DAYS)
        ranked = await self.interactions.get_most_viewed_product_ids()

        trending: List[Product] = []
        for start in range(0, len(ranked), _PAGE_SIZE):
            page = ranked[start:start + _PAGE_SIZE]
            products = await self.catalog.get_products_by_ids(page)
            for pid in page:
                product = products.get(pid)
                if not is_eligible(product):
                    continue
                if await self.interactions.get_view_count_since(pid, since) > 0:
                    trending.append(product)
                    if len(trending) >= limit:
                        return trending
        return trending
