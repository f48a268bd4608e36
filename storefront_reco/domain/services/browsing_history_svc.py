import asyncio
from collections import defaultdict
from typing import Dict, List
from storefront_reco.domain.models.product import Product, ViewerKey
from storefront_reco.domain.services.constants import KIND_BROWSING_HISTORY, MAX_RECOMMENDATIONS, RECENT_VIEWS_LIMIT
from storefront_reco.domain.services.filters import is_eligible
from storefront_reco.domain.services.strategy import RecoStrategy


class BrowsingHistoryStrategy(RecoStrategy):
    """
    Suggestions from shared-viewer overlap.

    Each of the viewer's recent views is a seed; other products viewed by the
    seed's viewers score one point per distinct viewer, summed over seeds.
    Results depend on a live history, so they are never cached.
    """

    kind = KIND_BROWSING_HISTORY
    cacheable = False

    async def recommend(self, viewer: ViewerKey) -> List[Product]:
        return await self._run((str(viewer),), lambda: self._compute(viewer))

    async def _compute(self, viewer: ViewerKey) -> List[Product]:
        if viewer.is_empty:
            return []

        recent = await self.interactions.get_recently_viewed_product_ids(viewer, RECENT_VIEWS_LIMIT)
        if not recent:
            self.logger.info("%s no view history viewer=%s", self.kind, viewer)
            return []

        seen = set(recent)
        co_viewed = await asyncio.gather(
            *(self.interactions.get_co_viewed_candidates(pid) for pid in recent)
        )

        scores: Dict[int, int] = defaultdict(int)
        for rows in co_viewed:
            for pid, viewer_count in rows:
                if pid in seen:
                    continue
                scores[pid] += viewer_count

        ranked = [pid for pid, _ in sorted(scores.items(), key=lambda kv: (-kv[1], kv[0]))]
        self.logger.debug("%s seeds=%s candidates=%s", self.kind, len(recent), len(ranked))
        if not ranked:
            return []

        products = await self.catalog.get_products_by_ids(ranked)
        eligible = [products[pid] for pid in ranked if is_eligible(products.get(pid))]
        return eligible[:MAX_RECOMMENDATIONS]
