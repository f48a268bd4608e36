from typing import List
from storefront_reco.domain.models.product import Product
from storefront_reco.domain.services.constants import KIND_FREQUENTLY_BOUGHT, MAX_RECOMMENDATIONS, MIN_CO_PURCHASE
from storefront_reco.domain.services.filters import is_eligible
from storefront_reco.domain.services.strategy import RecoStrategy


class CoPurchaseStrategy(RecoStrategy):
    """
    "Customers who bought this also bought": products sharing orders with the
    seed at least MIN_CO_PURCHASE times, most co-purchased first.
    """

    kind = KIND_FREQUENTLY_BOUGHT

    async def recommend(self, seed_product_id: int) -> List[Product]:
        return await self._run((seed_product_id,), lambda: self._compute(seed_product_id))

    async def _compute(self, seed_product_id: int) -> List[Product]:
        mined = await self.interactions.get_co_purchased_candidates(seed_product_id)
        retained = [
            pid for pid, count in mined
            if count >= MIN_CO_PURCHASE and pid != seed_product_id
        ]
        self.logger.debug("%s mined=%s retained=%s", self.kind, len(mined), len(retained))
        if not retained:
            return []

        products = await self.catalog.get_products_by_ids(retained)
        recommendations: List[Product] = []
        for pid in retained:
            product = products.get(pid)
            if is_eligible(product):
                recommendations.append(product)
            if len(recommendations) >= MAX_RECOMMENDATIONS:
                break
        return recommendations
