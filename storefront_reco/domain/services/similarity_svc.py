from typing import List
from storefront_reco.domain.models.product import Product
from storefront_reco.domain.services.constants import KIND_SIMILAR
from storefront_reco.domain.services.filters import eligible_candidates
from storefront_reco.domain.services.strategy import RecoStrategy


class SimilarityStrategy(RecoStrategy):
    """Same color / material / usage area / mounting type, closest price first."""

    kind = KIND_SIMILAR

    async def recommend(self, seed_product_id: int, limit: int) -> List[Product]:
        if limit <= 0:
            return []
        return await self._run((seed_product_id, limit), lambda: self._compute(seed_product_id, limit))

    async def _compute(self, seed_product_id: int, limit: int) -> List[Product]:
        seed = await self.catalog.get_product(seed_product_id)
        if seed is None or not seed.active:
            return []

        similar = eligible_candidates(
            await self.catalog.get_products_by_attributes(*seed.attributes),
            exclude_id=seed_product_id,
        )
        base_price = seed.price or 0.0
        similar.sort(key=lambda p: abs((p.price or 0.0) - base_price))
        return similar[:limit]
