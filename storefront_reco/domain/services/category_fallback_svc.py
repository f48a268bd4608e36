from typing import List
from storefront_reco.domain.models.product import Product
from storefront_reco.domain.services.constants import KIND_CATEGORY
from storefront_reco.domain.services.filters import eligible_candidates, rating_sort_key
from storefront_reco.domain.services.strategy import RecoStrategy


class CategoryFallbackStrategy(RecoStrategy):
    """Same-category products, best rated first, then most viewed."""

    kind = KIND_CATEGORY

    async def recommend(self, seed_product_id: int, limit: int) -> List[Product]:
        if limit <= 0:
            return []
        return await self._run((seed_product_id, limit), lambda: self._compute(seed_product_id, limit))

    async def _compute(self, seed_product_id: int, limit: int) -> List[Product]:
        seed = await self.catalog.get_product(seed_product_id)
        if seed is None or not seed.active or seed.category_id is None:
            return []

        candidates = eligible_candidates(
            await self.catalog.get_products_by_category(seed.category_id),
            exclude_id=seed_product_id,
        )
        if not candidates:
            return []

        ids = [p.product_id for p in candidates]
        ratings = await self.interactions.get_average_ratings(ids)
        views = await self.interactions.get_view_counts(ids)

        candidates.sort(
            key=lambda p: (
                -rating_sort_key(ratings.get(p.product_id)),
                -views.get(p.product_id, 0),
            )
        )
        return candidates[:limit]
