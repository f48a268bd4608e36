from typing import List
from storefront_reco.domain.models.product import Product
from storefront_reco.domain.services.constants import KIND_RATING, MIN_RATING, RATING_BAND
from storefront_reco.domain.services.filters import eligible_candidates, meets_rating, rating_sort_key
from storefront_reco.domain.services.strategy import RecoStrategy


class RatingAffinityStrategy(RecoStrategy):
    """
    For well rated seeds only: products of the same category, or of any
    category with a comparable (and itself high) rating.
    """

    kind = KIND_RATING

    async def recommend(self, seed_product_id: int, limit: int) -> List[Product]:
        if limit <= 0:
            return []
        return await self._run((seed_product_id, limit), lambda: self._compute(seed_product_id, limit))

    async def _compute(self, seed_product_id: int, limit: int) -> List[Product]:
        seed = await self.catalog.get_product(seed_product_id)
        if seed is None or not seed.active:
            return []

        seed_rating = await self.interactions.get_average_rating(seed_product_id)
        if not meets_rating(seed_rating, MIN_RATING):
            self.logger.debug("%s seed below rating threshold product_id=%s rating=%s", self.kind, seed_product_id, seed_rating)
            return []

        candidates = eligible_candidates(await self.catalog.get_active_products(), exclude_id=seed_product_id)
        ratings = await self.interactions.get_average_ratings([p.product_id for p in candidates])

        def _related(p: Product) -> bool:
            same_category = seed.category_id is not None and p.category_id == seed.category_id
            rating = ratings.get(p.product_id)
            similar_rating = meets_rating(rating, MIN_RATING) and abs(rating - seed_rating) <= RATING_BAND
            return same_category or similar_rating

        related = [p for p in candidates if _related(p)]
        related.sort(key=lambda p: -rating_sort_key(ratings.get(p.product_id)))
        return related[:limit]
