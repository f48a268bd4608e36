import logging
from typing import List, Optional
from storefront_reco.core.config import get_settings
from storefront_reco.core.exceptions import MissingParameterError, UnknownRecommendationKindError
from storefront_reco.domain.models.product import Product, ViewerKey
from storefront_reco.domain.repositories.interaction_repo import InteractionRepo
from storefront_reco.domain.repositories.product_repo import ProductRepo
from storefront_reco.domain.repositories.reco_cache_repo import RecoCacheRepo
from storefront_reco.domain.services.browsing_history_svc import BrowsingHistoryStrategy
from storefront_reco.domain.services.category_fallback_svc import CategoryFallbackStrategy
from storefront_reco.domain.services.co_purchase_svc import CoPurchaseStrategy
from storefront_reco.domain.services.constants import (
    ALL_KINDS,
    KIND_BROWSING_HISTORY,
    KIND_CATEGORY,
    KIND_FREQUENTLY_BOUGHT,
    KIND_MIXED,
    KIND_RATING,
    KIND_SIMILAR,
    KIND_TRENDING,
    MAX_RECOMMENDATIONS,
)
from storefront_reco.domain.services.mixed_svc import RecommendationMerger
from storefront_reco.domain.services.rating_affinity_svc import RatingAffinityStrategy
from storefront_reco.domain.services.similarity_svc import SimilarityStrategy
from storefront_reco.domain.services.trending_svc import TrendingStrategy

logger = logging.getLogger(__name__)

# Kinds seeded by a product
_PRODUCT_KINDS = {KIND_FREQUENTLY_BOUGHT, KIND_CATEGORY, KIND_RATING, KIND_SIMILAR, KIND_MIXED}


class RecommendationEngine:
    """Owns one instance of every strategy and dispatches by kind name."""

    def __init__(
        self,
        catalog: ProductRepo,
        interactions: InteractionRepo,
        cache: Optional[RecoCacheRepo] = None,
    ):
        settings = get_settings()
        ttl = settings.recommendation_cache_ttl
        self.co_purchase = CoPurchaseStrategy(catalog, interactions, cache, cache_ttl=ttl)
        self.browsing_history = BrowsingHistoryStrategy(catalog, interactions, cache, cache_ttl=ttl)
        self.category_fallback = CategoryFallbackStrategy(catalog, interactions, cache, cache_ttl=ttl)
        self.rating_affinity = RatingAffinityStrategy(catalog, interactions, cache, cache_ttl=ttl)
        self.trending = TrendingStrategy(catalog, interactions, cache, cache_ttl=settings.trend_cache_ttl)
        self.similarity = SimilarityStrategy(catalog, interactions, cache, cache_ttl=ttl)
        self.merger = RecommendationMerger(
            co_purchase=self.co_purchase,
            rating_affinity=self.rating_affinity,
            browsing_history=self.browsing_history,
            similarity=self.similarity,
            category_fallback=self.category_fallback,
            timeout_s=settings.strategy_timeout_s,
        )

    @classmethod
    def from_stores(cls, db, redis=None) -> "RecommendationEngine":
        """Wire the Mongo repositories and the (optional) Redis cache."""
        return cls(ProductRepo(db), InteractionRepo(db), RecoCacheRepo(redis))

    async def recommend(
        self,
        kind: str,
        *,
        product_id: Optional[int] = None,
        viewer: Optional[ViewerKey] = None,
        limit: int = MAX_RECOMMENDATIONS,
    ) -> List[Product]:
        """
        Run the strategy named by `kind`.
        Raises only for caller errors (unknown kind, missing product id);
        store failures come back as an empty list.
        """
        if kind not in ALL_KINDS:
            raise UnknownRecommendationKindError(kind, supported=list(ALL_KINDS))
        if kind in _PRODUCT_KINDS and product_id is None:
            raise MissingParameterError(kind, "product_id")

        if limit <= 0:
            return []

        viewer = viewer or ViewerKey()
        if kind == KIND_FREQUENTLY_BOUGHT:
            items = await self.co_purchase.recommend(product_id)
        elif kind == KIND_BROWSING_HISTORY:
            items = await self.browsing_history.recommend(viewer)
        elif kind == KIND_CATEGORY:
            items = await self.category_fallback.recommend(product_id, limit)
        elif kind == KIND_RATING:
            items = await self.rating_affinity.recommend(product_id, limit)
        elif kind == KIND_TRENDING:
            items = await self.trending.recommend(limit)
        elif kind == KIND_SIMILAR:
            items = await self.similarity.recommend(product_id, limit)
        else:
            items = await self.merger.recommend(product_id, viewer, limit)

        logger.debug("engine kind=%s product_id=%s items=%s", kind, product_id, len(items))
        return items[:limit]
