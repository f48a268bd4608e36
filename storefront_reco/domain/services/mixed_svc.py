import asyncio
import logging
import time
from typing import Awaitable, Dict, List, Optional, Tuple
from storefront_reco.core.config import get_settings
from storefront_reco.domain.models.product import Product, ScoredCandidate, ViewerKey
from storefront_reco.domain.services.browsing_history_svc import BrowsingHistoryStrategy
from storefront_reco.domain.services.category_fallback_svc import CategoryFallbackStrategy
from storefront_reco.domain.services.co_purchase_svc import CoPurchaseStrategy
from storefront_reco.domain.services.constants import (
    KIND_BROWSING_HISTORY,
    KIND_CATEGORY,
    KIND_FREQUENTLY_BOUGHT,
    KIND_RATING,
    KIND_SIMILAR,
    MAX_RECOMMENDATIONS,
    MERGE_WEIGHTS,
)
from storefront_reco.domain.services.rating_affinity_svc import RatingAffinityStrategy
from storefront_reco.domain.services.similarity_svc import SimilarityStrategy

logger = logging.getLogger(__name__)


class RecommendationMerger:
    """
    Mixed recommendations: the weighted union of the individual strategies.

    Every product returned by a strategy earns that strategy's weight from
    MERGE_WEIGHTS; weights add up when strategies agree. Co-purchase, rating
    affinity, browsing history and similarity run concurrently; the score map
    is filled afterwards in that fixed order, so equal scores keep the order
    in which strategies contributed. Category fallback only tops up a short
    list. A failing or slow strategy contributes nothing.
    """

    def __init__(
        self,
        *,
        co_purchase: CoPurchaseStrategy,
        rating_affinity: RatingAffinityStrategy,
        browsing_history: BrowsingHistoryStrategy,
        similarity: SimilarityStrategy,
        category_fallback: CategoryFallbackStrategy,
        weights: Optional[Dict[str, float]] = None,
        timeout_s: Optional[float] = None,
    ):
        self.co_purchase = co_purchase
        self.rating_affinity = rating_affinity
        self.browsing_history = browsing_history
        self.similarity = similarity
        self.category_fallback = category_fallback
        self.weights = dict(weights or MERGE_WEIGHTS)
        self.timeout_s = timeout_s if timeout_s is not None else get_settings().strategy_timeout_s

    async def _safe(self, kind: str, call: Awaitable[List[Product]]) -> List[Product]:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_s)
        except asyncio.TimeoutError:
            logger.warning("mixed %s timed out after %.1fs; skipping", kind, self.timeout_s)
        except Exception:
            logger.exception("mixed %s failed; skipping", kind)
        return []

    async def rank(
        self,
        seed_product_id: int,
        viewer: Optional[ViewerKey] = None,
        limit: int = MAX_RECOMMENDATIONS,
    ) -> List[Tuple[Product, float]]:
        """Merged (product, score) pairs, best first, at most `limit`."""
        t0 = time.perf_counter()
        viewer = viewer or ViewerKey()
        logger.info("mixed start product_id=%s viewer=%s limit=%s", seed_product_id, viewer, limit)

        contributions = await asyncio.gather(
            self._safe(KIND_FREQUENTLY_BOUGHT, self.co_purchase.recommend(seed_product_id)),
            self._safe(KIND_RATING, self.rating_affinity.recommend(seed_product_id, MAX_RECOMMENDATIONS)),
            self._safe(KIND_BROWSING_HISTORY, self.browsing_history.recommend(viewer)),
            self._safe(KIND_SIMILAR, self.similarity.recommend(seed_product_id, MAX_RECOMMENDATIONS)),
        )
        kinds = (KIND_FREQUENTLY_BOUGHT, KIND_RATING, KIND_BROWSING_HISTORY, KIND_SIMILAR)

        scores: Dict[int, float] = {}
        products: Dict[int, Product] = {}

        def _add(kind: str, items: List[Product]) -> None:
            weight = self.weights[kind]
            for p in items:
                if p.product_id == seed_product_id:
                    continue
                products.setdefault(p.product_id, p)
                scores[p.product_id] = scores.get(p.product_id, 0.0) + weight

        for kind, items in zip(kinds, contributions):
            _add(kind, items)

        if len(scores) < MAX_RECOMMENDATIONS:
            remaining = MAX_RECOMMENDATIONS - len(scores)
            fallback = await self._safe(
                KIND_CATEGORY, self.category_fallback.recommend(seed_product_id, remaining)
            )
            _add(KIND_CATEGORY, fallback)

        # sorted() is stable: ties keep insertion order
        ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)[:max(limit, 0)]
        logger.info(
            "mixed done product_id=%s candidates=%s items=%s total_time=%.3fs",
            seed_product_id, len(scores), len(ranked), time.perf_counter() - t0,
        )
        return [(products[pid], score) for pid, score in ranked]

    async def recommend(
        self,
        seed_product_id: int,
        viewer: Optional[ViewerKey] = None,
        limit: int = MAX_RECOMMENDATIONS,
    ) -> List[Product]:
        return [p for p, _ in await self.rank(seed_product_id, viewer, limit)]

    async def score(
        self,
        seed_product_id: int,
        viewer: Optional[ViewerKey] = None,
        limit: int = MAX_RECOMMENDATIONS,
    ) -> List[ScoredCandidate]:
        return [
            ScoredCandidate(product_id=p.product_id, score=s)
            for p, s in await self.rank(seed_product_id, viewer, limit)
        ]
