# storefront_reco/domain/repositories/interaction_repo.py

from __future__ import annotations
import json
import logging
import time
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
from motor.motor_asyncio import AsyncIOMotorDatabase
from storefront_reco.domain.models.product import ViewerKey

logger = logging.getLogger(__name__)


def _json_preview(obj: Any, limit: int = 1000) -> str:
    """Minify and truncate JSON for debug logs."""
    try:
        s = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, default=str)
        return s if len(s) <= limit else s[:limit] + "…[truncated]"
    except Exception:
        return "<unserializable>"


class InteractionRepo:
    """
    Read model over the interaction collections written by other subsystems:
      order_items      { order_id, product_id }
      product_views    { product_id, user_id?, ip_address?, viewed_at }
      product_reviews  { product_id, rating, active }

    Every method is an explicit aggregation; outputs are grouped counts
    sorted the way the strategies consume them.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        *,
        orders_collection: str = "order_items",
        views_collection: str = "product_views",
        reviews_collection: str = "product_reviews",
    ):
        self.orders = db[orders_collection]
        self.views = db[views_collection]
        self.reviews = db[reviews_collection]
        self._views_name = views_collection
        self._orders_name = orders_collection

    async def _aggregate(self, col, pipeline: List[Dict[str, Any]], label: str) -> List[Dict[str, Any]]:
        logger.debug("%s pipeline=%s", label, _json_preview(pipeline, limit=2000))
        t0 = time.perf_counter()
        docs = await col.aggregate(pipeline).to_list(length=None)
        logger.debug("%s db_ok items=%s db_time=%.3fs", label, len(docs), time.perf_counter() - t0)
        return docs

    # ----- Orders -----------------------------------------------------------

    async def get_co_purchased_candidates(self, seed_product_id: int) -> List[Tuple[int, int]]:
        """
        (product_id, count) for products sharing an order with the seed,
        count descending. Self pairs are excluded.
        """
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"product_id": seed_product_id, "order_id": {"$ne": None}}},
            {"$lookup": {
                "from": self._orders_name,
                "localField": "order_id",
                "foreignField": "order_id",
                "as": "line",
            }},
            {"$unwind": "$line"},
            {"$match": {"line.product_id": {"$nin": [seed_product_id, None]}}},
            {"$group": {"_id": "$line.product_id", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$project": {"_id": 0, "product_id": "$_id", "count": 1}},
        ]
        docs = await self._aggregate(self.orders, pipeline, "co_purchase")
        return [(d["product_id"], int(d["count"])) for d in docs]

    # ----- Views ------------------------------------------------------------

    @staticmethod
    def _viewer_match(viewer: ViewerKey) -> Optional[Dict[str, Any]]:
        # Authenticated identity wins over the network address
        if viewer.user_id is not None:
            return {"user_id": viewer.user_id}
        if viewer.ip_address:
            return {"ip_address": viewer.ip_address}
        return None

    async def get_recently_viewed_product_ids(self, viewer: ViewerKey, limit: int) -> List[int]:
        """Distinct product ids viewed by this viewer, most recent first."""
        match = self._viewer_match(viewer)
        if match is None:
            return []
        pipeline: List[Dict[str, Any]] = [
            {"$match": {**match, "product_id": {"$ne": None}}},
            {"$group": {"_id": "$product_id", "last_seen_at": {"$max": "$viewed_at"}}},
            {"$sort": {"last_seen_at": -1, "_id": 1}},
            {"$limit": limit},
            {"$project": {"_id": 0, "product_id": "$_id"}},
        ]
        docs = await self._aggregate(self.views, pipeline, "recent_views")
        return [d["product_id"] for d in docs]

    async def get_co_viewed_candidates(self, seed_product_id: int) -> List[Tuple[int, int]]:
        """
        (product_id, distinct_viewer_count): authenticated viewers of the seed
        who viewed the other product at or after their first view of the seed.
        """
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"product_id": seed_product_id, "user_id": {"$ne": None}}},
            {"$group": {"_id": "$user_id", "first_seen": {"$min": "$viewed_at"}}},
            {"$lookup": {
                "from": self._views_name,
                "let": {"uid": "$_id", "since": "$first_seen"},
                "pipeline": [
                    {"$match": {"$expr": {"$and": [
                        {"$eq": ["$user_id", "$$uid"]},
                        {"$ne": ["$product_id", seed_product_id]},
                        {"$ne": ["$product_id", None]},
                        {"$gte": ["$viewed_at", "$$since"]},
                    ]}}},
                    {"$project": {"_id": 0, "product_id": 1}},
                ],
                "as": "later",
            }},
            {"$unwind": "$later"},
            {"$group": {"_id": "$later.product_id", "viewers": {"$addToSet": "$_id"}}},
            {"$project": {"_id": 0, "product_id": "$_id", "count": {"$size": "$viewers"}}},
            {"$sort": {"count": -1, "product_id": 1}},
        ]
        docs = await self._aggregate(self.views, pipeline, "co_view")
        return [(d["product_id"], int(d["count"])) for d in docs]

    async def get_view_count(self, product_id: int) -> int:
        return await self.views.count_documents({"product_id": product_id})

    async def get_view_counts(self, ids: Iterable[int]) -> Dict[int, int]:
        ids = list(ids)
        if not ids:
            return {}
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"product_id": {"$in": ids}}},
            {"$group": {"_id": "$product_id", "views": {"$sum": 1}}},
        ]
        docs = await self._aggregate(self.views, pipeline, "view_counts")
        return {d["_id"]: int(d["views"]) for d in docs}

    async def get_view_count_since(self, product_id: int, since: datetime) -> int:
        return await self.views.count_documents(
            {"product_id": product_id, "viewed_at": {"$gte": since}}
        )

    async def get_most_viewed_product_ids(self) -> List[int]:
        """All-time most viewed products, views descending."""
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"product_id": {"$ne": None}}},
            {"$group": {"_id": "$product_id", "views": {"$sum": 1}}},
            {"$sort": {"views": -1, "_id": 1}},
            {"$project": {"_id": 0, "product_id": "$_id"}},
        ]
        docs = await self._aggregate(self.views, pipeline, "most_viewed")
        return [d["product_id"] for d in docs]

    # ----- Reviews ----------------------------------------------------------

    async def get_average_rating(self, product_id: int) -> Optional[float]:
        ratings = await self.get_average_ratings([product_id])
        return ratings.get(product_id)

    async def get_average_ratings(self, ids: Iterable[int]) -> Dict[int, float]:
        """Average of active review ratings; unrated products are absent."""
        ids = list(ids)
        if not ids:
            return {}
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"product_id": {"$in": ids}, "active": True}},
            {"$group": {"_id": "$product_id", "avg": {"$avg": "$rating"}}},
        ]
        docs = await self._aggregate(self.reviews, pipeline, "avg_rating")
        return {d["_id"]: float(d["avg"]) for d in docs if d.get("avg") is not None}
