# storefront_reco/domain/repositories/product_repo.py

from __future__ import annotations
import re
from typing import Optional, List, Dict, Iterable
from motor.motor_asyncio import AsyncIOMotorDatabase
from storefront_reco.domain.models.product import Product

_PROJECTION = {"_id": 0}


def _ci_equals(value: str) -> dict:
    """Case-insensitive exact match."""
    return {"$regex": f"^{re.escape(value)}$", "$options": "i"}


class ProductRepo:
    """
    Catalog access backed by the 'products' collection.
    Read-only: the recommender never writes products.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col = db[collection_name]

    async def get_product(self, product_id: int) -> Optional[Product]:
        doc = await self.col.find_one({"product_id": product_id}, _PROJECTION)
        return Product.model_validate(doc) if doc else None

    async def get_products_by_ids(self, ids: Iterable[int]) -> Dict[int, Product]:
        """Batch resolution; unknown ids are simply absent from the result."""
        ids = list(ids)
        if not ids:
            return {}
        cursor = self.col.find({"product_id": {"$in": ids}}, _PROJECTION)
        products = [Product.model_validate(doc) async for doc in cursor]
        return {p.product_id: p for p in products}

    async def get_products_by_category(self, category_id: int) -> List[Product]:
        cursor = self.col.find({"category_id": category_id, "active": True}, _PROJECTION)
        return [Product.model_validate(doc) async for doc in cursor]

    async def get_products_by_attributes(
        self,
        color: Optional[str],
        material: Optional[str],
        usage_area: Optional[str],
        mounting_type: Optional[str],
    ) -> List[Product]:
        """
        Active products sharing the given attribute tuple.
        A None attribute does not constrain the search.
        """
        query: dict = {"active": True}
        for field, value in (
            ("color", color),
            ("material", material),
            ("usage_area", usage_area),
            ("mounting_type", mounting_type),
        ):
            if value is not None:
                query[field] = _ci_equals(value)
        cursor = self.col.find(query, _PROJECTION).sort("product_id", 1)
        return [Product.model_validate(doc) async for doc in cursor]

    async def get_active_products(self) -> List[Product]:
        cursor = self.col.find({"active": True}, _PROJECTION).sort("product_id", 1)
        return [Product.model_validate(doc) async for doc in cursor]
