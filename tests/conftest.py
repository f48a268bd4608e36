"""Shared fixtures: in-memory stand-ins for the catalog, the interaction
store and the Redis client, implementing the same read contracts as the
Mongo repositories.
"""

import json
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import pytest

from storefront_reco.domain.models.product import Product, ViewerKey
from storefront_reco.domain.repositories.reco_cache_repo import RecoCacheRepo

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def make_product(product_id: int, **overrides) -> Product:
    fields = dict(
        product_id=product_id,
        name=f"Product {product_id}",
        category_id=1,
        price=100.0,
        stock_quantity=5,
        active=True,
        color="white",
        material="linen",
        usage_area="living room",
        mounting_type="rod",
    )
    fields.update(overrides)
    return Product(**fields)


class StoreDown(RuntimeError):
    pass


class FakeCatalog:
    def __init__(self, products: Optional[List[Product]] = None):
        self.products: Dict[int, Product] = {p.product_id: p for p in products or []}
        self.fail = False

    def add(self, *products: Product) -> None:
        for p in products:
            self.products[p.product_id] = p

    def _check(self):
        if self.fail:
            raise StoreDown("catalog unavailable")

    async def get_product(self, product_id: int) -> Optional[Product]:
        self._check()
        return self.products.get(product_id)

    async def get_products_by_ids(self, ids) -> Dict[int, Product]:
        self._check()
        return {pid: self.products[pid] for pid in ids if pid in self.products}

    async def get_products_by_category(self, category_id: int) -> List[Product]:
        self._check()
        return [p for p in self.products.values() if p.category_id == category_id and p.active]

    async def get_products_by_attributes(self, color, material, usage_area, mounting_type) -> List[Product]:
        self._check()

        def _match(actual, wanted):
            return wanted is None or (actual is not None and actual.lower() == wanted.lower())

        return [
            p for p in sorted(self.products.values(), key=lambda p: p.product_id)
            if p.active
            and _match(p.color, color)
            and _match(p.material, material)
            and _match(p.usage_area, usage_area)
            and _match(p.mounting_type, mounting_type)
        ]

    async def get_active_products(self) -> List[Product]:
        self._check()
        return [p for p in sorted(self.products.values(), key=lambda p: p.product_id) if p.active]


class FakeInteractions:
    def __init__(self):
        self.order_items: List[Tuple[int, int]] = []
        self.views: List[dict] = []
        self.reviews: List[Tuple[int, float]] = []
        self.fail = False
        self.calls: Dict[str, int] = defaultdict(int)

    # --- builders -----------------------------------------------------------

    def order(self, order_id: int, *product_ids: int) -> None:
        self.order_items.extend((order_id, pid) for pid in product_ids)

    def view(self, product_id: int, *, user_id=None, ip_address=None, at: datetime = NOW) -> None:
        self.views.append(
            {"product_id": product_id, "user_id": user_id, "ip_address": ip_address, "viewed_at": at}
        )

    def review(self, product_id: int, *ratings: float) -> None:
        self.reviews.extend((product_id, r) for r in ratings)

    def _check(self, name: str):
        self.calls[name] += 1
        if self.fail:
            raise StoreDown("interaction store unavailable")

    # --- contract -----------------------------------------------------------

    async def get_co_purchased_candidates(self, seed_product_id: int) -> List[Tuple[int, int]]:
        self._check("co_purchase")
        orders = {oid for oid, pid in self.order_items if pid == seed_product_id}
        counts: Dict[int, int] = defaultdict(int)
        for oid, pid in self.order_items:
            if oid in orders and pid != seed_product_id:
                counts[pid] += 1
        return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))

    async def get_recently_viewed_product_ids(self, viewer: ViewerKey, limit: int) -> List[int]:
        self._check("recent_views")
        if viewer.user_id is not None:
            rows = [v for v in self.views if v["user_id"] == viewer.user_id]
        elif viewer.ip_address:
            rows = [v for v in self.views if v["ip_address"] == viewer.ip_address]
        else:
            return []
        last_seen: Dict[int, datetime] = {}
        for v in rows:
            pid = v["product_id"]
            if pid not in last_seen or v["viewed_at"] > last_seen[pid]:
                last_seen[pid] = v["viewed_at"]
        ordered = sorted(last_seen.items(), key=lambda kv: (-kv[1].timestamp(), kv[0]))
        return [pid for pid, _ in ordered][:limit]

    async def get_co_viewed_candidates(self, seed_product_id: int) -> List[Tuple[int, int]]:
        self._check("co_view")
        first_seen: Dict[int, datetime] = {}
        for v in self.views:
            if v["product_id"] == seed_product_id and v["user_id"] is not None:
                uid = v["user_id"]
                if uid not in first_seen or v["viewed_at"] < first_seen[uid]:
                    first_seen[uid] = v["viewed_at"]
        viewers: Dict[int, set] = defaultdict(set)
        for v in self.views:
            uid = v["user_id"]
            if uid in first_seen and v["product_id"] != seed_product_id and v["viewed_at"] >= first_seen[uid]:
                viewers[v["product_id"]].add(uid)
        return sorted(((pid, len(uids)) for pid, uids in viewers.items()), key=lambda kv: (-kv[1], kv[0]))

    async def get_average_rating(self, product_id: int) -> Optional[float]:
        return (await self.get_average_ratings([product_id])).get(product_id)

    async def get_average_ratings(self, ids) -> Dict[int, float]:
        self._check("ratings")
        wanted = set(ids)
        grouped: Dict[int, List[float]] = defaultdict(list)
        for pid, rating in self.reviews:
            if pid in wanted:
                grouped[pid].append(rating)
        return {pid: sum(rs) / len(rs) for pid, rs in grouped.items()}

    async def get_view_count(self, product_id: int) -> int:
        return (await self.get_view_counts([product_id])).get(product_id, 0)

    async def get_view_counts(self, ids) -> Dict[int, int]:
        self._check("view_counts")
        wanted = set(ids)
        counts: Dict[int, int] = defaultdict(int)
        for v in self.views:
            if v["product_id"] in wanted:
                counts[v["product_id"]] += 1
        return dict(counts)

    async def get_view_count_since(self, product_id: int, since: datetime) -> int:
        self._check("view_count_since")
        return sum(1 for v in self.views if v["product_id"] == product_id and v["viewed_at"] >= since)

    async def get_most_viewed_product_ids(self) -> List[int]:
        self._check("most_viewed")
        counts: Dict[int, int] = defaultdict(int)
        for v in self.views:
            counts[v["product_id"]] += 1
        return [pid for pid, _ in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the cache repository."""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.fail = False

    async def get(self, key):
        if self.fail:
            raise ConnectionError("redis down")
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self.fail:
            raise ConnectionError("redis down")
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def ping(self):
        return True

    def cached(self, key):
        return json.loads(self.store[key]) if key in self.store else None


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def interactions():
    return FakeInteractions()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(fake_redis):
    return RecoCacheRepo(fake_redis)


def assert_all_eligible(products, seed_id=None):
    for p in products:
        assert p.active and p.stock_quantity > 0
        assert p.product_id != seed_id


__all__ = [
    "NOW",
    "make_product",
    "FakeCatalog",
    "FakeInteractions",
    "FakeRedis",
    "StoreDown",
    "assert_all_eligible",
]
