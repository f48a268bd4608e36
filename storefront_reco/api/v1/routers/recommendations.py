# storefront_reco/api/v1/routers/recommendations.py
import logging
import time
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, Request

from storefront_reco.api.deps import engine_dep
from storefront_reco.api.v1.schemas.reco import ProductOut, RecoListOut, ScoreOut
from storefront_reco.domain.models.product import Product, ViewerKey
from storefront_reco.domain.services.constants import (
    KIND_BROWSING_HISTORY,
    KIND_CATEGORY,
    KIND_FREQUENTLY_BOUGHT,
    KIND_MIXED,
    KIND_RATING,
    KIND_SIMILAR,
    KIND_TRENDING,
    MAX_RECOMMENDATIONS,
)
from storefront_reco.domain.services.engine import RecommendationEngine
from storefront_reco.utils.network import client_ip_address

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])

LimitQuery = Annotated[int, Query(ge=1, le=50)]


def _shape(kind: str, items: List[Product], source_product_id: Optional[int] = None) -> RecoListOut:
    return RecoListOut(
        kind=kind,
        source_product_id=source_product_id,
        items=[ProductOut.model_validate(p.model_dump()) for p in items],
        count=len(items),
    )


def _viewer(request: Request, user_id: Optional[int], ip_address: Optional[str]) -> ViewerKey:
    if not ip_address:
        ip_address = client_ip_address(request)
    return ViewerKey(user_id=user_id, ip_address=ip_address)


@router.get("/frequently-bought-together/{product_id}", response_model=RecoListOut)
async def frequently_bought_together(
    product_id: int,
    engine: RecommendationEngine = Depends(engine_dep),
):
    """Products most often bought in the same order as `product_id`."""
    items = await engine.recommend(KIND_FREQUENTLY_BOUGHT, product_id=product_id)
    return _shape(KIND_FREQUENTLY_BOUGHT, items, product_id)


@router.get("/browsing-history", response_model=RecoListOut)
async def browsing_history(
    request: Request,
    user_id: Optional[int] = Query(None),
    ip_address: Optional[str] = Query(None, description="Defaults to the caller's address"),
    engine: RecommendationEngine = Depends(engine_dep),
):
    """Suggestions from products viewed by people who viewed what this viewer viewed."""
    viewer = _viewer(request, user_id, ip_address)
    logger.info("Request: browsing_history viewer=%s", viewer)
    items = await engine.recommend(KIND_BROWSING_HISTORY, viewer=viewer)
    return _shape(KIND_BROWSING_HISTORY, items)


@router.get("/category/{product_id}", response_model=RecoListOut)
async def by_category(
    product_id: int,
    limit: LimitQuery = MAX_RECOMMENDATIONS,
    engine: RecommendationEngine = Depends(engine_dep),
):
    items = await engine.recommend(KIND_CATEGORY, product_id=product_id, limit=limit)
    return _shape(KIND_CATEGORY, items, product_id)


@router.get("/rating/{product_id}", response_model=RecoListOut)
async def by_rating(
    product_id: int,
    limit: LimitQuery = MAX_RECOMMENDATIONS,
    engine: RecommendationEngine = Depends(engine_dep),
):
    items = await engine.recommend(KIND_RATING, product_id=product_id, limit=limit)
    return _shape(KIND_RATING, items, product_id)


@router.get("/trending", response_model=RecoListOut)
async def trending(
    limit: LimitQuery = MAX_RECOMMENDATIONS,
    engine: RecommendationEngine = Depends(engine_dep),
):
    items = await engine.recommend(KIND_TRENDING, limit=limit)
    return _shape(KIND_TRENDING, items)


@router.get("/similar/{product_id}", response_model=RecoListOut)
async def similar(
    product_id: int,
    limit: LimitQuery = MAX_RECOMMENDATIONS,
    engine: RecommendationEngine = Depends(engine_dep),
):
    """Same attributes (color, material, usage area, mounting type), closest price first."""
    items = await engine.recommend(KIND_SIMILAR, product_id=product_id, limit=limit)
    return _shape(KIND_SIMILAR, items, product_id)


@router.get("/mixed/{product_id}", response_model=RecoListOut)
async def mixed(
    request: Request,
    product_id: int,
    user_id: Optional[int] = Query(None),
    ip_address: Optional[str] = Query(None),
    limit: LimitQuery = MAX_RECOMMENDATIONS,
    include_scores: bool = Query(False, description="Include the merged score of each product"),
    engine: RecommendationEngine = Depends(engine_dep),
):
    """
    Weighted union of co-purchase, rating, browsing history, similarity and
    category recommendations.
    """
    viewer = _viewer(request, user_id, ip_address)
    logger.info(
        "Request: mixed product_id=%s viewer=%s limit=%s include_scores=%s",
        product_id, viewer, limit, include_scores,
    )
    t0 = time.perf_counter()
    ranked = await engine.merger.rank(product_id, viewer, limit)
    result = _shape(KIND_MIXED, [p for p, _ in ranked], product_id)
    if include_scores:
        result.scores = [ScoreOut(product_id=p.product_id, score=s) for p, s in ranked]
    logger.info(
        "Response: mixed product_id=%s count=%s elapsed_time=%.4fs",
        product_id, result.count, time.perf_counter() - t0,
    )
    return result
