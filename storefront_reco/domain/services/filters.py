from typing import Iterable, List, Optional
from storefront_reco.domain.models.product import Product


def is_eligible(product: Optional[Product]) -> bool:
    """Only active, in-stock products are ever recommended."""
    return product is not None and product.eligible


def eligible_candidates(products: Iterable[Product], exclude_id: Optional[int] = None) -> List[Product]:
    """Drop ineligible products and the seed itself, keeping order."""
    return [p for p in products if is_eligible(p) and p.product_id != exclude_id]


def rating_sort_key(rating: Optional[float]) -> float:
    """
    Unrated products sort below every rated one.
    Ratings live in [1, 5] so -1 is lower than any real average.
    """
    return rating if rating is not None else -1.0


def meets_rating(rating: Optional[float], threshold: float) -> bool:
    """An absent rating never satisfies a threshold."""
    return rating is not None and rating >= threshold
