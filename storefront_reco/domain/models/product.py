from pydantic import BaseModel, Field
from typing import Optional

class Product(BaseModel):
    product_id: int
    name: str = ""
    category_id: Optional[int] = None
    price: Optional[float] = None
    stock_quantity: Optional[int] = 0
    active: Optional[bool] = True

    # Attribute set used by the similarity strategy
    color: Optional[str] = None
    material: Optional[str] = None
    usage_area: Optional[str] = None
    mounting_type: Optional[str] = None

    model_config = {"frozen": True}  # immuable = safe

    @property
    def eligible(self) -> bool:
        """
        Active and in stock: the only products ever recommended.
        A null flag or quantity in the catalog counts as not eligible.
        """
        return bool(self.active) and (self.stock_quantity or 0) > 0

    @property
    def attributes(self) -> tuple:
        return (self.color, self.material, self.usage_area, self.mounting_type)


class ViewerKey(BaseModel):
    """
    Identifies a browsing session: the authenticated user id when present,
    otherwise the anonymous network address.
    """
    user_id: Optional[int] = None
    ip_address: Optional[str] = None
    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return self.user_id is None and not self.ip_address

    def __str__(self) -> str:
        if self.user_id is not None:
            return f"user:{self.user_id}"
        return f"ip:{self.ip_address}" if self.ip_address else "anonymous"


class ScoredCandidate(BaseModel):
    product_id: int
    score: float = Field(ge=0)
