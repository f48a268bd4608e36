# api/v1/schemas/reco.py
from pydantic import BaseModel
from typing import List, Optional

class ProductOut(BaseModel):
    product_id: int
    name: str
    category_id: Optional[int] = None
    price: Optional[float] = None
    stock_quantity: Optional[int] = None
    color: Optional[str] = None
    material: Optional[str] = None
    usage_area: Optional[str] = None
    mounting_type: Optional[str] = None

class ScoreOut(BaseModel):
    product_id: int
    score: float

class RecoListOut(BaseModel):
    kind: str
    source_product_id: Optional[int] = None
    items: List[ProductOut]
    count: int
    scores: Optional[List[ScoreOut]] = None
