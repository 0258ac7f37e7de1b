from typing import List, Optional

from pydantic import BaseModel, Field


class CartItem(BaseModel):
    product_id: int = Field(alias="productId")
    qty: int = Field(gt=0)

    class Config:
        populate_by_name = True


class CartTotal(BaseModel):
    total: int = 0
    item_count: int = Field(default=0, alias="itemCount")

    class Config:
        populate_by_name = True


class CartTotalResponse(CartTotal):
    currency: str


class CartMutationResponse(BaseModel):
    ok: bool = True
    cart: List[CartItem] = []


class CartErrorResponse(BaseModel):
    ok: bool = False
    error: str
    reason: str
    available: Optional[int] = None
