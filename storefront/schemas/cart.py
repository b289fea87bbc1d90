# storefront/schemas/cart.py
# Тела запросов к /api/cart. Поля называются как у клиента (itemId),
# лишние поля и нецелые количества отклоняются, а не приводятся.
from typing import List

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from storefront.models.cart import MAX_QUANTITY
from storefront.schemas.item import ItemOut


class CartItemAdd(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    item_id: str = Field(alias="itemId", min_length=1, max_length=64)
    quantity: StrictInt = Field(default=1, gt=0, le=MAX_QUANTITY)


class CartItemRemove(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    item_id: str = Field(alias="itemId", min_length=1, max_length=64)


class CartLineOut(BaseModel):
    item: ItemOut
    quantity: int


CartView = List[CartLineOut]
