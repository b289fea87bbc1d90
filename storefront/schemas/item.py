# storefront/schemas/item.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    price: float
    category: str
    image: Optional[str] = None


class ItemCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(ge=0)
    category: str = Field(min_length=1)
    image: Optional[str] = None


class ItemUpdate(BaseModel):
    """Частичное обновление: меняются только переданные поля."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = Field(default=None, min_length=1)
    image: Optional[str] = None
