# storefront/api/items.py
# Каталог: список с фильтрами открыт всем, изменения и просмотр по id только с токеном.
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from storefront.core import security
from storefront.schemas.item import ItemCreate, ItemOut, ItemUpdate
from storefront.services import catalog

router = APIRouter()


@router.get("", response_model=List[ItemOut])
def list_items(
    min_price: Optional[float] = Query(default=None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(default=None, alias="maxPrice", ge=0),
    category: Optional[str] = None,
    db: Session = Depends(security.get_db),
):
    return catalog.list_items(db, min_price=min_price, max_price=max_price, category=category)


@router.post("", response_model=ItemOut, status_code=status.HTTP_201_CREATED)
def create_item(
    payload: ItemCreate,
    user_id: str = Depends(security.get_current_user_id),
    db: Session = Depends(security.get_db),
):
    return catalog.create_item(db, payload)


@router.get("/{item_id}", response_model=ItemOut)
def get_item(
    item_id: str,
    user_id: str = Depends(security.get_current_user_id),
    db: Session = Depends(security.get_db),
):
    return catalog.get_item(db, item_id)


@router.put("/{item_id}", response_model=ItemOut)
def update_item(
    item_id: str,
    payload: ItemUpdate,
    user_id: str = Depends(security.get_current_user_id),
    db: Session = Depends(security.get_db),
):
    return catalog.update_item(db, item_id, payload)


@router.delete("/{item_id}")
def delete_item(
    item_id: str,
    user_id: str = Depends(security.get_current_user_id),
    db: Session = Depends(security.get_db),
):
    catalog.delete_item(db, item_id)
    return {"message": "Item deleted"}
