# storefront/api/cart.py
# Корзина текущего пользователя. user_id берётся только из токена;
# зависимость токена объявлена раньше сессии, поэтому без токена в БД не ходим.
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.core import security
from storefront.schemas.cart import CartItemAdd, CartItemRemove, CartView
from storefront.services import cart as cart_service

router = APIRouter()


@router.get("", response_model=CartView)
def get_cart(
    user_id: str = Depends(security.get_current_user_id),
    db: Session = Depends(security.get_db),
):
    return cart_service.get_cart(db, user_id)


@router.post("", response_model=CartView)
def add_to_cart(
    payload: CartItemAdd,
    user_id: str = Depends(security.get_current_user_id),
    db: Session = Depends(security.get_db),
):
    return cart_service.add_item(db, user_id, payload.item_id, payload.quantity)


@router.delete("", response_model=CartView)
def remove_from_cart(
    payload: CartItemRemove,
    user_id: str = Depends(security.get_current_user_id),
    db: Session = Depends(security.get_db),
):
    return cart_service.remove_item(db, user_id, payload.item_id)
