# storefront/services/cart.py
# Корзина пользователя: чтение с подстановкой актуальных данных товара,
# добавление с объединением строк и удаление.
#
# Изменения делаются одной ключевой операцией в БД (UPDATE quantity = quantity + n,
# при отсутствии строки INSERT) в рамках одной транзакции.
# Гонку двух INSERT ловит уникальный индекс (user_id, item_id), после чего
# операция повторяется и уже попадает в UPDATE.

import logging
import time
from typing import Callable, List

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.errors import (
    ItemNotFound,
    StorageFailure,
    StorefrontError,
    Unauthorized,
    UserNotFound,
    ValidationError,
)
from storefront.models.cart import CartItem, MAX_QUANTITY
from storefront.models.item import Item
from storefront.models.user import User
from storefront.schemas.cart import CartLineOut
from storefront.schemas.item import ItemOut
from storefront.services.catalog import item_exists

logger = logging.getLogger(__name__)


def _require_identity(user_id: str) -> None:
    if not user_id:
        raise Unauthorized()


def _require_user(db: Session, user_id: str) -> None:
    # Токен может пережить пользователя
    if db.scalar(select(User.id).where(User.id == user_id)) is None:
        raise UserNotFound()


def _validate_item_id(item_id: str) -> None:
    if not isinstance(item_id, str) or not item_id:
        raise ValidationError("Item ID is required")


def _resolve(db: Session, user_id: str) -> List[CartLineOut]:
    """Строки корзины в порядке добавления с текущими данными товаров."""
    rows = db.execute(
        select(CartItem.item_id, CartItem.quantity, Item)
        .outerjoin_from(CartItem, Item, Item.id == CartItem.item_id)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.id)
    ).all()

    view = []
    for item_id, quantity, item in rows:
        if item is None:
            # Товар удалён из каталога: строку не показываем
            logger.info(f"Cart of user {user_id}: skipping line for missing item {item_id}")
            continue
        view.append(CartLineOut(item=ItemOut.model_validate(item), quantity=quantity))
    return view


def _write_with_retry(db: Session, write: Callable[[], None], action: str) -> None:
    """
    Выполняет write() и коммитит. При конфликте (уникальный индекс, блокировка)
    откатывает транзакцию и повторяет с линейной паузой.

    Raises:
        StorageFailure: если все попытки исчерпаны
    """
    attempts = settings.CART_UPDATE_RETRIES
    last_error = None
    for attempt in range(1, attempts + 1):
        try:
            write()
            db.commit()
            return
        except (IntegrityError, OperationalError) as e:
            db.rollback()
            last_error = e
            logger.warning(f"Cart {action}: attempt {attempt}/{attempts} failed: {e.__class__.__name__}")
            if attempt < attempts:
                time.sleep(settings.CART_RETRY_BACKOFF * attempt)
        except StorefrontError:
            db.rollback()
            raise
    logger.error(f"Cart {action}: giving up after {attempts} attempts")
    raise StorageFailure(f"Could not {action} after {attempts} attempts") from last_error


def get_cart(db: Session, user_id: str) -> List[CartLineOut]:
    _require_identity(user_id)
    _require_user(db, user_id)
    return _resolve(db, user_id)


def add_item(db: Session, user_id: str, item_id: str, quantity: int = 1) -> List[CartLineOut]:
    """
    Добавляет товар в корзину. Если строка для товара уже есть,
    её количество увеличивается на quantity, иначе добавляется новая строка.
    """
    _require_identity(user_id)
    _validate_item_id(item_id)
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"Quantity must not exceed {MAX_QUANTITY}")
    if not item_exists(db, item_id):
        raise ItemNotFound()
    _require_user(db, user_id)

    def increment_or_insert() -> None:
        line = (CartItem.user_id == user_id, CartItem.item_id == item_id)
        result = db.execute(
            update(CartItem)
            .where(*line, CartItem.quantity <= MAX_QUANTITY - quantity)
            .values(quantity=CartItem.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Строка есть, но сумма вышла бы за предел колонки
            if db.scalar(select(CartItem.id).where(*line)) is not None:
                raise ValidationError(f"Quantity in cart must not exceed {MAX_QUANTITY}")
            db.execute(insert(CartItem).values(user_id=user_id, item_id=item_id, quantity=quantity))

    _write_with_retry(db, increment_or_insert, "add item")
    logger.info(f"User {user_id} added {quantity} x item {item_id} to cart")
    return _resolve(db, user_id)


def remove_item(db: Session, user_id: str, item_id: str) -> List[CartLineOut]:
    """Удаляет строку товара из корзины. Если строки нет, ничего не делает."""
    _require_identity(user_id)
    _validate_item_id(item_id)
    _require_user(db, user_id)

    def delete_line() -> None:
        db.execute(
            delete(CartItem)
            .where(CartItem.user_id == user_id, CartItem.item_id == item_id)
            .execution_options(synchronize_session=False)
        )

    _write_with_retry(db, delete_line, "remove item")
    logger.info(f"User {user_id} removed item {item_id} from cart")
    return _resolve(db, user_id)
