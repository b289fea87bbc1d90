# storefront/services/catalog.py
# Работа с каталогом товаров: поиск по id, фильтрация, CRUD.
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.core.errors import ItemNotFound, ValidationError
from storefront.models.item import Item
from storefront.schemas.item import ItemCreate, ItemUpdate

logger = logging.getLogger(__name__)


def find_item(db: Session, item_id: str) -> Optional[Item]:
    return db.get(Item, item_id)


def item_exists(db: Session, item_id: str) -> bool:
    return db.scalar(select(Item.id).where(Item.id == item_id)) is not None


def get_item(db: Session, item_id: str) -> Item:
    item = find_item(db, item_id)
    if item is None:
        raise ItemNotFound()
    return item


def list_items(
    db: Session,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    category: Optional[str] = None,
) -> List[Item]:
    """Список товаров; границы цены включительные, категория сравнивается точно."""
    if min_price is not None and max_price is not None and min_price > max_price:
        raise ValidationError("minPrice must not exceed maxPrice")
    query = select(Item)
    if min_price is not None:
        query = query.where(Item.price >= min_price)
    if max_price is not None:
        query = query.where(Item.price <= max_price)
    if category:
        query = query.where(Item.category == category)
    return list(db.scalars(query.order_by(Item.name, Item.id)))


def create_item(db: Session, data: ItemCreate) -> Item:
    item = Item(**data.model_dump())
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info(f"Item {item.id} created in category {item.category!r}")
    return item


def update_item(db: Session, item_id: str, data: ItemUpdate) -> Item:
    item = get_item(db, item_id)
    changes = data.model_dump(exclude_unset=True)
    for field in ("name", "description", "price", "category"):
        # null для обязательного поля означает "не менять"
        if changes.get(field) is None:
            changes.pop(field, None)
    for field, value in changes.items():
        setattr(item, field, value)
    db.commit()
    db.refresh(item)
    logger.info(f"Item {item.id} updated: {sorted(changes)}")
    return item


def delete_item(db: Session, item_id: str) -> None:
    """Удаляет товар. Строки корзин со ссылкой на него не трогаем."""
    item = get_item(db, item_id)
    db.delete(item)
    db.commit()
    logger.info(f"Item {item_id} deleted")
