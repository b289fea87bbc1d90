# storefront/models/item.py
# Товар каталога. Корзина хранит только ссылку на id товара.
from sqlalchemy import Column, String, Float, Text, CheckConstraint

from storefront.db.base import Base
from storefront.models.user import new_id


class Item(Base):
    __tablename__ = "items"
    __table_args__ = (CheckConstraint("price >= 0", name="price_non_negative"),)

    id = Column(String(64), primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    category = Column(String, nullable=False, index=True)
    image = Column(String, nullable=True)
