# storefront/models/cart.py
# Модель CartItem: строки корзины пользователя.
# item_id намеренно без ForeignKey: товар могут удалить из каталога,
# а строка в корзине останется и просто пропадёт из выдачи.
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from storefront.db.base import Base
from storefront.models.user import utcnow

# Предел колонки Integer (32 бита) и для одного добавления, и для суммы в строке
MAX_QUANTITY = 2**31 - 1


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_cart_items_user_item"),
        CheckConstraint("quantity > 0", name="quantity_positive"),
    )

    # Автоинкрементный id задаёт порядок добавления
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(String(64), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    added_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User", back_populates="cart_items")
