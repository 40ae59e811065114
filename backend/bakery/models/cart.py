from bakery.db import Base
from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship


class Cart(Base):
    __tablename__ = "carts"
    id = Column(Integer, primary_key=True, index=True)
    cart_uuid = Column(
        String(64), unique=True, index=True, nullable=True
    )  # guest identifier
    user_id = Column(
        Integer, unique=True, nullable=True, index=True
    )  # null while the cart belongs to a guest session
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    @property
    def total_cents(self) -> int:
        return sum(it.quantity * it.unit_price_cents for it in self.items)

    def find_item(self, product_id: int):
        return next((it for it in self.items if it.product_id == product_id), None)
