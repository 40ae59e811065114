from sqlalchemy import Boolean, CheckConstraint, Column, Integer, String, Text
from bakery.db import Base

class Product(Base):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),)

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(64), unique=True, index=True, nullable=True)
    title = Column(String(256), nullable=False)
    slug = Column(String(256), nullable=True)
    description = Column(Text, nullable=True)
    price_cents = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, default=True, nullable=False)
    stock = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<Product id={self.id} title={self.title} stock={self.stock}>"
