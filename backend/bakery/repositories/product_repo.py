from typing import Optional

from bakery.models.product import Product
from sqlalchemy import update
from sqlalchemy.orm import Session


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        """Return an active product by id, or None."""
        return (
            self.db.query(Product)
            .filter(Product.id == product_id, Product.active == True)
            .first()
        )

    def get_for_update(self, product_id: int) -> Optional[Product]:
        # FOR UPDATE is dropped by dialects without row locks (SQLite)
        return (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def decrement_stock(self, product_id: int, qty: int) -> bool:
        """
        Conditionally take ``qty`` units off the product's stock.

        Returns False when the row no longer holds enough stock, in which case
        nothing was changed.
        """
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= qty)
            .values(stock=Product.stock - qty)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
