import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from bakery.models.cart import Cart
from bakery.models.cart_item import CartItem
from bakery.repositories.cart_repo import CartRepository
from bakery.repositories.product_repo import ProductRepository

log = logging.getLogger("bakery.cart")


class CartServiceException(Exception):
    status_code = 400


class InvalidQuantity(CartServiceException):
    pass


class ProductNotFound(CartServiceException):
    status_code = 404

    def __init__(self, product_id: int):
        super().__init__("Product not found")
        self.product_id = product_id


class CartItemNotFound(CartServiceException):
    status_code = 404

    def __init__(self, item_id: int):
        super().__init__("Cart item not found")
        self.item_id = item_id


class StockExceeded(CartServiceException):
    status_code = 409

    def __init__(self, product_id: int, available: int):
        super().__init__(f"Only {available} items available in stock.")
        self.product_id = product_id
        self.available = available


class CartService:
    """
    Cart Store: what a buyer intends to purchase, for a guest session or an
    authenticated user. Every mutation is checked against the product's
    current stock and committed on success; a rejected mutation leaves the
    cart untouched.
    """

    def __init__(self, db: Session):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.product_repo = ProductRepository(db)

    # --- lookup ---

    def get_cart(self, user_id: Optional[int] = None, cart_uuid: Optional[str] = None) -> Optional[Cart]:
        if user_id is not None:
            return self.cart_repo.get_by_user(user_id)
        if cart_uuid:
            return self.cart_repo.get_by_uuid(cart_uuid)
        return None

    def get_or_create_cart(self, user_id: Optional[int] = None, cart_uuid: Optional[str] = None) -> Cart:
        c = self.get_cart(user_id=user_id, cart_uuid=cart_uuid)
        if c:
            return c
        if user_id is not None:
            c = self.cart_repo.create_user_cart(user_id)
        else:
            # stale or missing cookie: start a fresh guest cart
            c = self.cart_repo.create_guest_cart(uuid.uuid4().hex)
        self.db.commit()
        log.debug("created cart id=%s user_id=%s", c.id, user_id)
        return c

    # --- mutations ---

    def _check_stock(self, product, quantity: int):
        if quantity > product.stock:
            raise StockExceeded(product.id, product.stock)

    def add_item(self, cart: Cart, product_id: int, quantity: int) -> CartItem:
        if not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantity("Quantity must be positive")
        product = self.product_repo.get(product_id)
        if not product:
            raise ProductNotFound(product_id)

        item = cart.find_item(product_id)
        if item:
            self._check_stock(product, item.quantity + quantity)
            # the price snapshot taken on first add stays as-is
            item.quantity += quantity
            self.db.flush()
        else:
            self._check_stock(product, quantity)
            item = self.cart_repo.add_item(cart, product_id, quantity, product.price_cents)
        self.db.commit()
        return item

    def update_quantity(self, cart: Cart, item_id: int, quantity: int) -> Optional[CartItem]:
        """
        Set an item's quantity. A quantity of zero or less removes the item
        and returns None.
        """
        item = self.cart_repo.get_item(cart, item_id)
        if not item:
            raise CartItemNotFound(item_id)
        if quantity <= 0:
            self.cart_repo.remove_item(cart, item_id)
            self.db.commit()
            return None
        product = self.product_repo.get(item.product_id)
        if not product:
            raise ProductNotFound(item.product_id)
        self._check_stock(product, quantity)
        item.quantity = quantity
        self.db.commit()
        return item

    def remove_item(self, cart: Cart, item_id: int):
        self.cart_repo.remove_item(cart, item_id)
        self.db.commit()

    def clear(self, cart: Cart):
        """Empty the cart. A guest cart is dropped entirely, retiring its uuid."""
        if cart.is_guest:
            self.cart_repo.delete_cart(cart)
        else:
            self.cart_repo.clear_items(cart)
        self.db.commit()
