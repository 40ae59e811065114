from sqlalchemy.orm import Session, selectinload
from typing import Optional
from bakery.models.cart import Cart
from bakery.models.cart_item import CartItem

class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Cart).options(
            selectinload(Cart.items).selectinload(CartItem.product)
        )

    def get_by_uuid(self, cart_uuid: str) -> Optional[Cart]:
        return self._query().filter(Cart.cart_uuid == cart_uuid, Cart.user_id.is_(None)).first()

    def get_by_user(self, user_id: int) -> Optional[Cart]:
        return self._query().filter(Cart.user_id == user_id).first()

    def create_guest_cart(self, cart_uuid: str) -> Cart:
        c = Cart(cart_uuid=cart_uuid)
        self.db.add(c)
        self.db.flush()
        return c

    def create_user_cart(self, user_id: int) -> Cart:
        c = Cart(user_id=user_id)
        self.db.add(c)
        self.db.flush()
        return c

    def get_item(self, cart: Cart, item_id: int) -> Optional[CartItem]:
        return self.db.query(CartItem).filter(CartItem.id == item_id, CartItem.cart_id == cart.id).first()

    def add_item(self, cart: Cart, product_id: int, qty: int, unit_price_cents: int) -> CartItem:
        item = CartItem(cart_id=cart.id, product_id=product_id, quantity=qty, unit_price_cents=unit_price_cents)
        self.db.add(item)
        cart.items.append(item)
        self.db.flush()
        return item

    def remove_item(self, cart: Cart, item_id: int) -> bool:
        it = self.get_item(cart, item_id)
        if not it:
            return False
        if it in cart.items:
            cart.items.remove(it)
        self.db.delete(it)
        self.db.flush()
        return True

    def clear_items(self, cart: Cart) -> int:
        n = self.db.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session=False)
        self.db.expire(cart, ["items"])
        return n

    def delete_cart(self, cart: Cart):
        self.db.delete(cart)
        self.db.flush()
