import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from bakery.models.cart import Cart
from bakery.services.cart_service import CartService, CartServiceException

log = logging.getLogger("bakery.cart.merge")


@dataclass
class SkippedItem:
    product_id: int
    quantity: int
    reason: str


@dataclass
class MergeResult:
    cart: Cart
    merged: List[int] = field(default_factory=list)
    skipped: List[SkippedItem] = field(default_factory=list)


class CartMergeService:
    """
    Folds a guest cart into the user's cart once the session authenticates.

    Items go through the normal add path one by one, so quantities for a
    product already in the user's cart are summed and re-checked against
    stock. An item that fails is skipped and reported; the rest still merge.
    The guest cart is always discarded afterwards.
    """

    def __init__(self, db: Session, cart_service: Optional[CartService] = None):
        self.db = db
        self.carts = cart_service or CartService(db)

    def merge(self, user_id: int, guest_cart_uuid: Optional[str]) -> MergeResult:
        user_cart = self.carts.get_or_create_cart(user_id=user_id)
        guest = self.carts.get_cart(cart_uuid=guest_cart_uuid) if guest_cart_uuid else None
        if guest is None:
            return MergeResult(cart=user_cart)

        result = MergeResult(cart=user_cart)
        pending = [(it.product_id, it.quantity) for it in guest.items]
        for product_id, quantity in pending:
            try:
                self.carts.add_item(user_cart, product_id, quantity)
                result.merged.append(product_id)
            except CartServiceException as e:
                self.db.rollback()
                log.warning(
                    "guest cart %s: skipped product=%s qty=%s for user=%s: %s",
                    guest_cart_uuid, product_id, quantity, user_id, e,
                )
                result.skipped.append(SkippedItem(product_id, quantity, str(e)))

        self.carts.clear(guest)
        # the stored cart is authoritative from here on
        self.db.expire_all()
        result.cart = self.carts.get_cart(user_id=user_id)
        log.info(
            "merged guest cart %s into user=%s merged=%d skipped=%d",
            guest_cart_uuid, user_id, len(result.merged), len(result.skipped),
        )
        return result
