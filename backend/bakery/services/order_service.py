import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from bakery.adapters.mock_payment import MockPaymentAdapter, PaymentDeclined, PaymentGateway
from bakery.config import settings
from bakery.models.order import Order, OrderStatus, PaymentStatus
from bakery.repositories.address_repo import AddressRepository
from bakery.repositories.cart_repo import CartRepository
from bakery.repositories.order_repo import OrderRepository
from bakery.repositories.product_repo import ProductRepository
from bakery.utils.transactions import unit_of_work

log = logging.getLogger("bakery.checkout")

ALLOWED_STATUSES = [s.value for s in OrderStatus]
ALLOWED_PAYMENT_STATUSES = [s.value for s in PaymentStatus]


class OrderServiceException(Exception):
    status_code = 400


class EmptyCart(OrderServiceException):
    def __init__(self):
        super().__init__("Cart is empty")


class AddressNotFound(OrderServiceException):
    status_code = 404

    def __init__(self, address_id: int):
        super().__init__("Address not found")
        self.address_id = address_id


class PaymentFailed(OrderServiceException):
    status_code = 402


class InsufficientStock(OrderServiceException):
    status_code = 409

    def __init__(self, product_title: str, requested: int, available: int):
        super().__init__(f"Not enough stock for product: {product_title}")
        self.product_title = product_title
        self.requested = requested
        self.available = available


class OrderPlacementFailed(OrderServiceException):
    status_code = 500

    def __init__(self):
        super().__init__("Could not place order, please try again")


class StockConflict(Exception):
    """A stock decrement found fewer units than were checked a moment earlier."""


class OrderNotFound(OrderServiceException):
    status_code = 404

    def __init__(self, order_id: int):
        super().__init__("Order not found")
        self.order_id = order_id


class InvalidOrderStatus(OrderServiceException):
    pass


class CheckoutState(str, enum.Enum):
    STARTED = "started"
    CART_VALIDATED = "cart_validated"
    ADDRESS_VALIDATED = "address_validated"
    PAYMENT_AUTHORIZED = "payment_authorized"
    STOCK_CHECKED = "stock_checked"
    ORDER_CREATED = "order_created"
    ITEMS_INSERTED = "items_inserted"
    STOCK_DECREMENTED = "stock_decremented"
    CART_CLEARED = "cart_cleared"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class PlacedOrder:
    order_id: int
    transaction_id: str
    total_cents: int


class OrderService:
    def __init__(self, db: Session, payment_gateway: Optional[PaymentGateway] = None):
        self.db = db
        self.carts = CartRepository(db)
        self.addresses = AddressRepository(db)
        self.products = ProductRepository(db)
        self.orders = OrderRepository(db)
        self.payment_gateway = payment_gateway or MockPaymentAdapter(
            delay_ms=settings.PAYMENT_MOCK_DELAY_MS
        )
        self.state: Optional[CheckoutState] = None

    def _advance(self, state: CheckoutState, user_id: int):
        self.state = state
        log.debug("checkout user=%s state=%s", user_id, state.value)

    def place_order(self, user_id: int, address_id: int, payment_details: Optional[Dict] = None) -> PlacedOrder:
        """
        Turn the user's cart into an order in one transaction.

        Validation (cart, address, payment, stock) happens before the first
        write. Order row, item snapshots, stock decrements and the cart wipe
        are then committed together or not at all.
        """
        self._advance(CheckoutState.STARTED, user_id)
        try:
            with unit_of_work(self.db):
                # 1) cart
                cart = self.carts.get_by_user(user_id)
                if not cart or not cart.items:
                    raise EmptyCart()
                lines = [
                    (it.product_id, it.quantity, it.unit_price_cents)
                    for it in cart.items
                ]
                total_cents = cart.total_cents
                self._advance(CheckoutState.CART_VALIDATED, user_id)

                # 2) address
                if not self.addresses.find(address_id, user_id):
                    raise AddressNotFound(address_id)
                self._advance(CheckoutState.ADDRESS_VALIDATED, user_id)

                # 3) payment; no compensation exists for this step
                try:
                    payment = self.payment_gateway.authorize(total_cents, payment_details)
                except PaymentDeclined as e:
                    raise PaymentFailed(f"Payment declined: {e}")
                if not payment.success:
                    raise PaymentFailed(payment.message or "Payment declined")
                self._advance(CheckoutState.PAYMENT_AUTHORIZED, user_id)

                # 4) stock, all lines before any write
                titles = {}
                for product_id, qty, _ in lines:
                    product = self.products.get_for_update(product_id)
                    title = product.title if product else f"#{product_id}"
                    available = product.stock if product else 0
                    if qty > available:
                        raise InsufficientStock(title, qty, available)
                    titles[product_id] = title
                self._advance(CheckoutState.STOCK_CHECKED, user_id)

                try:
                    order = self._write_order(user_id, address_id, cart, lines, titles, total_cents, payment.transaction_id)
                except OrderServiceException:
                    raise
                except Exception:
                    log.exception("checkout user=%s failed after stock check", user_id)
                    raise OrderPlacementFailed()
                order_id = order.id
        except OrderServiceException as e:
            self._advance(CheckoutState.ROLLED_BACK, user_id)
            log.info("checkout user=%s rejected: %s", user_id, e)
            raise
        except Exception:
            self._advance(CheckoutState.ROLLED_BACK, user_id)
            raise

        self._advance(CheckoutState.COMMITTED, user_id)
        log.info(
            "order %s placed user=%s total_cents=%s txn=%s",
            order_id, user_id, total_cents, payment.transaction_id,
        )
        return PlacedOrder(order_id=order_id, transaction_id=payment.transaction_id, total_cents=total_cents)

    def _write_order(self, user_id, address_id, cart, lines, titles, total_cents, transaction_id) -> Order:
        # 5) order
        order = self.orders.create(
            user_id=user_id,
            address_id=address_id,
            total_cents=total_cents,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PAID.value,
            transaction_id=transaction_id,
        )
        self._advance(CheckoutState.ORDER_CREATED, user_id)

        # 6) item snapshots and stock, per line
        for product_id, qty, unit_price_cents in lines:
            self.orders.add_item(order, product_id, titles[product_id], qty, unit_price_cents)
            if not self.products.decrement_stock(product_id, qty):
                raise StockConflict(f"stock for product {product_id} changed during checkout")
        self._advance(CheckoutState.ITEMS_INSERTED, user_id)
        self._advance(CheckoutState.STOCK_DECREMENTED, user_id)

        # 7) cart
        self.carts.clear_items(cart)
        self._advance(CheckoutState.CART_CLEARED, user_id)
        return order

    # --- history / admin ---

    def list_orders_for_user(self, user_id: int) -> List[Order]:
        return self.orders.list_for_user(user_id)

    def list_orders(self, page: int = 1, limit: int = 10, status: Optional[str] = None) -> Tuple[List[Order], Dict]:
        if status and status not in ALLOWED_STATUSES:
            raise InvalidOrderStatus(
                f"Invalid status. Allowed values: {', '.join(ALLOWED_STATUSES)}"
            )
        orders, total = self.orders.list(page=page, limit=limit, status=status)
        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": (total + limit - 1) // limit,
        }
        return orders, pagination

    def set_order_status(
        self,
        order_id: int,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
    ) -> Order:
        """
        Admin transition of status and/or payment status. Stock is left alone,
        so cancelling does not return units to the shelf.
        """
        if status and status not in ALLOWED_STATUSES:
            raise InvalidOrderStatus(
                f"Invalid status. Allowed values: {', '.join(ALLOWED_STATUSES)}"
            )
        if payment_status and payment_status not in ALLOWED_PAYMENT_STATUSES:
            raise InvalidOrderStatus(
                f"Invalid payment status. Allowed values: {', '.join(ALLOWED_PAYMENT_STATUSES)}"
            )
        if not status and not payment_status:
            raise InvalidOrderStatus("No fields to update")

        with unit_of_work(self.db):
            order = self.orders.get(order_id)
            if not order:
                raise OrderNotFound(order_id)
            if status:
                order.status = status
            if payment_status:
                order.payment_status = payment_status
        log.info(
            "order %s status=%s payment_status=%s", order_id, order.status, order.payment_status
        )
        return order
