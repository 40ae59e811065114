import pytest

from bakery.adapters.mock_payment import PaymentGateway, PaymentResult
from bakery.db import SessionLocal
from bakery.models.order import Order
from bakery.models.product import Product
from bakery.services.cart_service import CartService, StockExceeded
from bakery.services.order_service import (
    AddressNotFound,
    CheckoutState,
    EmptyCart,
    InsufficientStock,
    OrderPlacementFailed,
    OrderService,
    PaymentFailed,
)
from conftest import auth_headers, product_stock, set_stock


def _order_count():
    s = SessionLocal()
    try:
        return s.query(Order).count()
    finally:
        s.close()


def _fill_cart(user_id, *lines):
    s = SessionLocal()
    try:
        svc = CartService(s)
        cart = svc.get_or_create_cart(user_id=user_id)
        for product_id, qty in lines:
            svc.add_item(cart, product_id, qty)
    finally:
        s.close()


def test_checkout_cookie_scenario(client, make_product, make_address):
    cookie = make_product("Cookie", stock=5, price_cents=120)
    address = make_address(1)
    headers = auth_headers(1)
    client.post("/api/cart/items", json={"product_id": cookie, "quantity": 3}, headers=headers)

    res = client.post("/api/orders", json={"address_id": address, "payment": {"card": "4242"}}, headers=headers)
    assert res.status_code == 201
    body = res.json()
    assert body["order_id"]
    assert body["transaction_id"].startswith("txn_")

    assert product_stock(cookie) == 2
    assert client.get("/api/cart", headers=headers).json()["items"] == []

    orders = client.get("/api/orders", headers=headers).json()
    assert len(orders) == 1
    order = orders[0]
    assert order["status"] == "pending"
    assert order["payment_status"] == "paid"
    assert order["total_cents"] == 360
    assert order["address"]["city"] == "Amman"
    assert order["items"] == [
        {"product_id": cookie, "title": "Cookie", "quantity": 3, "unit_price_cents": 120}
    ]


def test_checkout_cake_scenario_insufficient_stock(client, make_product, make_address):
    cake = make_product("Cake", stock=2)
    address = make_address(1)
    headers = auth_headers(1)
    client.post("/api/cart/items", json={"product_id": cake, "quantity": 2}, headers=headers)
    set_stock(cake, 1)

    res = client.post("/api/orders", json={"address_id": address}, headers=headers)
    assert res.status_code == 409
    assert res.json()["detail"] == "Not enough stock for product: Cake"
    assert product_stock(cake) == 1
    assert _order_count() == 0


def test_mixed_cart_is_all_or_nothing(db, make_product, make_address):
    bread = make_product("Bread", stock=5)
    tart = make_product("Tart", stock=3)
    address = make_address(1)
    _fill_cart(1, (bread, 2), (tart, 3))
    set_stock(tart, 1)

    svc = OrderService(db)
    with pytest.raises(InsufficientStock) as exc:
        svc.place_order(1, address)
    assert exc.value.product_title == "Tart"
    assert svc.state == CheckoutState.ROLLED_BACK

    assert _order_count() == 0
    assert product_stock(bread) == 5
    assert product_stock(tart) == 1
    assert len(CartService(db).get_cart(user_id=1).items) == 2


def test_lost_decrement_race_rolls_back_everything(db, make_product, make_address, monkeypatch):
    bread = make_product("Bread", stock=5)
    tart = make_product("Tart", stock=3)
    address = make_address(1)
    _fill_cart(1, (bread, 2), (tart, 1))

    svc = OrderService(db)
    real_decrement = svc.products.decrement_stock
    calls = []

    def racing_decrement(product_id, qty):
        calls.append(product_id)
        if product_id == tart:
            # another checkout took the last units first
            return False
        return real_decrement(product_id, qty)

    monkeypatch.setattr(svc.products, "decrement_stock", racing_decrement)

    with pytest.raises(OrderPlacementFailed):
        svc.place_order(1, address)

    assert calls == [bread, tart]
    assert svc.state == CheckoutState.ROLLED_BACK
    assert _order_count() == 0
    assert product_stock(bread) == 5
    assert product_stock(tart) == 3
    db.expire_all()
    assert len(CartService(db).get_cart(user_id=1).items) == 2


def test_order_total_matches_items(db, make_product, make_address):
    a = make_product("Donut", stock=10, price_cents=199)
    b = make_product("Bagel", stock=10, price_cents=350)
    address = make_address(1)
    _fill_cart(1, (a, 3), (b, 2))

    svc = OrderService(db)
    placed = svc.place_order(1, address)
    assert svc.state == CheckoutState.COMMITTED

    order = svc.orders.get(placed.order_id)
    assert order.total_cents == sum(i.quantity * i.unit_price_cents for i in order.items)
    assert order.total_cents == 3 * 199 + 2 * 350
    assert order.transaction_id == placed.transaction_id


def test_order_keeps_snapshot_price(db, make_product, make_address):
    a = make_product("Pie", stock=4, price_cents=500)
    address = make_address(1)
    _fill_cart(1, (a, 1))
    s = SessionLocal()
    try:
        s.get(Product, a).price_cents = 900
        s.commit()
    finally:
        s.close()

    placed = OrderService(db).place_order(1, address)
    assert placed.total_cents == 500


def test_stock_never_negative_over_repeated_orders(db, make_product, make_address):
    a = make_product("Roll", stock=3)
    address = make_address(1)
    for _ in range(3):
        _fill_cart(1, (a, 1))
        OrderService(db).place_order(1, address)
    assert product_stock(a) == 0

    # the shelf is empty, so the cart refuses the next roll
    with pytest.raises(StockExceeded):
        _fill_cart(1, (a, 1))
    assert product_stock(a) == 0
    assert _order_count() == 3


def test_empty_cart(db, make_address):
    svc = OrderService(db)
    with pytest.raises(EmptyCart):
        svc.place_order(1, make_address(1))
    assert svc.state == CheckoutState.ROLLED_BACK


def test_address_of_another_user(client, make_product, make_address):
    a = make_product(stock=5)
    foreign = make_address(2)
    headers = auth_headers(1)
    client.post("/api/cart/items", json={"product_id": a, "quantity": 1}, headers=headers)

    res = client.post("/api/orders", json={"address_id": foreign}, headers=headers)
    assert res.status_code == 404
    assert res.json()["detail"] == "Address not found"
    assert product_stock(a) == 5


def test_address_not_found_service(db, make_product):
    a = make_product(stock=5)
    _fill_cart(1, (a, 1))
    with pytest.raises(AddressNotFound):
        OrderService(db).place_order(1, 4242)


def test_declining_gateway_writes_nothing(db, make_product, make_address):
    class DecliningGateway(PaymentGateway):
        def authorize(self, amount_cents, payment_details=None):
            return PaymentResult(success=False, message="Card declined")

    a = make_product(stock=5)
    address = make_address(1)
    _fill_cart(1, (a, 2))

    with pytest.raises(PaymentFailed):
        OrderService(db, payment_gateway=DecliningGateway()).place_order(1, address)
    assert _order_count() == 0
    assert product_stock(a) == 5


def test_empty_cart_http(client, make_address):
    res = client.post("/api/orders", json={"address_id": make_address(1)}, headers=auth_headers(1))
    assert res.status_code == 400
    assert res.json()["detail"] == "Cart is empty"


def test_orders_require_auth(client):
    assert client.get("/api/orders").status_code == 401
    assert client.post("/api/orders", json={"address_id": 1}).status_code == 401
