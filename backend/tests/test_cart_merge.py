from bakery.services.cart_merge_service import CartMergeService
from bakery.services.cart_service import CartService
from conftest import auth_headers


def _quantities(cart):
    return {it.product_id: it.quantity for it in cart.items}


def test_merge_sums_existing_and_appends_new(db, make_product):
    a = make_product("Eclair", stock=10)
    b = make_product("Scone", stock=5)
    carts = CartService(db)

    user_cart = carts.get_or_create_cart(user_id=1)
    carts.add_item(user_cart, a, 1)
    guest = carts.get_or_create_cart()
    guest_uuid = guest.cart_uuid
    carts.add_item(guest, a, 2)
    carts.add_item(guest, b, 1)

    result = CartMergeService(db).merge(1, guest_uuid)

    assert _quantities(result.cart) == {a: 3, b: 1}
    assert result.skipped == []
    assert carts.get_cart(cart_uuid=guest_uuid) is None


def test_merge_skips_item_over_stock_and_keeps_going(db, make_product):
    a = make_product("Eclair", stock=2)
    b = make_product("Scone", stock=5)
    carts = CartService(db)

    user_cart = carts.get_or_create_cart(user_id=1)
    carts.add_item(user_cart, a, 1)
    guest = carts.get_or_create_cart()
    guest_uuid = guest.cart_uuid
    carts.add_item(guest, a, 2)
    carts.add_item(guest, b, 1)

    result = CartMergeService(db).merge(1, guest_uuid)

    assert _quantities(result.cart) == {a: 1, b: 1}
    assert [(s.product_id, s.quantity) for s in result.skipped] == [(a, 2)]
    # guest cart goes away even with a skipped item
    assert carts.get_cart(cart_uuid=guest_uuid) is None


def test_merge_without_guest_cart_returns_user_cart(db, make_product):
    a = make_product(stock=3)
    carts = CartService(db)
    carts.add_item(carts.get_or_create_cart(user_id=1), a, 1)

    result = CartMergeService(db).merge(1, "no-such-cart")
    assert _quantities(result.cart) == {a: 1}


def test_merge_creates_user_cart_when_missing(db, make_product):
    a = make_product(stock=3)
    carts = CartService(db)
    guest = carts.get_or_create_cart()
    carts.add_item(guest, a, 2)

    result = CartMergeService(db).merge(9, guest.cart_uuid)
    assert result.cart.user_id == 9
    assert _quantities(result.cart) == {a: 2}


def test_merge_over_http_drops_guest_cookie(client, make_product):
    a = make_product("Eclair", stock=10)
    b = make_product("Scone", stock=5)
    headers = auth_headers(1)

    client.post("/api/cart/items", json={"product_id": a, "quantity": 1}, headers=headers)
    # anonymous adds go to the cookie cart
    client.post("/api/cart/items", json={"product_id": a, "quantity": 2})
    client.post("/api/cart/items", json={"product_id": b, "quantity": 1})

    res = client.post("/api/cart/merge", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert {it["product_id"]: it["quantity"] for it in body["cart"]["items"]} == {a: 3, b: 1}
    assert body["skipped"] == []


def test_merge_requires_auth(client):
    assert client.post("/api/cart/merge").status_code == 401
