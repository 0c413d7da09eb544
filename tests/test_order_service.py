import pytest
from redis.exceptions import RedisError

from storefront.services.backend_client import BackendError
from storefront.services.order_service import extract_page
from tests.conftest import shoe

ADDRESS = {"address_line_1": "ul. Dluga 1", "city": "Krakow", "postal_code": "30-001"}
LOCK_KEY = "checkout:client-1:submit:lock"


def created(order_id=12, status="PENDING"):
    return {"order": {"id": order_id, "order_number": "A-0012", "status": status, "total_amount": "240.00"}}


def test_requires_authentication(session, http):
    session.cart.add(shoe())
    with pytest.raises(PermissionError):
        session.orders.create_order_from_cart({"order_type": "pickup"})
    assert http.calls_to("POST", "/orders-create/") == []


def test_empty_cart_is_rejected_before_network(logged_in, http):
    with pytest.raises(ValueError, match="Cannot create order: cart is empty"):
        logged_in.orders.create_order_from_cart({"order_type": "pickup"})
    assert http.calls_to("POST", "/orders-create/") == []


def test_delivery_requires_address(logged_in, http):
    logged_in.cart.add(shoe())
    with pytest.raises(ValueError, match="Delivery address is required for delivery orders"):
        logged_in.orders.create_order_from_cart({"order_type": "delivery"})
    assert http.calls_to("POST", "/orders-create/") == []
    assert logged_in.cart.total_items() == 1


def test_successful_order_clears_cart(logged_in, http, redis_client):
    logged_in.cart.add(shoe())
    logged_in.cart.add(shoe())
    http.add("POST", "/orders-create/", status=201, data=created())

    order = logged_in.orders.create_order_from_cart(
        {"order_type": "delivery", "delivery_address": ADDRESS, "tip_amount": "5.00"}
    )

    assert order.id == "12"
    assert order.order_number == "A-0012"
    assert order.status.value == "pending"
    assert logged_in.orders.state == "success"
    assert logged_in.orders.current_order == order
    assert logged_in.cart.is_empty()
    assert "client:client-1:shopping-cart" not in redis_client.data
    assert LOCK_KEY not in redis_client.data

    body = http.calls_to("POST", "/orders-create/")[0]["json"]
    assert body["items"] == [{"product_id": 10, "variant_id": None, "quantity": 2, "price": 120.0}]
    assert body["total_amount"] == 240.0
    assert body["order_type"] == "delivery"
    assert body["delivery_address"]["city"] == "Krakow"
    assert body["tip_amount"] == "5.00"


def test_order_request_carries_bearer_token(logged_in, http):
    logged_in.cart.add(shoe())
    http.add("POST", "/orders-create/", status=201, data=created())
    logged_in.orders.create_order_from_cart({"order_type": "pickup"})
    headers = http.calls_to("POST", "/orders-create/")[0]["headers"]
    assert headers["Authorization"] == "Bearer access-1"


def test_pickup_drops_delivery_address(logged_in, http):
    logged_in.cart.add(shoe())
    http.add("POST", "/orders-create/", status=201, data=created())
    logged_in.orders.create_order_from_cart({"order_type": "pickup", "delivery_address": ADDRESS})
    body = http.calls_to("POST", "/orders-create/")[0]["json"]
    assert "delivery_address" not in body


def test_backend_rejection_keeps_cart(logged_in, http, redis_client):
    logged_in.cart.add(shoe())
    http.add("POST", "/orders-create/", status=400, data={"detail": "Product 10 is out of stock"})

    with pytest.raises(BackendError, match="Product 10 is out of stock"):
        logged_in.orders.create_order_from_cart({"order_type": "pickup"})

    assert logged_in.cart.total_items() == 1
    assert logged_in.orders.state == "error"
    assert logged_in.orders.error == "Product 10 is out of stock"
    assert LOCK_KEY not in redis_client.data


def test_concurrent_submit_is_rejected(logged_in, http, redis_client):
    logged_in.cart.add(shoe())
    redis_client.data[LOCK_KEY] = "someone-else"

    with pytest.raises(RuntimeError, match="already in progress"):
        logged_in.orders.create_order_from_cart({"order_type": "pickup"})

    assert http.calls_to("POST", "/orders-create/") == []
    assert redis_client.data[LOCK_KEY] == "someone-else"


def test_fetch_order_history_paginated(logged_in, http):
    http.add(
        "GET",
        "/orders/",
        data={
            "count": 25,
            "next": "http://backend.test/api/orders/?page=3",
            "previous": "http://backend.test/api/orders/",
            "results": [{"order_id": 5, "status": "DELIVERED"}],
        },
    )
    page = logged_in.orders.fetch_order_history(2)

    assert page.count == 25
    assert page.next_page == 3
    assert page.previous_page is None
    assert page.results[0].id == "5"
    assert http.calls_to("GET", "/orders/")[-1]["params"] == {"page": 2}


def test_extract_page():
    assert extract_page("http://x/orders/?page=4&size=10") == 4
    assert extract_page("http://x/orders/") is None
    assert extract_page(None) is None


def test_login_loads_history_and_logout_clears_it(session, http):
    http.add("POST", "/auth/login/", data={"user": {"id": 1}, "token": "tok"})
    http.add("GET", "/orders/", data=[{"id": 1, "status": "pending"}])

    session.auth.login({"email": "a@b.c", "password": "x"})
    assert [o.id for o in session.orders.order_history] == ["1"]

    fetches = len(http.calls_to("GET", "/orders/"))
    session.auth.logout()
    assert session.orders.order_history == []
    assert session.orders.current_order is None
    assert len(http.calls_to("GET", "/orders/")) == fetches


def test_rate_order_validates_range(logged_in, http):
    with pytest.raises(ValueError):
        logged_in.orders.rate_order("12", 6)
    http.add("POST", "/orders/12/rate/", data={"ok": True})
    logged_in.orders.rate_order("12", 5, "Great")
    assert http.calls_to("POST", "/orders/12/rate/")[0]["json"] == {"rating": 5, "review": "Great"}


def test_cancel_order(logged_in, http):
    http.add("POST", "/orders/12/cancel/", data={"status": "cancelled"})
    assert logged_in.orders.cancel_order("12") == {"status": "cancelled"}


def test_lock_release_failure_keeps_created_order(logged_in, http, monkeypatch):
    logged_in.cart.add(shoe())
    http.add("POST", "/orders-create/", status=201, data=created())

    def broken_release(*args, **kwargs):
        raise RedisError("redis is down")

    monkeypatch.setattr(logged_in.orders.lock_service, "release_submit_lock", broken_release)

    order = logged_in.orders.create_order_from_cart({"order_type": "pickup"})

    assert order.id == "12"
    assert logged_in.orders.state == "success"
    assert logged_in.cart.is_empty()
