# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.api.deps import get_origin, get_session, to_http_error
from storefront.domain.schemas import CheckoutOut, Order, OrderDraft, OrderHistoryPage, RateOrderIn
from storefront.services.session_registry import ClientSession

router = APIRouter(tags=["orders"])


@router.post("/orders", response_model=Order, status_code=201)
def create_order(payload: OrderDraft, session: ClientSession = Depends(get_session)):
    """
    Tworzy zamówienie z koszyka klienta. Po sukcesie koszyk jest pusty.
    """
    try:
        return session.orders.create_order_from_cart(payload)
    except (PermissionError, ValueError, RuntimeError) as e:
        raise to_http_error(e)


@router.post("/checkout", response_model=CheckoutOut, status_code=201)
def checkout(
    payload: OrderDraft,
    session: ClientSession = Depends(get_session),
    origin: str = Depends(get_origin),
):
    """
    Zamówienie z koszyka + sesja płatności. Zwraca checkout_url,
    przekierowanie przeglądarki robi klient.
    """
    try:
        order = session.orders.create_order_from_cart(payload)
    except (PermissionError, ValueError, RuntimeError) as e:
        raise to_http_error(e)

    try:
        pending, checkout_url = session.payments.start_checkout(order, origin)
    except RuntimeError as e:
        # zamowienie juz istnieje, klient ponawia platnosc przez /payment/checkout
        error = to_http_error(e)
        raise HTTPException(
            status_code=error.status_code,
            detail={"message": str(e), "order_id": order.id, "retry_url": "/payment/checkout"},
        )
    return CheckoutOut(order=order, checkout_url=checkout_url, payment=pending)


@router.get("/orders", response_model=OrderHistoryPage)
def list_orders(page: int = Query(1, ge=1), session: ClientSession = Depends(get_session)):
    try:
        return session.orders.fetch_order_history(page)
    except (PermissionError, ValueError, RuntimeError) as e:
        raise to_http_error(e)


@router.get("/orders/{order_id}", response_model=Order)
def get_order(order_id: str, session: ClientSession = Depends(get_session)):
    try:
        return session.orders.fetch_order(order_id)
    except (PermissionError, ValueError, RuntimeError) as e:
        raise to_http_error(e)


@router.post("/orders/{order_id}/cancel")
def cancel_order(order_id: str, session: ClientSession = Depends(get_session)):
    try:
        return session.orders.cancel_order(order_id)
    except (PermissionError, ValueError, RuntimeError) as e:
        raise to_http_error(e)


@router.post("/orders/{order_id}/rate")
def rate_order(order_id: str, payload: RateOrderIn, session: ClientSession = Depends(get_session)):
    try:
        return session.orders.rate_order(order_id, payload.rating, payload.review)
    except (PermissionError, ValueError, RuntimeError) as e:
        raise to_http_error(e)
