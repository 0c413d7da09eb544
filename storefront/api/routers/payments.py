# storefront/api/routers/payments.py
from fastapi import APIRouter, Depends, Request

from storefront.api.deps import get_origin, get_session, to_http_error
from storefront.domain.schemas import CheckoutSessionIn, PaymentOutcome
from storefront.services.session_registry import ClientSession

router = APIRouter(prefix="/payment", tags=["payment"])


@router.post("/checkout")
def create_checkout(
    payload: CheckoutSessionIn,
    session: ClientSession = Depends(get_session),
    origin: str = Depends(get_origin),
):
    try:
        order = session.orders.fetch_order(payload.order_id)
        pending, checkout_url = session.payments.start_checkout(order, origin)
    except (PermissionError, ValueError, RuntimeError) as e:
        raise to_http_error(e)
    return {"checkout_url": checkout_url, "payment": pending}


@router.get("/success", response_model=PaymentOutcome)
def payment_success(request: Request, session: ClientSession = Depends(get_session)):
    """
    Powrót ze Stripe. Wynik zawsze 200, strona do pokazania jest w `page`.
    """
    return session.payments.verify_return(request.query_params)


@router.get("/cancel")
def payment_cancel(session: ClientSession = Depends(get_session)):
    return session.payments.cancel_info()


@router.get("/status/{payment_id}")
def payment_status(payment_id: str, session: ClientSession = Depends(get_session)):
    try:
        return session.payments.get_payment_status(payment_id)
    except RuntimeError as e:
        raise to_http_error(e)


@router.post("/{payment_id}/cancel")
def cancel_payment(payment_id: str, session: ClientSession = Depends(get_session)):
    try:
        return session.payments.cancel_payment(payment_id)
    except RuntimeError as e:
        raise to_http_error(e)
