# storefront/services/payment_service.py
import time
from typing import Any, Dict, Mapping, Tuple

from redis.exceptions import RedisError

from storefront.domain.schemas import Order, PaymentOutcome, PendingPayment
from storefront.repos.payment_repo import PaymentRepo
from storefront.services.backend_client import BackendClient, BackendError
from storefront.services.cart_service import CartManager
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

RETRY_URL = "/checkout"


def is_payment_expired(expires_at: float | None, now: float | None = None) -> bool:
    if not expires_at:
        return True
    return (now if now is not None else time.time()) > expires_at


class PaymentBridge:
    """
    Most do hostowanej płatności Stripe.

    - przed przekierowaniem: sesja płatności + zapis PendingPayment
    - po powrocie: weryfikacja sesji i jeden z trzech wyników
      success / success_unverified / failed
    Koszyk czyszczony jest dopiero po pozytywnej weryfikacji (albo w jawnym
    trybie success_unverified), nigdy przed przekierowaniem.
    """

    def __init__(self, repo: PaymentRepo, cart: CartManager, backend: BackendClient):
        self.repo = repo
        self.cart = cart
        self.backend = backend
        self.status = "idle"
        self.error: str | None = None

    def create_checkout_session(self, order_id: str, origin: str) -> Dict[str, Any]:
        origin = origin.rstrip("/")
        body = {
            "order_id": order_id,
            "payment_method": "stripe",
            "success_url": f"{origin}/payment/success",
            "cancel_url": f"{origin}/payment/cancel",
        }
        logger.info(f"Creating checkout session for order {order_id}")
        data = self.backend.post("/payment/checkout/create/", body)

        if not isinstance(data, dict) or not data.get("checkout_url"):
            logger.error(f"Missing checkout_url in response: {data}")
            raise BackendError("Payment session created but no checkout URL received", payload=data)
        return data

    def start_checkout(self, order: Order, origin: str) -> Tuple[PendingPayment, str]:
        """Tworzy sesję i zapisuje PendingPayment. Przekierowanie robi wywołujący."""
        data = self.create_checkout_session(order.id, origin)

        pending = PendingPayment(
            payment_id=data.get("payment_id"),
            session_id=data.get("session_id"),
            order_id=order.id,
            order_number=order.order_number,
            total_amount=order.total_amount,
            expires_at=data.get("expires_at"),
            timestamp=time.time(),
        )
        try:
            self.repo.save_pending(pending)
        except RedisError as e:
            #bez zapisu weryfikacja po powrocie i tak ma session_id z URLa
            logger.error(f"Failed to store pending payment: {e}")
        return pending, data["checkout_url"]

    def pending_payment(self) -> PendingPayment | None:
        try:
            return self.repo.get_pending()
        except (RedisError, ValueError) as e:
            logger.error(f"Failed to read pending payment: {e}")
            return None

    def verify_payment(self, session_id: str, order_id: str) -> Dict[str, Any]:
        logger.info(f"Verifying payment session {session_id} for order {order_id}")
        return self.backend.post(
            "/payment/checkout/verify/",
            {"session_id": session_id, "order_id": order_id},
        )

    def verify_return(self, query: Mapping[str, str]) -> PaymentOutcome:
        """
        Use Case: powrót ze strony płatności.

        session_id z query stringa, inaczej z PendingPayment; order_id z
        PendingPayment (albo z query stringa). Oba dostępne -> weryfikacja.
        Brak identyfikatorów przy success=true -> success_unverified.
        """
        pending = self.pending_payment()
        session_id = query.get("session_id") or (pending.session_id if pending else None)
        order_id = (pending.order_id if pending else None) or query.get("order_id")

        if session_id and order_id:
            try:
                result = self.verify_payment(session_id, order_id)
            except BackendError as e:
                #koszyk i PendingPayment zostaja, klient moze sprobowac ponownie
                self.status = "failed"
                self.error = str(e) or "Payment verification failed"
                logger.error(f"Payment verification failed: {self.error}")
                return PaymentOutcome(
                    status="failed",
                    page="verification-required",
                    payment=pending,
                    error=self.error,
                )

            self.cart.clear()
            self._drop_pending()
            self.status = "success"
            self.error = None
            logger.info(f"Payment for order {order_id} verified")
            return PaymentOutcome(
                status="success",
                verified=True,
                page="success",
                payment=pending,
                verification=result if isinstance(result, dict) else None,
            )

        if query.get("success") == "true" and (session_id or order_id):
            # sukces tylko na podstawie przekierowania, bez potwierdzenia backendu
            logger.warning(
                f"Payment success accepted from redirect only (session={session_id}, order={order_id})"
            )
            self.cart.clear()
            self.status = "success_unverified"
            self.error = None
            return PaymentOutcome(status="success_unverified", page="success", payment=pending)

        self.status = "failed"
        self.error = "No payment information found"
        logger.warning("Payment return without any payment information")
        return PaymentOutcome(status="failed", page="verification-required", payment=pending, error=self.error)

    def cancel_info(self) -> Dict[str, Any]:
        """Strona anulowania: tylko odczyt, nic nie jest czyszczone."""
        return {"payment": self.pending_payment(), "retry_url": RETRY_URL}

    def get_payment_status(self, payment_id: str) -> Dict[str, Any]:
        return self.backend.get(f"/payment/status/{payment_id}/")

    def cancel_payment(self, payment_id: str) -> Dict[str, Any]:
        logger.info(f"Cancelling payment {payment_id}")
        return self.backend.post(f"/payment/cancel/{payment_id}/")

    def _drop_pending(self) -> None:
        try:
            self.repo.delete_pending()
        except RedisError as e:
            logger.error(f"Failed to delete pending payment: {e}")
