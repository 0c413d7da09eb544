# storefront/services/order_service.py
import re
import uuid
from typing import Any, Dict, List

from redis.exceptions import RedisError

from storefront.domain.schemas import Order, OrderDraft, OrderHistoryPage
from storefront.services.auth_service import AuthManager
from storefront.services.backend_client import BackendClient, BackendError
from storefront.services.cart_service import CartManager, unit_price
from storefront.services.lock_service import LockService
from storefront.utils.settings import SUBMIT_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SUBMIT_ACTION = "checkout"


def extract_page(url: str | None) -> int | None:
    if not url:
        return None
    match = re.search(r"[?&]page=(\d+)", url)
    return int(match.group(1)) if match else None


def _unwrap_order(data: Any) -> Dict[str, Any]:
    # backend zwraca {order: {...}} albo samo zamowienie
    if isinstance(data, dict) and isinstance(data.get("order"), dict):
        return data["order"]
    return data


class OrderOrchestrator:
    """
    Serwis odpowiedzialny za domenę zamówień klienta.

    Stan wysyłki formularza: idle -> submitting -> success | error.
    Koszyk czyszczony jest dopiero po potwierdzeniu zamówienia przez backend,
    nigdy z wyprzedzeniem. Brak automatycznych ponowień.
    """

    def __init__(
        self,
        client_id: str,
        cart: CartManager,
        auth: AuthManager,
        backend: BackendClient,
        lock_service: LockService,
    ):
        self.client_id = client_id
        self.cart = cart
        self.auth = auth
        self.backend = backend
        self.lock_service = lock_service

        self.state = "idle"
        self.error: str | None = None
        self.current_order: Order | None = None
        self.order_history: List[Order] = []

        auth.subscribe(self.on_auth_change)

    def create_order_from_cart(self, draft: OrderDraft | Dict[str, Any]) -> Order:
        """
        Use Case: Tworzenie zamówienia z koszyka.

        1. Walidacja bez sieci: zalogowany klient, niepusty koszyk, adres dla dostawy
        2. Blokada przed podwójną wysyłką
        3. POST /orders-create/
        4. Zapamiętanie zamówienia i wyczyszczenie koszyka
        """
        if not self.auth.is_authenticated:
            raise PermissionError("Authentication required to place an order")

        if self.cart.is_empty():
            raise ValueError("Cannot create order: cart is empty")

        if not isinstance(draft, OrderDraft):
            # ValidationError (ValueError) dla dostawy bez adresu
            draft = OrderDraft.model_validate(draft)

        owner = uuid.uuid4().hex
        if not self.lock_service.acquire_submit_lock(
            self.client_id, SUBMIT_ACTION, owner, SUBMIT_LOCK_TTL_SECONDS
        ):
            raise RuntimeError("Order submission already in progress")

        self.state = "submitting"
        self.error = None
        try:
            body = self._build_request(draft)
            logger.info(f"Creating order for client {self.client_id} with {len(body['items'])} items")

            try:
                created = self.backend.post("/orders-create/", body)
                order = Order.model_validate(_unwrap_order(created))
            except (BackendError, ValueError) as e:
                #koszyk zostaje nietkniety, formularz do ponownej wysylki
                self.state = "error"
                self.error = str(e) or "Failed to create order"
                logger.error(f"Order creation failed: {self.error}")
                raise

            self.current_order = order
            self.cart.clear()
            self.state = "success"
            logger.info(f"Order {order.id} created, cart cleared")
            return order
        finally:
            try:
                self.lock_service.release_submit_lock(self.client_id, SUBMIT_ACTION, owner)
            except RedisError as e:
                # lock i tak wygasnie po SUBMIT_LOCK_TTL_SECONDS
                logger.error(f"Failed to release submit lock for client {self.client_id}: {e}")

    def fetch_order(self, order_id: str) -> Order:
        """
        Use Case: Pobranie zamówienia (Query).
        """
        self._require_auth()
        try:
            order = Order.model_validate(_unwrap_order(self.backend.get(f"/orders/{order_id}/")))
        except BackendError as e:
            self.error = str(e) or "Failed to fetch order"
            raise

        self.current_order = order
        return order

    def fetch_order_history(self, page: int = 1) -> OrderHistoryPage:
        self._require_auth()
        params = {"page": page} if page > 1 else None
        try:
            data = self.backend.get("/orders/", params=params)
        except BackendError as e:
            self.error = str(e) or "Failed to fetch order history"
            self.order_history = []
            raise

        if isinstance(data, list):
            history = OrderHistoryPage(count=len(data), results=[Order.model_validate(o) for o in data])
        else:
            results = [Order.model_validate(o) for o in data.get("results") or []]
            history = OrderHistoryPage(
                count=data.get("count", len(results)),
                results=results,
                next_page=extract_page(data.get("next")),
                previous_page=extract_page(data.get("previous")),
            )

        self.error = None
        self.order_history = history.results
        return history

    def cancel_order(self, order_id: str) -> Dict[str, Any]:
        self._require_auth()
        logger.info(f"Cancelling order {order_id}")
        return self.backend.post(f"/orders/{order_id}/cancel/")

    def rate_order(self, order_id: str, rating: int, review: str = "") -> Dict[str, Any]:
        self._require_auth()
        if not 1 <= rating <= 5:
            raise ValueError("Rating must be between 1 and 5")
        logger.info(f"Rating order {order_id}: {rating}/5")
        return self.backend.post(f"/orders/{order_id}/rate/", {"rating": rating, "review": review})

    def clear_order_state(self) -> None:
        self.current_order = None
        self.error = None
        self.state = "idle"

    def on_auth_change(self, is_authenticated: bool) -> None:
        if not is_authenticated:
            self.clear_order_state()
            self.order_history = []
            return

        try:
            self.fetch_order_history()
        except (BackendError, ValueError) as e:
            logger.error(f"Error fetching order history after login: {e}")

    def _require_auth(self) -> None:
        if not self.auth.is_authenticated:
            raise PermissionError("Authentication required")

    def _build_request(self, draft: OrderDraft) -> Dict[str, Any]:
        items = self.cart.snapshot()
        body: Dict[str, Any] = {
            "items": [
                {
                    "product_id": item.product_id if item.product_id is not None else item.id,
                    "variant_id": item.variant_id,
                    "quantity": item.quantity,
                    "price": float(unit_price(item)),
                }
                for item in items
            ],
            "total_amount": float(self.cart.total_price()),
        }
        body.update(draft.model_dump(mode="json", exclude_none=True))
        return body
