# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class CartItem(BaseModel):
    """Pozycja koszyka. `id` to klucz produktu albo produkt+wariant."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    # cena tak jak przyszla z katalogu, nienumeryczna liczy sie jako 0
    price: Decimal | str | None = None
    quantity: int = Field(default=1, ge=1)
    product_id: int | str | None = None
    variant_id: int | str | None = None
    image: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class CartItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int | str
    variant_id: int | str | None = None
    name: str = ""
    price: Decimal | str | None = None
    image: str | None = None


class QuantityIn(BaseModel):
    quantity: int


class CartOut(BaseModel):
    items: List[CartItem]
    total_items: int
    total_price: Decimal


class DeliveryAddress(BaseModel):
    model_config = ConfigDict(extra="allow")

    address_line_1: str = Field(..., min_length=1)
    address_line_2: str | None = None
    city: str = Field(..., min_length=1)
    state: str | None = None
    postal_code: str | None = None


class OrderDraft(BaseModel):
    """
    Formularz zamówienia budowany przy checkout, nie jest nigdzie zapisywany.
    Adres dostawy jest wymagany wtedy i tylko wtedy, gdy order_type = delivery.
    """

    order_type: Literal["delivery", "pickup"] = "delivery"
    guest_name: str | None = None
    guest_email: str | None = None
    guest_phone: str | None = None
    delivery_address: DeliveryAddress | None = None
    special_instructions: str = ""
    tip_amount: Decimal = Field(default=Decimal("0.00"), ge=0)

    @model_validator(mode="after")
    def _address_for_delivery(self):
        if self.order_type == "delivery" and self.delivery_address is None:
            raise ValueError("Delivery address is required for delivery orders")
        if self.order_type == "pickup":
            self.delivery_address = None
        return self


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Order(BaseModel):
    """Zamówienie w kształcie zwracanym przez backend (ostatnio pobrana kopia)."""

    model_config = ConfigDict(extra="allow")

    id: str
    order_number: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    total_amount: Decimal | None = None
    items: List[Dict[str, Any]] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("id") is None and data.get("order_id") is not None:
            data["id"] = data["order_id"]
        if data.get("id") is not None:
            data["id"] = str(data["id"])
        if data.get("order_number") is not None:
            data["order_number"] = str(data["order_number"])
        if isinstance(data.get("status"), str):
            data["status"] = data["status"].lower()
        return data


class OrderHistoryPage(BaseModel):
    count: int
    results: List[Order]
    next_page: int | None = None
    previous_page: int | None = None


class RateOrderIn(BaseModel):
    rating: int
    review: str = ""


class CheckoutSessionIn(BaseModel):
    order_id: str


class PendingPayment(BaseModel):
    """Lokalny, niepotwierdzony rekord łączący sesję płatności z zamówieniem."""

    model_config = ConfigDict(extra="allow")

    payment_id: str | None = None
    session_id: str | None = None
    order_id: str | None = None
    order_number: str | None = None
    total_amount: Decimal | None = None
    expires_at: float | None = None
    timestamp: float | None = None

    @field_validator("payment_id", "session_id", "order_id", "order_number", mode="before")
    @classmethod
    def _ids_as_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class PaymentOutcome(BaseModel):
    status: Literal["success", "success_unverified", "failed"]
    verified: bool = False
    page: Literal["success", "verification-required"]
    payment: PendingPayment | None = None
    verification: Dict[str, Any] | None = None
    error: str | None = None


class CheckoutOut(BaseModel):
    order: Order
    checkout_url: str
    payment: PendingPayment


class LoginIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: str
    password: str


class RegisterIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None


class GoogleLoginIn(BaseModel):
    id_token: str = Field(..., min_length=1)


class AuthSession(BaseModel):
    """Stan uwierzytelnienia klienta (bez samych tokenów na zewnątrz)."""

    is_authenticated: bool
    user: Dict[str, Any] | None = None
