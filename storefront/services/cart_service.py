# storefront/services/cart_service.py
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List

from redis.exceptions import RedisError

from storefront.domain.schemas import CartItem
from storefront.repos.cart_repo import CartRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def make_item_id(product_id: Any, variant_id: Any = None) -> str:
    #produkt z wariantem dostaje klucz zlozony
    if variant_id is None or variant_id == "":
        return str(product_id)
    return f"{product_id}-{variant_id}"


def unit_price(item: CartItem) -> Decimal:
    try:
        price = Decimal(str(item.price))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return price if price.is_finite() else Decimal("0")


class CartManager:
    """
    Koszyk klienta trzymany w pamieci i zapisywany po kazdej zmianie.
    commands (add, remove, set_quantity, clear) zmieniaja stan
    query (total_items, total_price, snapshot) tylko odczyt
    """

    def __init__(self, repo: CartRepo):
        self.repo = repo
        self.items: List[CartItem] = []

    def hydrate(self) -> None:
        try:
            self.items = self.repo.load()
        except (RedisError, ValueError) as e:
            logger.error(f"Error loading cart from store: {e}")
            self.items = []

    #query - odczyt
    def snapshot(self) -> List[CartItem]:
        return [item.model_copy() for item in self.items]

    def find(self, item_id: str) -> CartItem | None:
        return next((i for i in self.items if i.id == item_id), None)

    def is_empty(self) -> bool:
        return not self.items

    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def total_price(self) -> Decimal:
        return sum((unit_price(i) * i.quantity for i in self.items), Decimal("0"))

    #commands
    def add(self, item: CartItem | Dict[str, Any]) -> List[CartItem]:
        if isinstance(item, dict):
            item = CartItem.model_validate(item)

        existing = self.find(item.id)
        if existing:
            logger.info(f"Item {item.id} already in cart, quantity {existing.quantity} -> {existing.quantity + 1}")
            existing.quantity += 1
        else:
            logger.info(f"Adding item {item.id} to cart")
            self.items.append(item.model_copy(update={"quantity": 1}))

        self._persist()
        return self.snapshot()

    def remove(self, item_id: str) -> List[CartItem]:
        self.items = [i for i in self.items if i.id != item_id]
        self._persist()
        return self.snapshot()

    def set_quantity(self, item_id: str, quantity: int) -> List[CartItem]:
        if quantity <= 0:
            return self.remove(item_id)

        item = self.find(item_id)
        if item:
            item.quantity = quantity
        self._persist()
        return self.snapshot()

    def clear(self) -> None:
        self.items = []
        try:
            self.repo.delete()
        except RedisError as e:
            logger.error(f"Error removing cart from store: {e}")

    def _persist(self) -> None:
        # stan w pamieci zostaje wazny nawet gdy zapis sie nie uda
        try:
            self.repo.save(self.items)
        except RedisError as e:
            logger.error(f"Error saving cart to store: {e}")
