# storefront/repos/cart_repo.py
from typing import List

from storefront.domain.schemas import CartItem
from storefront.repos.client_store import ClientStore

CART_KEY = "shopping-cart"


class CartRepo:
    def __init__(self, store: ClientStore):
        self.store = store

    def load(self) -> List[CartItem]:
        data = self.store.get_json(CART_KEY)
        if not isinstance(data, list):
            return []
        return [CartItem.model_validate(item) for item in data]

    def save(self, items: List[CartItem]) -> None:
        self.store.set_json(CART_KEY, [item.model_dump(mode="json") for item in items])

    def delete(self) -> None:
        self.store.delete(CART_KEY)
