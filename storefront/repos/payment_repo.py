# storefront/repos/payment_repo.py
from storefront.domain.schemas import PendingPayment
from storefront.repos.client_store import ClientStore

PENDING_PAYMENT_KEY = "pendingPayment"


class PaymentRepo:
    def __init__(self, store: ClientStore):
        self.store = store

    def get_pending(self) -> PendingPayment | None:
        data = self.store.get_json(PENDING_PAYMENT_KEY)
        if not isinstance(data, dict):
            return None
        return PendingPayment.model_validate(data)

    def save_pending(self, payment: PendingPayment) -> None:
        self.store.set_json(PENDING_PAYMENT_KEY, payment.model_dump(mode="json"))

    def delete_pending(self) -> None:
        self.store.delete(PENDING_PAYMENT_KEY)
