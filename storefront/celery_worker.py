# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski importowane jawnie, zeby celery je zarejestrowal
celery_app.conf.imports = (
    "storefront.tasks.expire",
)

celery_app.conf.beat_schedule = {
    "expire-pending-payments-every-minute": {
        "task": "storefront.tasks.expire.expire_pending_payments_task",
        "schedule": 60.0,  # co 60 sekund
    },
}

celery_app.conf.timezone = "UTC"
