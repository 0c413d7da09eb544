# storefront/api/__init__.py
from contextlib import asynccontextmanager

from fastapi import FastAPI

from storefront.api.routers import auth, cart, catalog, health, orders, payments
from storefront.services.session_registry import SessionRegistry
from storefront.services.storage_events import StorageEventListener
from storefront.utils.settings import STORAGE_EVENTS_ENABLED
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(registry: SessionRegistry | None = None, storage_events: bool = STORAGE_EVENTS_ENABLED) -> FastAPI:
    registry = registry or SessionRegistry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        listener = StorageEventListener(registry) if storage_events else None
        if listener:
            listener.start()
        yield
        if listener:
            listener.stop()

    app = FastAPI(title="Storefront Session Service", version="1.0.0", lifespan=lifespan)
    app.state.registry = registry

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(cart.router)
    app.include_router(orders.router)
    app.include_router(payments.router)
    app.include_router(catalog.router)

    logger.info("Storefront session service configured")
    return app
