# storefront/services/catalog_client.py
from typing import Any, Dict

from requests import RequestException

from storefront.domain.filters import ProductQuery, to_api_params
from storefront.services.backend_client import BackendClient, BackendError
from storefront.utils.retry import http_retry
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogClient:
    """
    Odczyty katalogu (kategorie, produkty). To idempotentne GETy poza
    przeplywem checkoutu, wiec bledy transportu sa ponawiane.
    """

    def __init__(self, backend: BackendClient):
        self.backend = backend

    def _get(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        try:
            response = self._send_with_retry(path, params)
        except RequestException as e:
            raise BackendError(f"Network error: {e}") from e
        return self.backend.handle_response(response)

    @http_retry()
    def _send_with_retry(self, path: str, params: Dict[str, Any] | None):
        return self.backend.send("GET", path, params=params)

    def get_categories(self) -> Any:
        return self._get("/categories/tree/")

    def get_category(self, slug: str) -> Any:
        return self._get(f"/categories/{slug}/")

    def get_category_filters(self, slug: str) -> Any:
        return self._get(f"/categories/{slug}/filters/")

    def get_products(self, query: ProductQuery, category: str | None = None) -> Any:
        params = to_api_params(query, category)
        logger.info(f"Loading products with params {params}")
        return self._get("/products/", params=params)

    def get_product(self, slug: str) -> Any:
        return self._get(f"/products/{slug}/")

    def search_products(self, text: str, query: ProductQuery | None = None) -> Any:
        params = to_api_params(query or ProductQuery())
        params["q"] = text
        return self._get("/products/search/", params=params)
