# storefront/services/backend_client.py
import json
from typing import Any, Callable, Dict

import requests
from requests import RequestException

from storefront.utils.settings import API_BASE_URL, API_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class BackendError(RuntimeError):
    """Znormalizowany blad zdalnego wywolania (HTTP != 2xx albo blad sieci)."""

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


def error_message(response: requests.Response) -> str:
    """
    Wiadomosc bledu z odpowiedzi:
    detail / message / error z JSONa, inaczej caly JSON, inaczej surowy tekst,
    a na koncu "HTTP <status>".
    """
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        for field in ("detail", "message", "error"):
            if data.get(field):
                return str(data[field])
    if data:
        return json.dumps(data)

    text = (response.text or "").strip()
    if text:
        return text
    return f"HTTP {response.status_code}"


class BackendClient:
    """
    Klient REST backendu sklepu.
    - Bearer token gdy token_provider cos zwraca, inaczej same ciasteczka sesji
    - brak automatycznych ponowien
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = API_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
        token_provider: Callable[[], str | None] | None = None,
    ):
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.timeout = timeout
        # sesja trzyma ciasteczka backendu (odpowiednik credentials: include)
        self.session = session or requests.Session()
        self.token_provider = token_provider

    def headers(self, token: str | None = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token is None and self.token_provider:
            token = self.token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def send(
        self, method: str, path: str, timeout: float | None = None, token: str | None = None, **kwargs
    ) -> requests.Response:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.info(f"BackendClient {method} {url}")
        return self.session.request(
            method,
            url,
            headers=self.headers(token),
            timeout=timeout or self.timeout,
            **kwargs,
        )

    def handle_response(self, response: requests.Response) -> Any:
        if not response.ok:
            message = error_message(response)
            logger.error(f"Backend responded {response.status_code}: {message}")
            try:
                payload = response.json()
            except ValueError:
                payload = None
            raise BackendError(message, status_code=response.status_code, payload=payload)

        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            logger.error(f"Backend responded {response.status_code} with a non-JSON body")
            raise BackendError("Invalid JSON response", status_code=response.status_code, payload=response.text)

    def request(
        self, method: str, path: str, timeout: float | None = None, token: str | None = None, **kwargs
    ) -> Any:
        try:
            response = self.send(method, path, timeout=timeout, token=token, **kwargs)
        except RequestException as e:
            logger.error(f"Network error on {method} {path}: {e}")
            raise BackendError(f"Network error: {e}") from e
        return self.handle_response(response)

    def get(self, path: str, params: Dict[str, Any] | None = None, **kwargs) -> Any:
        return self.request("GET", path, params=params, **kwargs)

    def post(self, path: str, payload: Any = None, **kwargs) -> Any:
        return self.request("POST", path, json=payload, **kwargs)

    def patch(self, path: str, payload: Any = None, **kwargs) -> Any:
        return self.request("PATCH", path, json=payload, **kwargs)
