# storefront/services/auth_service.py
from typing import Any, Callable, Dict, List, Tuple

from redis.exceptions import RedisError

from storefront.repos.auth_repo import AUTH_KEYS, AuthRepo
from storefront.services.backend_client import BackendClient, BackendError
from storefront.utils.settings import GOOGLE_EXCHANGE_TIMEOUT_SECONDS
from storefront.utils.tokens import token_expired
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _normalize_auth_response(response: Dict[str, Any]) -> Tuple[Dict[str, Any] | None, str | None, str | None]:
    # backend zwraca tokeny w roznych ksztaltach, zaleznie od endpointu
    tokens = response.get("tokens") if isinstance(response.get("tokens"), dict) else {}
    token = (
        tokens.get("access")
        or response.get("token")
        or response.get("access_token")
        or response.get("access")
        or response.get("key")
    )
    refresh = tokens.get("refresh") or response.get("refresh_token") or response.get("refresh")
    user = response.get("user") or response
    return user, token, refresh


class AuthManager:
    """
    Stan uwierzytelnienia klienta: { user, token, refresh_token }.
    Ładowany ze store przy starcie sesji, zmieniany przez login / register /
    wymianę tokenu Google / logout. Słuchacze dostają informację o każdym
    przejściu między zalogowanym a niezalogowanym stanem.
    """

    def __init__(self, repo: AuthRepo, backend: BackendClient):
        self.repo = repo
        self.backend = backend
        self.user: Dict[str, Any] | None = None
        self.token: str | None = None
        self.refresh_token: str | None = None
        self.error: str | None = None
        self._listeners: List[Callable[[bool], None]] = []

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user and self.token) and not token_expired(self.token)

    def subscribe(self, listener: Callable[[bool], None]) -> None:
        self._listeners.append(listener)

    def hydrate(self) -> None:
        try:
            user, token, refresh = self.repo.load()
        except RedisError as e:
            logger.error(f"Error loading auth state from store: {e}")
            user, token, refresh = None, None, None
        self._set_state(user, token, refresh)

    def handle_storage_change(self, key: str) -> None:
        """Inna karta / proces zmienił klucze auth, przeładuj stan."""
        if key in AUTH_KEYS:
            logger.info(f"Storage key {key} changed elsewhere, reloading auth state")
            self.hydrate()

    def login(self, credentials: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.backend.post("/auth/login/", credentials)
        except BackendError as e:
            #poprzedni stan zostaje bez zmian
            self.error = str(e) or "Login failed"
            logger.error(f"Login failed: {self.error}")
            raise
        return self._accept(response)

    def register(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.backend.post("/auth/register/", fields)
        except BackendError as e:
            self.error = str(e) or "Registration failed"
            logger.error(f"Registration failed: {self.error}")
            raise
        return self._accept(response)

    def google_login(self, id_token: str) -> Dict[str, Any]:
        """
        Wymiana Google ID tokenu na tokeny aplikacji, z ograniczonym czasem
        oczekiwania. Po udanej wymianie stan ustawia `google_login_success`.
        """
        try:
            response = self.backend.post(
                "/auth/google/",
                {"id_token": id_token},
                timeout=GOOGLE_EXCHANGE_TIMEOUT_SECONDS,
            )
        except BackendError as e:
            self.error = str(e) or "Google login failed"
            logger.error(f"Google token exchange failed: {self.error}")
            raise

        tokens = response.get("tokens") if isinstance(response, dict) else None
        if not isinstance(tokens, dict) or not tokens.get("access") or not response.get("user"):
            self.error = "Invalid auth data structure"
            raise ValueError(self.error)

        return self.google_login_success(
            {"user": response["user"], "token": tokens["access"], "refresh_token": tokens.get("refresh")}
        )

    def google_login_success(self, auth_data: Dict[str, Any]) -> Dict[str, Any]:
        # wymiana juz sie odbyla, bez dodatkowego wywolania sieci
        logger.info("Google login success, updating auth state")
        return self._accept(auth_data)

    def refresh_access_token(self) -> bool:
        if not self.refresh_token:
            logger.error("No refresh token available")
            return False

        try:
            response = self.backend.post("/auth/token/refresh/", {"refresh": self.refresh_token})
        except BackendError as e:
            logger.error(f"Token refresh failed: {e}")
            return False

        access = response.get("access") if isinstance(response, dict) else None
        if not access:
            logger.error("No access token in refresh response")
            return False

        self._store(lambda: self.repo.save_access_token(access))
        self._set_state(self.user, access, self.refresh_token)
        logger.info("Access token refreshed")
        return True

    def logout(self) -> None:
        token = self.token
        self._store(self.repo.clear)
        self._set_state(None, None, None)
        self.error = None
        logger.info("User logged out")

        if token:
            #powiadomienie backendu, porazka tylko w logach
            try:
                self.backend.post("/auth/logout/", token=token)
            except BackendError as e:
                logger.warning(f"Backend logout notification failed: {e}")

    def _accept(self, response: Dict[str, Any]) -> Dict[str, Any]:
        user, token, refresh = _normalize_auth_response(response)
        if not token:
            self.error = "Authentication response did not include a token"
            raise ValueError(self.error)

        self._store(lambda: self.repo.save(user, token, refresh))
        self.error = None
        self._set_state(user, token, refresh)
        logger.info(f"Authenticated user {user.get('id') if isinstance(user, dict) else None}")
        return {"user": user, "token": token, "refresh_token": refresh}

    def _store(self, write: Callable[[], None]) -> None:
        try:
            write()
        except RedisError as e:
            logger.error(f"Error writing auth state to store: {e}")

    def _set_state(self, user, token, refresh) -> None:
        before = (self.is_authenticated, (self.user or {}).get("id"))
        self.user, self.token, self.refresh_token = user, token, refresh
        after = (self.is_authenticated, (self.user or {}).get("id"))

        if before != after:
            for listener in self._listeners:
                listener(self.is_authenticated)
