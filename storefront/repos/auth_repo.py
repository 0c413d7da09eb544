# storefront/repos/auth_repo.py
from typing import Any, Dict, Tuple

from storefront.repos.client_store import ClientStore

AUTH_TOKEN_KEY = "auth_token"
ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
USER_DATA_KEY = "user_data"

AUTH_KEYS = (AUTH_TOKEN_KEY, ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_DATA_KEY)


class AuthRepo:
    def __init__(self, store: ClientStore):
        self.store = store

    def load(self) -> Tuple[Dict[str, Any] | None, str | None, str | None]:
        user = self.store.get_json(USER_DATA_KEY)
        if not isinstance(user, dict):
            user = None
        token = self.store.get(ACCESS_TOKEN_KEY) or self.store.get(AUTH_TOKEN_KEY)
        refresh = self.store.get(REFRESH_TOKEN_KEY)
        return user, token, refresh

    def save(self, user: Dict[str, Any] | None, token: str, refresh_token: str | None = None) -> None:
        # auth_token trzymany obok access_token dla zgodnosci
        self.store.set(ACCESS_TOKEN_KEY, token)
        self.store.set(AUTH_TOKEN_KEY, token)
        if refresh_token:
            self.store.set(REFRESH_TOKEN_KEY, refresh_token)
        if user is not None:
            self.store.set_json(USER_DATA_KEY, user)

    def save_access_token(self, token: str) -> None:
        self.store.set(ACCESS_TOKEN_KEY, token)
        self.store.set(AUTH_TOKEN_KEY, token)

    def clear(self) -> None:
        self.store.delete(*AUTH_KEYS)
