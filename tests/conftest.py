import json
from fnmatch import fnmatch

import pytest
from redis.exceptions import RedisError

from storefront.services.backend_client import BackendClient
from storefront.services.session_registry import SessionRegistry

BASE_URL = "http://backend.test/api"


class FakeRedis:
    """Redis w pamieci, tylko komendy uzywane przez serwis."""

    def __init__(self):
        self.data = {}
        self.published = []
        self.fail_writes = False

    def get(self, key):
        return self.data.get(key)

    def set(self, name, value, nx=False, ex=None):
        if self.fail_writes:
            raise RedisError("redis is down")
        if nx and name in self.data:
            return None
        self.data[name] = value
        return True

    def delete(self, *keys):
        if self.fail_writes:
            raise RedisError("redis is down")
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def eval(self, script, numkeys, key, owner):
        if self.data.get(key) == owner:
            del self.data[key]
            return 1
        return 0

    def publish(self, channel, message):
        self.published.append((channel, message))
        return 0

    def scan_iter(self, match=None):
        return [k for k in list(self.data) if match is None or fnmatch(k, match)]


class FakeResponse:
    def __init__(self, status_code=200, data=None, text=None):
        self.status_code = status_code
        self._data = data
        if text is None:
            text = json.dumps(data) if data is not None else ""
        self.text = text
        self.content = text.encode()
        self.ok = status_code < 400
        self.reason = ""

    def json(self):
        if self._data is not None:
            return self._data
        return json.loads(self.text)


class FakeHttp:
    """
    Zastepuje requests.Session. Odpowiedzi rejestrowane per (metoda, sciezka);
    lista odpowiedzi jest zuzywana po kolei, wyjatek jest rzucany.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, status=200, data=None, text=None):
        self.routes[(method, path)] = FakeResponse(status, data, text)

    def add_sequence(self, method, path, responses):
        self.routes[(method, path)] = list(responses)

    def calls_to(self, method, path):
        return [c for c in self.calls if c["method"] == method and c["path"] == path]

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        path = url[len(BASE_URL):]
        self.calls.append(
            {
                "method": method,
                "path": path,
                "headers": headers or {},
                "timeout": timeout,
                "json": kwargs.get("json"),
                "params": kwargs.get("params"),
            }
        )
        route = self.routes.get((method, path))
        if isinstance(route, list):
            route = route.pop(0) if len(route) > 1 else route[0]
        if route is None:
            return FakeResponse(404, {"detail": "Not found."})
        if isinstance(route, Exception):
            raise route
        return route


def make_registry(redis_client, http, **kwargs):
    return SessionRegistry(
        redis_client=redis_client,
        backend_factory=lambda provider: BackendClient(base_url=BASE_URL, session=http, token_provider=provider),
        **kwargs,
    )


USER = {"id": 7, "email": "jan@example.com", "first_name": "Jan"}


def login_response(access="access-1", refresh="refresh-1"):
    return {"user": USER, "tokens": {"access": access, "refresh": refresh}}


@pytest.fixture
def redis_client():
    return FakeRedis()


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def registry(redis_client, http):
    return make_registry(redis_client, http)


@pytest.fixture
def session(registry):
    return registry.get("client-1")


@pytest.fixture
def logged_in(session, http):
    http.add("POST", "/auth/login/", data=login_response())
    http.add("GET", "/orders/", data=[])
    session.auth.login({"email": "jan@example.com", "password": "secret"})
    return session


def shoe(**overrides):
    item = {"id": "10", "name": "Trail shoe", "price": "120.00", "product_id": 10}
    item.update(overrides)
    return item
