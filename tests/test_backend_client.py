import pytest
import requests

from storefront.domain.filters import ProductQuery, parse_product_query
from storefront.services.backend_client import BackendClient, BackendError, error_message
from storefront.services.catalog_client import CatalogClient
from tests.conftest import BASE_URL, FakeResponse


@pytest.mark.parametrize(
    "response, expected",
    [
        (FakeResponse(400, {"detail": "Bad things"}), "Bad things"),
        (FakeResponse(400, {"message": "Nope"}), "Nope"),
        (FakeResponse(400, {"error": "Broken"}), "Broken"),
        (FakeResponse(400, {"email": ["This field is required."]}), '{"email": ["This field is required."]}'),
        (FakeResponse(502, text="Bad Gateway"), "Bad Gateway"),
        (FakeResponse(500, text=""), "HTTP 500"),
    ],
)
def test_error_message(response, expected):
    assert error_message(response) == expected


def client(http, token=None):
    return BackendClient(base_url=BASE_URL, session=http, token_provider=lambda: token)


def test_bearer_header_only_with_token(http):
    http.add("GET", "/orders/", data=[])
    client(http).get("/orders/")
    client(http, "tok").get("/orders/")
    assert "Authorization" not in http.calls[0]["headers"]
    assert http.calls[1]["headers"]["Authorization"] == "Bearer tok"
    assert http.calls[1]["headers"]["Content-Type"] == "application/json"


def test_non_2xx_raises_backend_error(http):
    http.add("GET", "/orders/1/", status=404, data={"detail": "Not found."})
    with pytest.raises(BackendError) as exc:
        client(http).get("/orders/1/")
    assert exc.value.status_code == 404
    assert str(exc.value) == "Not found."
    assert exc.value.payload == {"detail": "Not found."}


def test_no_content_is_empty_dict(http):
    http.add("POST", "/auth/logout/", status=204)
    assert client(http).post("/auth/logout/") == {}


def test_network_error_is_wrapped(http):
    http.add_sequence("GET", "/orders/", [requests.ConnectionError("connection refused")])
    with pytest.raises(BackendError, match="Network error"):
        client(http).get("/orders/")
    assert len(http.calls) == 1


def test_default_timeout(http):
    http.add("GET", "/orders/", data=[])
    client(http).get("/orders/")
    assert http.calls[0]["timeout"] == 10


def test_catalog_retries_transport_errors(http):
    http.add_sequence(
        "GET",
        "/categories/tree/",
        [requests.ConnectionError("reset"), FakeResponse(200, [{"slug": "shoes"}])],
    )
    catalog = CatalogClient(client(http))
    assert catalog.get_categories() == [{"slug": "shoes"}]
    assert len(http.calls) == 2


def test_catalog_does_not_retry_http_errors(http):
    http.add("GET", "/products/missing/", status=404, data={"detail": "Not found."})
    with pytest.raises(BackendError):
        CatalogClient(client(http)).get_product("missing")
    assert len(http.calls) == 1


def test_catalog_product_listing_params(http):
    http.add("GET", "/products/", data={"results": []})
    query = parse_product_query([("page", "2"), ("size", "42"), ("waterproof", "true"), ("ordering", "-price")])
    CatalogClient(client(http)).get_products(query, category="shoes")
    assert http.calls[0]["params"] == {
        "page": "2",
        "category": "shoes",
        "ordering": "-price",
        "size": "42",
        "waterproof": "true",
    }


def test_catalog_search(http):
    http.add("GET", "/products/search/", data={"results": []})
    CatalogClient(client(http)).search_products("boots", ProductQuery())
    assert http.calls[0]["params"] == {"page": "1", "q": "boots"}


def test_non_json_success_body_raises_backend_error(http):
    http.add("GET", "/orders/", status=200, text="<html>ok</html>")
    with pytest.raises(BackendError, match="Invalid JSON response") as exc:
        client(http).get("/orders/")
    assert exc.value.status_code == 200
    assert exc.value.payload == "<html>ok</html>"
