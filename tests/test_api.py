import json
import httpx
import pytest
from fastapi.testclient import TestClient

from voltedge.api import dependencies
from voltedge.api.dependencies import get_backend_client
from voltedge.core.backend_client import BackendClient
from voltedge.core.config import settings
from voltedge.db.models import CartSlot
from voltedge.main import app


PRODUCTS = {
    "lap-1": {
        "id": "lap-1",
        "name": "VoltEdge Pro Laptop",
        "description": "14-inch ultrabook",
        "price": 1299.99,
        "stock": 12,
        "sku": "VE-LAP-14",
        "lowStockThreshold": 3,
        "categoryId": "cat-laptops",
        "images": [{"id": "img-1", "url": "/images/laptop.png", "altText": "Laptop"}],
        "createdAt": "2025-01-01T00:00:00Z",
    },
    "hp-1": {
        "id": "hp-1",
        "name": "VoltEdge Noise-Cancelling Headphones",
        "description": None,
        "price": "249.99",
        "stock": 40,
        "sku": "VE-HP-NC",
        "lowStockThreshold": 5,
        "categoryId": "cat-audio",
        "images": [],
    },
    "ph-1": {
        "id": "ph-1",
        "name": "VoltEdge Phone",
        "description": None,
        "price": 10,
        "stock": None,
        "sku": None,
        "lowStockThreshold": None,
        "categoryId": "cat-phones",
        "category": {"id": "cat-phones", "name": None},
        "images": [{"url": "/images/phone.png", "altText": None}],
    },
}


def catalog_product(product_id: str) -> dict:
    """A fully described product, the size a real catalog entry has."""
    return {
        "id": product_id,
        "name": f"VoltEdge Smart Accessory {product_id}",
        "description": "Aluminium housing, USB-C fast charging, six-hour battery life and a two-year warranty. " * 2,
        "price": 59.99,
        "stock": 25,
        "sku": f"VE-ACC-{product_id}",
        "lowStockThreshold": 5,
        "categoryId": "cat-accessories",
        "category": {"id": "cat-accessories", "name": "Accessories"},
        "images": [{"url": f"https://cdn.voltedge.example/products/{product_id}/main.webp", "altText": "Front view"}],
    }


class FakeBackend:
    def __init__(self):
        self.requests = []
        self.order_response = httpx.Response(201, json={"id": "ord-12345678-abcd", "status": "PENDING"})

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        if request.method == "GET" and request.url.path.startswith("/api/products/"):
            product_id = request.url.path.rsplit("/", 1)[-1]
            if product_id in PRODUCTS:
                return httpx.Response(200, json=PRODUCTS[product_id])
            if product_id.startswith("acc-"):
                return httpx.Response(200, json=catalog_product(product_id))
            if product_id == "html-1":
                return httpx.Response(200, text="<html>maintenance</html>")
            return httpx.Response(404, json={"message": "Product not found"})
        if request.method == "POST" and request.url.path == "/api/orders":
            return self.order_response
        return httpx.Response(404, json={"error": "Not found"})


@pytest.fixture(autouse=True)
def cart_dir(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "CART_STORAGE_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    backend_client = BackendClient(base_url="http://backend.test/api", transport=httpx.MockTransport(backend))
    app.dependency_overrides[get_backend_client] = lambda: backend_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def add(client, product_id, quantity=1, **kwargs):
    return client.post("/api/cart/items", json={"productId": product_id, "quantity": quantity}, **kwargs)


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_empty_cart(client):
    response = client.get("/api/cart")
    assert response.status_code == 200
    assert response.json() == {"items": [], "total": 0, "itemCount": 0, "notifications": []}


def test_add_item_snapshots_product(client):
    response = add(client, "lap-1", 2)
    assert response.status_code == 200

    data = response.json()
    assert data["total"] == pytest.approx(2599.98)
    assert data["itemCount"] == 2
    item = data["items"][0]
    assert item["productId"] == "lap-1"
    assert item["quantity"] == 2
    assert item["product"]["name"] == "VoltEdge Pro Laptop"
    assert item["product"]["images"] == [{"url": "/images/laptop.png", "altText": "Laptop"}]
    assert "createdAt" not in item["product"]
    assert data["notifications"] == [{
        "level": "success",
        "message": "Added VoltEdge Pro Laptop to cart",
        "description": "Quantity: 2",
        "action": {"label": "View Cart", "href": "/cart"},
    }]


def test_cart_persists_across_requests(client):
    add(client, "lap-1")
    add(client, "hp-1", 2)
    add(client, "lap-1", 3)

    data = client.get("/api/cart").json()
    assert [(i["productId"], i["quantity"]) for i in data["items"]] == [("lap-1", 4), ("hp-1", 2)]
    assert data["total"] == pytest.approx(1299.99 * 4 + 249.99 * 2)
    assert data["itemCount"] == 6
    assert data["notifications"] == []


def test_sessions_do_not_share_carts(client):
    add(client, "lap-1")

    other = TestClient(app)
    assert other.get("/api/cart").json()["items"] == []


def test_add_forwards_authorization(client, backend):
    add(client, "lap-1", headers={"Authorization": "Bearer tok-123"})
    assert backend.requests[-1].headers["Authorization"] == "Bearer tok-123"


def test_add_unknown_product_relays_backend_error(client):
    response = add(client, "nope")
    assert response.status_code == 404
    assert response.json() == {"message": "Product not found"}
    assert client.get("/api/cart").json()["items"] == []


def test_add_rejects_non_positive_quantity(client):
    response = add(client, "lap-1", 0)
    assert response.status_code == 422


def test_update_and_remove(client):
    add(client, "lap-1", 2)
    add(client, "hp-1")

    data = client.put("/api/cart/items/lap-1", json={"quantity": 5}).json()
    assert data["items"][0]["quantity"] == 5
    assert data["notifications"] == []

    data = client.put("/api/cart/items/hp-1", json={"quantity": 0}).json()
    assert [i["productId"] for i in data["items"]] == ["lap-1"]
    assert data["notifications"][0]["message"] == "Removed VoltEdge Noise-Cancelling Headphones from cart"

    data = client.delete("/api/cart/items/lap-1").json()
    assert data["items"] == []
    assert data["total"] == 0


def test_update_unknown_product_is_no_op(client):
    add(client, "lap-1")
    response = client.put("/api/cart/items/missing", json={"quantity": 3})
    assert response.status_code == 200
    assert response.json()["itemCount"] == 1


def test_clear_cart(client):
    add(client, "lap-1")
    data = client.delete("/api/cart").json()
    assert data["items"] == []
    assert data["notifications"] == [{"level": "info", "message": "Cart cleared", "description": None, "action": None}]


@pytest.mark.parametrize("backend_name", ["memory", "file", "database", "session"])
def test_storage_backends(client, monkeypatch, tmp_path, session_factory, backend_name):
    monkeypatch.setattr(settings, "CART_STORAGE_BACKEND", backend_name)
    monkeypatch.setattr(dependencies, "SessionLocal", session_factory)

    add(client, "hp-1", 3)
    data = client.get("/api/cart").json()
    assert data["itemCount"] == 3

    other = TestClient(app)
    assert other.get("/api/cart").json()["itemCount"] == 0

    if backend_name == "file":
        assert len(list(tmp_path.glob("voltedge_cart_*.json"))) == 1
    if backend_name == "database":
        with session_factory() as db:
            assert db.query(CartSlot).count() == 1


CHECKOUT = {
    "shippingAddressId": "addr-ship",
    "billingAddressId": "addr-bill",
    "paymentMethod": "CREDIT_CARD",
}


def test_checkout_requires_login(client):
    add(client, "lap-1")
    response = client.post("/api/orders", json=CHECKOUT)
    assert response.status_code == 401
    assert response.json() == {"error": "Please log in to place an order"}


def test_checkout_rejects_empty_cart(client):
    response = client.post("/api/orders", json=CHECKOUT, headers={"Authorization": "Bearer tok-123"})
    assert response.status_code == 400
    assert response.json() == {"error": "Cart is empty"}


def test_checkout_places_order_and_clears_cart(client, backend):
    add(client, "lap-1", 2)
    add(client, "hp-1")

    response = client.post("/api/orders", json=CHECKOUT, headers={"Authorization": "Bearer tok-123"})
    assert response.status_code == 201

    order_request = backend.requests[-1]
    assert order_request.headers["Authorization"] == "Bearer tok-123"
    body = json.loads(order_request.content)
    assert body["items"] == [{"productId": "lap-1", "quantity": 2}, {"productId": "hp-1", "quantity": 1}]
    assert body["paymentMethod"] == "CREDIT_CARD"

    data = response.json()
    assert data["order"]["id"] == "ord-12345678-abcd"
    assert data["cart"]["items"] == []
    assert [n["message"] for n in data["cart"]["notifications"]] == ["Cart cleared", "Order placed successfully!"]
    assert data["cart"]["notifications"][1]["description"] == "Order #ord-1234 has been placed."

    assert client.get("/api/cart").json()["items"] == []


def test_checkout_backend_failure_keeps_cart(client, backend):
    add(client, "lap-1")
    backend.order_response = httpx.Response(400, json={"message": "Invalid shipping address"})

    response = client.post("/api/orders", json=CHECKOUT, headers={"Authorization": "Bearer tok-123"})
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid shipping address"}
    assert client.get("/api/cart").json()["itemCount"] == 1


def test_checkout_rejects_unknown_payment_method(client):
    response = client.post(
        "/api/orders",
        json={**CHECKOUT, "paymentMethod": "BARTER"},
        headers={"Authorization": "Bearer tok-123"},
    )
    assert response.status_code == 422


def test_add_product_with_null_fields(client):
    response = add(client, "ph-1", 2)
    assert response.status_code == 200

    data = response.json()
    assert data["total"] == 20
    product = data["items"][0]["product"]
    assert product["images"] == [{"url": "/images/phone.png", "altText": None}]
    assert product["sku"] is None
    assert product["stock"] is None
    assert product["category"] == {"id": "cat-phones", "name": None}
    assert client.get("/api/cart").json()["itemCount"] == 2


def test_default_storage_keeps_cookie_small(client, cart_dir):
    for n in range(8):
        response = add(client, f"acc-{n}")
        assert response.status_code == 200
        assert len(response.headers.get("set-cookie", "")) < 4096

    assert client.get("/api/cart").json()["itemCount"] == 8
    assert len(list(cart_dir.glob("voltedge_cart_*.json"))) == 1


def test_session_storage_never_sets_oversized_cookie(client, monkeypatch, caplog):
    monkeypatch.setattr(settings, "CART_STORAGE_BACKEND", "session")

    for n in range(8):
        response = add(client, f"acc-{n}")
        assert response.status_code == 200
        assert len(response.headers.get("set-cookie", "")) < 4096

    assert "Error saving cart to storage" in caplog.text
    assert 0 < client.get("/api/cart").json()["itemCount"] < 8


def test_add_with_non_json_backend_body(client):
    response = add(client, "html-1")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}
    assert client.get("/api/cart").json()["items"] == []
