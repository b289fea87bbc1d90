"""
Компонентные тесты маршрутов /api/cart.

Запросы проходят через настоящее приложение FastAPI: проверку токена,
валидацию тела, сервис корзины и sqlite, без подмены внутренних слоёв.
"""
import pytest
from fastapi.testclient import TestClient

from storefront.core import security
from storefront.main import app
from storefront.models.cart import MAX_QUANTITY


def delete_from_cart(client: TestClient, body, headers):
    # httpx не принимает json= в client.delete
    return client.request("DELETE", "/api/cart", json=body, headers=headers)


class TestAuthentication:

    def test_missing_header_is_rejected_before_store_access(self, client: TestClient):
        opened = []

        def tracking_get_db():
            opened.append(True)
            yield None

        app.dependency_overrides[security.get_db] = tracking_get_db

        response = client.get("/api/cart")

        assert response.status_code == 401
        assert response.json()["kind"] == "Unauthorized"
        assert response.headers["www-authenticate"] == "Bearer"
        assert opened == []

    def test_invalid_token(self, client: TestClient):
        response = client.get("/api/cart", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token", "kind": "Unauthorized"}

    def test_non_bearer_scheme(self, client: TestClient, make_user):
        user = make_user()

        response = client.get("/api/cart", headers={"Authorization": f"Basic {user.id}"})

        assert response.status_code == 401

    def test_token_for_missing_user(self, client: TestClient, auth_headers):
        response = client.get("/api/cart", headers=auth_headers("deleted-user"))

        assert response.status_code == 404
        assert response.json() == {"error": "User not found", "kind": "UserNotFound"}

    def test_broken_json_without_token_is_unauthorized(self, client: TestClient):
        response = client.post("/api/cart", content="{bad", headers={"Content-Type": "application/json"})

        assert response.status_code == 401
        assert response.json()["kind"] == "Unauthorized"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_broken_json_with_token_is_validation_error(self, client: TestClient, make_user, auth_headers):
        user = make_user()
        headers = {**auth_headers(user.id), "Content-Type": "application/json"}

        response = client.post("/api/cart", content="{bad", headers=headers)

        assert response.status_code == 400
        assert response.json() == {"error": "JSON decode error", "kind": "ValidationError"}


class TestAddToCart:

    def test_add_then_get_shows_resolved_item(self, client: TestClient, make_user, make_item, auth_headers):
        # Подготовка
        user = make_user()
        item = make_item(name="Desk lamp", price=25.0, category="home", image="/img/lamp.png")
        headers = auth_headers(user.id)

        # Действие
        added = client.post("/api/cart", json={"itemId": item.id}, headers=headers)
        fetched = client.get("/api/cart", headers=headers)

        # Проверка
        assert added.status_code == 200
        assert fetched.status_code == 200
        assert fetched.json() == added.json() == [
            {
                "item": {
                    "id": item.id,
                    "name": "Desk lamp",
                    "description": "Warm light, adjustable arm",
                    "price": 25.0,
                    "category": "home",
                    "image": "/img/lamp.png",
                },
                "quantity": 1,
            }
        ]

    def test_quantities_are_summed(self, client: TestClient, make_user, make_item, auth_headers):
        user = make_user()
        item = make_item()
        headers = auth_headers(user.id)

        client.post("/api/cart", json={"itemId": item.id, "quantity": 2}, headers=headers)
        response = client.post("/api/cart", json={"itemId": item.id, "quantity": 3}, headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body) == 1
        assert body[0]["quantity"] == 5

    def test_unknown_item(self, client: TestClient, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user.id)

        response = client.post("/api/cart", json={"itemId": "nope"}, headers=headers)

        assert response.status_code == 404
        assert response.json()["kind"] == "ItemNotFound"
        assert client.get("/api/cart", headers=headers).json() == []

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"itemId": ""},
            {"itemId": "x", "quantity": 0},
            {"itemId": "x", "quantity": -1},
            {"itemId": "x", "quantity": "2"},
            {"itemId": "x", "quantity": 1.5},
            {"itemId": "x", "extra": True},
        ],
    )
    def test_malformed_body(self, client: TestClient, make_user, auth_headers, body):
        user = make_user()

        response = client.post("/api/cart", json=body, headers=auth_headers(user.id))

        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"

    def test_missing_body(self, client: TestClient, make_user, auth_headers):
        user = make_user()

        response = client.post("/api/cart", headers=auth_headers(user.id))

        assert response.status_code == 400

    def test_quantity_beyond_column_range(self, client: TestClient, make_user, make_item, auth_headers):
        user = make_user()
        item = make_item()
        headers = auth_headers(user.id)

        response = client.post("/api/cart", json={"itemId": item.id, "quantity": 10**19}, headers=headers)

        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"
        assert client.get("/api/cart", headers=headers).json() == []

    def test_merge_past_column_range(self, client: TestClient, make_user, make_item, auth_headers):
        user = make_user()
        item = make_item()
        headers = auth_headers(user.id)
        client.post("/api/cart", json={"itemId": item.id, "quantity": MAX_QUANTITY}, headers=headers)

        response = client.post("/api/cart", json={"itemId": item.id, "quantity": 1}, headers=headers)

        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"
        assert client.get("/api/cart", headers=headers).json()[0]["quantity"] == MAX_QUANTITY


class TestRemoveFromCart:

    def test_remove_line(self, client: TestClient, make_user, make_item, auth_headers):
        user = make_user()
        lamp = make_item(name="Lamp")
        chair = make_item(name="Chair")
        headers = auth_headers(user.id)
        client.post("/api/cart", json={"itemId": lamp.id}, headers=headers)
        client.post("/api/cart", json={"itemId": chair.id}, headers=headers)

        response = delete_from_cart(client, {"itemId": lamp.id}, headers)

        assert response.status_code == 200
        assert [line["item"]["name"] for line in response.json()] == ["Chair"]

    def test_remove_absent_item_returns_unchanged_cart(self, client: TestClient, make_user, make_item, auth_headers):
        user = make_user()
        item = make_item()
        headers = auth_headers(user.id)
        before = client.post("/api/cart", json={"itemId": item.id, "quantity": 2}, headers=headers).json()

        response = delete_from_cart(client, {"itemId": "never-added"}, headers)

        assert response.status_code == 200
        assert response.json() == before

    def test_missing_item_id(self, client: TestClient, make_user, auth_headers):
        user = make_user()

        response = delete_from_cart(client, {}, auth_headers(user.id))

        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"

    def test_unknown_user(self, client: TestClient, auth_headers):
        response = delete_from_cart(client, {"itemId": "x"}, auth_headers("deleted-user"))

        assert response.status_code == 404

    def test_no_token(self, client: TestClient):
        response = delete_from_cart(client, {"itemId": "x"}, {})

        assert response.status_code == 401


class TestStaleItems:

    def test_deleted_catalog_item_disappears_from_cart(self, client: TestClient, make_user, make_item, auth_headers):
        user = make_user()
        gone = make_item(name="Discontinued")
        kept = make_item(name="Bestseller")
        headers = auth_headers(user.id)
        client.post("/api/cart", json={"itemId": gone.id}, headers=headers)
        client.post("/api/cart", json={"itemId": kept.id}, headers=headers)

        deleted = client.delete(f"/api/items/{gone.id}", headers=headers)
        response = client.get("/api/cart", headers=headers)

        assert deleted.status_code == 200
        assert response.status_code == 200
        assert [line["item"]["id"] for line in response.json()] == [kept.id]
