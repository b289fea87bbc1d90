"""
Тесты регистрации, входа и эндпоинтов проверки состояния.
"""
from fastapi.testclient import TestClient

from storefront.core.security import verify_token


class TestRegister:

    def test_register_normalizes_email(self, client: TestClient):
        response = client.post("/api/auth/register", json={"email": " Ann@Example.com ", "password": "s3cret"})

        assert response.status_code == 201
        assert response.json()["email"] == "ann@example.com"
        assert response.json()["id"]

    def test_duplicate_email(self, client: TestClient, make_user):
        make_user(email="ann@example.com")

        response = client.post("/api/auth/register", json={"email": "ann@example.com", "password": "other"})

        assert response.status_code == 400
        assert response.json() == {"error": "Email already registered", "kind": "ValidationError"}

    def test_invalid_email(self, client: TestClient):
        response = client.post("/api/auth/register", json={"email": "not-an-email", "password": "s3cret"})

        assert response.status_code == 400


class TestLogin:

    def test_login_issues_token_for_user(self, client: TestClient, make_user):
        user = make_user(email="ann@example.com", password="s3cret")

        response = client.post("/api/auth/login", json={"email": "ann@example.com", "password": "s3cret"})

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert verify_token(body["token"]) == user.id

    def test_token_opens_cart(self, client: TestClient, make_user):
        make_user(email="ann@example.com", password="s3cret")
        token = client.post("/api/auth/login", json={"email": "ann@example.com", "password": "s3cret"}).json()["token"]

        response = client.get("/api/cart", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == []

    def test_wrong_password(self, client: TestClient, make_user):
        make_user(email="ann@example.com", password="s3cret")

        response = client.post("/api/auth/login", json={"email": "ann@example.com", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["error"] == "Incorrect email or password"

    def test_unknown_email(self, client: TestClient):
        response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "x"})

        assert response.status_code == 401


class TestHealth:

    def test_root(self, client: TestClient):
        assert client.get("/").json()["status"] == "ok"

    def test_health_checks_database(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"
