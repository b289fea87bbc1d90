"""
Общие фикстуры: отдельная sqlite-база на каждый тест, клиент FastAPI
и фабрики пользователей/товаров.
"""
import pytest
from fastapi.testclient import TestClient

from storefront.core.security import create_access_token, get_password_hash
from storefront.db import session as db_session
from storefront.db.base import Base
from storefront.main import app
from storefront.models.item import Item
from storefront.models.user import User


@pytest.fixture
def engine(tmp_path):
    engine = db_session.init_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    db_session.dispose_engine()


@pytest.fixture
def session_factory(engine):
    return db_session.get_sessionmaker()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(email: str = "shopper@example.com", password: str = "correct horse") -> User:
        user = User(email=email, hashed_password=get_password_hash(password))
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_item(db):
    def _make(
        name: str = "Desk lamp",
        price: float = 25.0,
        category: str = "home",
        description: str = "Warm light, adjustable arm",
        image: str | None = None,
        item_id: str | None = None,
    ) -> Item:
        item = Item(name=name, price=price, category=category, description=description, image=image)
        if item_id is not None:
            item.id = item_id
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers
