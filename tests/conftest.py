# tests/conftest.py

from __future__ import annotations

import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.orm import sessionmaker

from taskit.core.database import build_engine, get_db, init_db
from taskit.core.jwt_handler import JWTHandler
from taskit.main import create_app
from taskit.services.accounts import AccountManager
from taskit.services.tasks import TaskStore

from .fakes import FakeNotifier


@pytest.fixture()
def engine():
    """A private in-memory database per test."""
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def jwt_handler() -> JWTHandler:
    return JWTHandler("test-secret")


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def manager(db, jwt_handler, notifier) -> AccountManager:
    return AccountManager(db, jwt_handler, notifier)


@pytest.fixture()
def task_store(db) -> TaskStore:
    return TaskStore(db)


@pytest.fixture()
def account_fields() -> dict:
    return {"name": "Ada", "email": "a@x.com", "password": "secretpass", "age": 36}


@pytest.fixture()
def app(session_factory, notifier):
    app = create_app(notifier=notifier)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


def make_image(fmt: str = "PNG", size: tuple[int, int] = (40, 20)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, "red").save(buf, format=fmt)
    return buf.getvalue()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
