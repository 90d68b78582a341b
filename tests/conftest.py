# tests/conftest.py
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EXTRA_INSTRUMENTS", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pipdesk import crud, schemas
from pipdesk.database import Base, get_db
from pipdesk.main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_EMAIL = "admin@example.com"
USER_EMAIL = "trader@example.com"
PASSWORD = "secret123"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_user(db):
    return crud.create_user(db, schemas.UserCreate(email=ADMIN_EMAIL, password=PASSWORD), role="admin")


@pytest.fixture
def regular_user(db):
    return crud.create_user(db, schemas.UserCreate(email=USER_EMAIL, password=PASSWORD))


def _login(client, email):
    response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    # Bearer header only; drop the cookie so each request authenticates as the given user
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client, admin_user):
    return _login(client, ADMIN_EMAIL)


@pytest.fixture
def user_headers(client, regular_user):
    return _login(client, USER_EMAIL)


@pytest.fixture
def eurusd_signal(client, admin_headers):
    response = client.post(
        "/api/signals",
        json={
            "pair": "EUR/USD",
            "direction": "BUY",
            "entry_price": "1.0820",
            "take_profit_price": "1.0850",
            "take_profit_2_price": "1.0880",
            "stop_loss_price": "1.0800",
        },
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
