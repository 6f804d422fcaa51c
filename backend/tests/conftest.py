import os

# In-memory SQLite shared through a StaticPool; must be set before coperex is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["RATE_LIMIT"] = "50/minute"

import pytest
from fastapi.testclient import TestClient

from coperex.core.config import settings
from coperex.core.rate_limit import limiter
from coperex.core.security import get_password_hash
from coperex.db.init_db import seed_default_admin
from coperex.db.session import engine, SessionLocal
from coperex.main import app
from coperex.models.base import Base
from coperex.models.user import User

API = settings.api_prefix
ADMIN_PASSWORD = settings.seed_admin_password
USER_PASSWORD = "Str0ng!Pass"


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    limiter.reset()
    yield


@pytest.fixture
def client():
    return TestClient(app)


def ensure_user(username: str, role: str = "CLIENT", password: str = USER_PASSWORD, status: bool = True) -> int:
    db = SessionLocal()
    try:
        u = db.query(User).filter(User.username == username).first()
        if not u:
            u = User(
                name=username.capitalize(),
                surname="Tester",
                username=username,
                email=f"{username}@example.com",
                hashed_password=get_password_hash(password),
                phone="55551234",
                role=role,
                status=status,
            )
            db.add(u)
            db.commit()
            db.refresh(u)
        return u.id
    finally:
        db.close()


def login(client: TestClient, username: str, password: str = USER_PASSWORD) -> str:
    r = client.post(f"{API}/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client):
    seed_default_admin()
    return bearer(login(client, settings.seed_admin_username, ADMIN_PASSWORD))


@pytest.fixture
def client_headers(client):
    ensure_user("carla", role="CLIENT")
    return bearer(login(client, "carla"))
