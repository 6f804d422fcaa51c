from fastapi.testclient import TestClient
from sqlalchemy import select

from conftest import API, ADMIN_PASSWORD

from coperex.core.config import settings
from coperex.db.init_db import ensure_default_admin
from coperex.db.session import SessionLocal
from coperex.main import app
from coperex.models.user import User


def admins(db):
    return db.execute(select(User).where(User.role == "ADMIN")).scalars().all()


def test_default_admin_is_created_once():
    db = SessionLocal()
    try:
        created = ensure_default_admin(db)
        assert created is not None
        assert created.username == settings.seed_admin_username
        assert created.email == settings.seed_admin_email.lower()
        assert created.hashed_password != ADMIN_PASSWORD

        assert ensure_default_admin(db) is None
        assert [u.username for u in admins(db)] == [settings.seed_admin_username]
    finally:
        db.close()


def test_startup_seeds_admin_and_health_reports_database():
    with TestClient(app) as client:
        r = client.get(f"{API}/health/")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

        r = client.post(
            f"{API}/auth/login",
            json={"email": settings.seed_admin_email, "password": ADMIN_PASSWORD},
        )
        assert r.status_code == 200, r.text
        assert r.json()["user"]["role"] == "ADMIN"

    # A second startup does not duplicate the seed admin
    with TestClient(app):
        pass
    db = SessionLocal()
    try:
        assert len(admins(db)) == 1
    finally:
        db.close()
