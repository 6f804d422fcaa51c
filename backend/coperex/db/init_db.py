from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coperex.db.session import engine, SessionLocal
from coperex.models import user  # noqa: F401
from coperex.models import company  # noqa: F401
from coperex.models.base import Base
from coperex.models.user import User, Role
from coperex.core.config import settings
from coperex.core.logging import get_logger
from coperex.core.security import get_password_hash
from coperex.validation.predicates import admin_exists

logger = get_logger(__name__)


def check_connection():
    """Fail fast when the store is unreachable."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def create_tables():
    Base.metadata.create_all(bind=engine)


def ensure_default_admin(db: Session) -> User | None:
    """Create the seed administrator when no ADMIN exists.

    Idempotent: returns None once any ADMIN is present.
    """
    if admin_exists(db):
        logger.info("Admin already exists")
        return None
    admin = User(
        name=settings.seed_admin_name,
        surname=settings.seed_admin_surname,
        username=settings.seed_admin_username,
        email=settings.seed_admin_email.lower(),
        hashed_password=get_password_hash(settings.seed_admin_password),
        phone=settings.seed_admin_phone,
        role=Role.ADMIN.value,
        status=True,
    )
    try:
        db.add(admin)
        db.commit()
        db.refresh(admin)
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Default admin %s created", admin.username)
    return admin


def seed_default_admin():
    db = SessionLocal()
    try:
        ensure_default_admin(db)
    finally:
        db.close()
