"""
Store-backed predicates used by the validation chains.

Each predicate performs exactly one lookup and raises ``RuleViolation`` when
its named condition does not hold:

- ``*_is_unique`` fails when a matching record IS found;
- ``*_is_present`` fails when NO matching (active) record is found.

Uniqueness checks are best effort: the unique indexes on the tables are the
real guarantee against concurrent inserts.
"""
from typing import Optional

from fastapi import status
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from coperex.models.company import Company
from coperex.models.user import User, Role
from coperex.validation.rules import RuleViolation


def _taken(db: Session, column, value, model, exclude_id: Optional[int]) -> bool:
    stmt = select(model.id).where(column == value)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    return db.execute(stmt.limit(1)).first() is not None


def email_is_unique(db: Session, email: str, exclude_id: Optional[int] = None) -> None:
    if _taken(db, User.email, email.lower(), User, exclude_id):
        raise RuleViolation(f"The email {email} is already registered")


def username_is_unique(db: Session, username: str, exclude_id: Optional[int] = None) -> None:
    if _taken(db, User.username, username, User, exclude_id):
        raise RuleViolation(f"The username {username} is already registered")


def company_name_is_unique(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    if _taken(db, Company.name, name, Company, exclude_id):
        raise RuleViolation(f"The company {name} is already registered")


def user_is_present(db: Session, uid: int) -> None:
    user = db.get(User, uid)
    if user is None or not user.status:
        raise RuleViolation("No user exists with the given ID", status_code=status.HTTP_404_NOT_FOUND)


def company_is_present(db: Session, company_id: int) -> None:
    company = db.get(Company, company_id)
    if company is None or not company.status:
        raise RuleViolation("No company exists with the given ID", status_code=status.HTTP_404_NOT_FOUND)


def current_user_is_present(db: Session, uid: int) -> None:
    """The authenticated user still exists and has not been deleted."""
    user = db.get(User, uid)
    if user is None or not user.status:
        raise RuleViolation("User not found")


def admin_exists(db: Session) -> bool:
    count = db.execute(select(func.count(User.id)).where(User.role == Role.ADMIN.value)).scalar_one()
    return count > 0


def not_last_active_admin(db: Session, uid: int) -> None:
    """Another active ADMIN remains besides ``uid``."""
    others = db.execute(
        select(func.count(User.id)).where(
            User.role == Role.ADMIN.value,
            User.status == True,  # noqa: E712
            User.id != uid,
        )
    ).scalar_one()
    if others == 0:
        raise RuleViolation("The last active administrator cannot be removed or demoted")
