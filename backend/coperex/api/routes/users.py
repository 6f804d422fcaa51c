from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coperex.api.deps import get_current_user, require_admin
from coperex.core.errors import NotFoundError, PersistenceError
from coperex.core.logging import get_logger
from coperex.core.security import get_password_hash
from coperex.db.session import get_db
from coperex.models.user import User
from coperex.schemas.user import UserOut
from coperex.validation.chain import ValidatedRequest, validate_fields
from coperex.validation.users import (
    ADMIN_UPDATE_USER,
    DELETE_SELF,
    GET_USER,
    LIST_USERS,
    SELF_UPDATE_USER,
)

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(get_current_user)])

DEFAULT_PAGE_SIZE = 5
EDITABLE_FIELDS = ["name", "surname", "username", "email", "phone", "role"]


def _user_out(user: User) -> Dict[str, Any]:
    return UserOut.model_validate(user).model_dump(mode="json", by_alias=True)


def _apply_patch(db: Session, user_id: int, changes: Dict[str, Any]) -> User:
    user = db.get(User, user_id)
    if user is None or not user.status:
        raise NotFoundError("User not found for update")
    for key in EDITABLE_FIELDS:
        if key in changes:
            setattr(user, key, changes[key])
    if "password" in changes:
        user.hashed_password = get_password_hash(changes["password"])
    db.commit()
    db.refresh(user)
    return user


@router.get("", response_model=dict, dependencies=[Depends(require_admin)])
def list_users(data: ValidatedRequest = Depends(validate_fields(*LIST_USERS)), db: Session = Depends(get_db)):
    """Active users, paginated with ``limite`` (page size) and ``desde`` (offset).

    ``total`` counts every active user regardless of pagination.
    """
    limite = data.query.get("limite", DEFAULT_PAGE_SIZE)
    desde = data.query.get("desde", 0)
    try:
        total = db.execute(select(func.count(User.id)).where(User.status == True)).scalar_one()  # noqa: E712
        users = db.execute(
            select(User).where(User.status == True).order_by(User.id.asc()).offset(desde).limit(limite)  # noqa: E712
        ).scalars().all()
    except SQLAlchemyError as e:
        raise PersistenceError("Error fetching users", e)
    return {"success": True, "total": total, "users": [_user_out(u) for u in users]}


@router.get("/{uid}", response_model=dict, dependencies=[Depends(require_admin)])
def get_user(data: ValidatedRequest = Depends(validate_fields(*GET_USER)), db: Session = Depends(get_db)):
    try:
        user = db.get(User, data.params["uid"])
    except SQLAlchemyError as e:
        raise PersistenceError("Error fetching user", e)
    if user is None:
        raise NotFoundError("User not found")
    return {"success": True, "user": _user_out(user)}


@router.put("/{uid}", response_model=dict, dependencies=[Depends(require_admin)])
def admin_update_user(data: ValidatedRequest = Depends(validate_fields(*ADMIN_UPDATE_USER)), db: Session = Depends(get_db)):
    try:
        user = _apply_patch(db, data.params["uid"], data.body)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Error updating user", e)
    logger.info("User %s updated by an administrator", user.id)
    return {"success": True, "message": "User updated", "user": _user_out(user)}


@router.put("", response_model=dict)
def update_current_user(
    data: ValidatedRequest = Depends(validate_fields(*SELF_UPDATE_USER)),
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        user = _apply_patch(db, current.id, data.body)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Error updating user", e)
    return {"success": True, "message": "User updated", "user": _user_out(user)}


@router.delete("", response_model=dict, dependencies=[Depends(require_admin)])
def delete_current_user(
    data: ValidatedRequest = Depends(validate_fields(*DELETE_SELF)),
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Logical delete of the authenticated user: status flips to false."""
    try:
        user = db.get(User, current.id)
        if user is None or not user.status:
            raise NotFoundError("User not found for deletion")
        user.status = False
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Error deleting user", e)
    logger.info("User %s logically deleted", user.username)
    return {"success": True, "message": "User deleted (logically)", "user": user.username}
