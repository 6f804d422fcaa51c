from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coperex.api.deps import require_admin_unless_bootstrap
from coperex.core.errors import PersistenceError, ValidationError
from coperex.core.logging import get_logger
from coperex.core.security import create_access_token, get_password_hash, verify_password
from coperex.db.session import get_db
from coperex.models.user import User
from coperex.schemas.auth import LoginOut
from coperex.schemas.user import UserOut
from coperex.validation.chain import ValidatedRequest, validate_fields
from coperex.validation.users import LOGIN, REGISTER

logger = get_logger(__name__)

router = APIRouter()


def _bad_credentials(msg: str = "Invalid credentials"):
    return ValidationError([{"location": "body", "field": None, "msg": msg, "value": None}], message=msg)


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=dict, dependencies=[Depends(require_admin_unless_bootstrap)])
def register(data: ValidatedRequest = Depends(validate_fields(*REGISTER)), db: Session = Depends(get_db)):
    payload = data.body
    user = User(
        name=payload["name"],
        surname=payload.get("surname"),
        username=payload["username"],
        email=payload["email"],
        hashed_password=get_password_hash(payload["password"]),
        phone=payload.get("phone"),
        role=payload["role"],
        status=True,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Registering user %s failed: %s", payload["username"], e)
        raise PersistenceError("Error registering user", e)
    logger.info("Registered user %s (%s)", user.username, user.role)
    return {
        "success": True,
        "message": "User registered successfully",
        "user": UserOut.model_validate(user).model_dump(mode="json", by_alias=True),
    }


@router.post("/login", response_model=LoginOut)
def login(data: ValidatedRequest = Depends(validate_fields(*LOGIN)), db: Session = Depends(get_db)):
    """Log in with email or username. Unknown user, wrong password and
    deactivated accounts all answer 400."""
    payload = data.body
    if payload.get("email"):
        stmt = select(User).where(User.email == payload["email"])
    else:
        stmt = select(User).where(User.username == payload["username"])
    try:
        user = db.execute(stmt).scalar_one_or_none()
    except SQLAlchemyError as e:
        raise PersistenceError("Error logging in", e)
    if not user or not verify_password(payload["password"], user.hashed_password):
        raise _bad_credentials()
    if not user.status:
        raise _bad_credentials("User is inactive")
    token = create_access_token(subject=user.id, roles=[user.role])
    return {
        "success": True,
        "message": "Login successful",
        "token": token,
        "token_type": "bearer",
        "user": UserOut.model_validate(user),
    }
