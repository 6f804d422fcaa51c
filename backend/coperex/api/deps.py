from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
import jwt
from sqlalchemy.orm import Session

from coperex.core.config import settings
from coperex.core.errors import AuthenticationError, AuthorizationError
from coperex.core.security import decode_access_token
from coperex.db.session import get_db
from coperex.models.user import User, Role
from coperex.validation.predicates import admin_exists

# auto_error is off so a missing token goes through AuthenticationError like any other bad token
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_prefix}/auth/login", auto_error=False)


def _resolve_user(token: str | None, db: Session) -> User:
    if not token:
        raise AuthenticationError("Not authenticated")
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid token")
    sub = payload.get("sub")
    if not sub or not str(sub).isdigit():
        raise AuthenticationError("Invalid token")
    user = db.get(User, int(sub))
    if user is None or not user.status:
        # Logically deleted accounts lose access immediately
        raise AuthenticationError("User does not exist or is inactive")
    return user


def get_current_user(request: Request, token: str | None = Depends(optional_oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """Verify the bearer token and attach the user to ``request.state.user``."""
    user = _resolve_user(token, db)
    request.state.user = user
    return user


def require_roles(*allowed: str):
    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise AuthorizationError()
        return user
    return checker


require_admin = require_roles(Role.ADMIN.value)


def require_admin_unless_bootstrap(request: Request, token: str | None = Depends(optional_oauth2_scheme), db: Session = Depends(get_db)) -> User | None:
    """Registration gate.

    Open while no ADMIN exists yet; afterwards only an ADMIN may register users.
    """
    if not admin_exists(db):
        return None
    user = _resolve_user(token, db)
    request.state.user = user
    if user.role != Role.ADMIN.value:
        raise AuthorizationError()
    return user
