from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
import jwt
from sqlalchemy.orm import Session

from flightbook.core.config import settings
from flightbook.core.exceptions import AuthenticationError, ErrorCode, ForbiddenError
from flightbook.core.security import decode_access_token
from flightbook.db.session import get_db
from flightbook.models.enums import UserRole
from flightbook.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    try:
        payload = decode_access_token(token)
        user_id = int(payload.get("sub") or 0)
    except (jwt.PyJWTError, ValueError):
        raise AuthenticationError("Invalid token")
    user = db.get(User, user_id)
    if not user:
        raise AuthenticationError("Invalid token")
    if not user.is_active:
        raise ForbiddenError("User is blocked", ErrorCode.USER_BLOCKED)
    return user

def require_roles(*allowed: str):
    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise ForbiddenError()
        return user
    return checker

def is_admin(user: User) -> bool:
    return user.role == UserRole.admin.value

def ensure_owner_or_admin(user: User, owner_id: int) -> None:
    if owner_id != user.id and not is_admin(user):
        raise ForbiddenError()

class PageParams:
    """Common ``page``/``limit`` query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    ):
        self.page = page
        self.limit = limit
