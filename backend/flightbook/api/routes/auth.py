from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from flightbook.api.deps import get_current_user
from flightbook.api.serializers import user_out
from flightbook.core.config import settings
from flightbook.core.exceptions import AuthenticationError, DomainError, ErrorCode, ForbiddenError
from flightbook.core.security import create_access_token, get_password_hash, verify_password
from flightbook.db.session import get_db
from flightbook.models.enums import UserRole
from flightbook.models.user import User
from flightbook.schemas.auth import Token, UserLogin, UserOut, UserRegister

router = APIRouter()


def _authenticate(db: Session, email: str, password: str) -> dict:
    """Existing users only: 401 for unknown email or wrong password, 403 when blocked."""
    email = email.lower().strip()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.hashed_password):
        raise AuthenticationError("Incorrect credentials")
    if not user.is_active:
        raise ForbiddenError("User is blocked", ErrorCode.USER_BLOCKED)
    access_token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/login", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    return _authenticate(db, form_data.username, form_data.password)


@router.post("/login-json", response_model=Token)
def login_json(payload: UserLogin, db: Session = Depends(get_db)):
    return _authenticate(db, payload.email, payload.password)


@router.post("/register", response_model=UserOut, status_code=201)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise DomainError("Email already registered", ErrorCode.EMAIL_TAKEN)
    role = UserRole.admin if email in settings.admin_emails else UserRole.user
    user = User(email=email, full_name=payload.full_name, hashed_password=get_password_hash(payload.password), role=role.value, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user_out(user)


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user_out(user)
