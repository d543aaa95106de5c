"""Auth: signup, login, logout.

- Passwords hashed with bcrypt
- Token returned in the body and set as an httpOnly cookie
"""
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from tillpoint.api.deps import get_db, get_current_user
from tillpoint.core.audit import AuditLog
from tillpoint.core.config import settings
from tillpoint.core.exceptions import BusinessError
from tillpoint.core.security import verify_password, get_password_hash, create_access_token
from tillpoint.models.enums import UserRole
from tillpoint.models.user import User
from tillpoint.schemas.user import AuthResponse, UserCreate, UserLogin, UserResponse

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _set_auth_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
    )


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(data: UserCreate, request: Request, response: Response, db: Session = Depends(get_db)):
    """Create a till user (role defaults to "user") and log them in."""
    if not data.name.strip():
        raise BusinessError.bad_request("Name, email, and password are required")
    if len(data.password) < settings.MIN_PASSWORD_LENGTH:
        raise BusinessError.bad_request(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        )
    if data.role == UserRole.ADMIN and not settings.ALLOW_ADMIN_SIGNUP:
        AuditLog.log_authentication("signup", data.email, _client_ip(request), False, reason="admin role requested")
        raise BusinessError.forbidden(f"admin signup disabled ({data.email})")
    if db.query(User).filter(User.email == data.email).first():
        AuditLog.log_authentication("signup", data.email, _client_ip(request), False, reason="exists")
        raise BusinessError.conflict("User already exists")

    user = User(
        email=data.email,
        name=data.name.strip(),
        hashed_password=get_password_hash(data.password),
        role=data.role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    token = create_access_token(subject=str(user.id), role=user.role)
    _set_auth_cookie(response, token)
    AuditLog.log_authentication("signup", user.email, _client_ip(request), True)
    return AuthResponse(message="User created successfully", token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
def login(data: UserLogin, request: Request, response: Response, db: Session = Depends(get_db)):
    """Generic error on failure: never say which field was wrong."""
    user = db.query(User).filter(User.email == data.email).first()
    if not user or not verify_password(data.password, user.hashed_password):
        AuditLog.log_authentication("login", data.email, _client_ip(request), False, reason="Invalid credentials")
        raise BusinessError.unauthorized("invalid credentials")

    token = create_access_token(subject=str(user.id), role=user.role)
    _set_auth_cookie(response, token)
    AuditLog.log_authentication("login", user.email, _client_ip(request), True)
    return AuthResponse(message="Login successful", token=token, user=UserResponse.model_validate(user))


@router.post("/logout")
def logout(request: Request, response: Response, current_user: User = Depends(get_current_user)):
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
    )
    AuditLog.log_authentication("logout", current_user.email, _client_ip(request), True)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return current_user
