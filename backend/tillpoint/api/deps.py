"""FastAPI dependencies: DB session, current user from JWT, admin gate.

The JWT is accepted from:
1. Authorization header (API clients)
2. auth-token cookie (web frontend)

Authorization is resolved per request from these dependencies; there is
no process-wide "current role".
"""
from typing import Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from tillpoint.core.audit import AuditLog
from tillpoint.core.config import settings
from tillpoint.core.exceptions import BusinessError
from tillpoint.core.permissions import is_admin
from tillpoint.core.security import decode_access_token
from tillpoint.db.session import SessionLocal
from tillpoint.models.user import User

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """Extract the user id from the JWT. Header takes precedence over cookie."""
    token = None

    if credentials:
        token = credentials.credentials
    elif settings.AUTH_COOKIE_NAME in request.cookies:
        token = request.cookies[settings.AUTH_COOKIE_NAME]

    if not token:
        raise BusinessError.unauthorized("missing token")

    claims = decode_access_token(token)
    if not claims:
        raise BusinessError.unauthorized("invalid or expired token")

    try:
        return int(claims["sub"])
    except ValueError:
        raise BusinessError.unauthorized("malformed subject claim")


def get_current_user(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> User:
    """Load current user from DB."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise BusinessError.unauthorized(f"user {user_id} no longer exists")
    return user


def require_admin(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> User:
    """Gate for catalogue, expense and financial-summary endpoints."""
    if not is_admin(current_user):
        AuditLog.log_access_denied(
            action=request.method,
            resource_type=request.url.path,
            user_id=current_user.id,
            reason="admin role required",
        )
        raise BusinessError.forbidden(f"user {current_user.id} is not an admin")
    return current_user
