"""Create all tables. Run on app startup.

Creates a bootstrap admin with a random password when the user table is empty.
The password is logged once; change it after first login.
"""
import logging
import secrets

from tillpoint.core.config import settings
from tillpoint.core.security import get_password_hash
from tillpoint.db.base import Base
from tillpoint.db.session import engine, SessionLocal
from tillpoint.models import user, product, sale, expense, counter, idempotency  # noqa: F401 - register models
from tillpoint.models.enums import UserRole
from tillpoint.models.user import User

logger = logging.getLogger(__name__)


def init_db():
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if db.query(User).count() == 0:
            default_password = secrets.token_urlsafe(16)
            default_user = User(
                email=settings.DEFAULT_ADMIN_EMAIL,
                name="Administrator",
                hashed_password=get_password_hash(default_password),
                role=UserRole.ADMIN.value,
            )
            db.add(default_user)
            db.commit()

            logger.warning(
                "Default admin user created: email=%s password=%s (change it after first login)",
                settings.DEFAULT_ADMIN_EMAIL,
                default_password,
            )
    finally:
        db.close()
