"""
Role checks for the shop API.
Trust: any logged-in till user may sell; only admins change the catalogue,
record expenses or read the full financial summary.
"""
from tillpoint.models.enums import UserRole
from tillpoint.models.user import User


def is_admin(user: User) -> bool:
    """The role on the stored user row is authoritative, not the token claim."""
    return user is not None and user.role == UserRole.ADMIN.value
