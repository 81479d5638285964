"""Per-operation role allow-lists.

Roles form a closed set with no hierarchy: an Admin is not implicitly an
Employee.  Each operation names exactly the roles it admits.
"""

from app.core.errors import ForbiddenError
from app.models.user import UserRole
from app.schemas.auth import Principal

ANY_ROLE: frozenset[UserRole] = frozenset(UserRole)
ADMIN_ONLY: frozenset[UserRole] = frozenset({UserRole.ADMIN})

SUBMIT_PAYMENT = ANY_ROLE
VIEW_OWN_PAYMENTS = ANY_ROLE
VIEW_ALL_PAYMENTS = ADMIN_ONLY
VERIFY_PAYMENT = ADMIN_ONLY
PROCESS_PAYMENT = ADMIN_ONLY
MANAGE_USERS = ADMIN_ONLY


def authorize(principal: Principal, allowed: frozenset[UserRole]) -> Principal:
    """Return *principal* if its role is on *allowed*, else raise ``ForbiddenError``."""
    if principal.role not in allowed:
        raise ForbiddenError()
    return principal
