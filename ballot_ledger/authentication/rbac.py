# ballot_ledger/authentication/rbac.py

from enum import Enum
from functools import wraps
import logging

from ballot_ledger.domain import Role
from ballot_ledger.errors import PermissionDenied

# Role-Based Access Control for the acting user handed in by the calling layer

logger = logging.getLogger(__name__)


class Permission(Enum):
    CAST_VOTE = "cast_vote"
    VIEW_OWN_STATUS = "view_own_status"
    MANAGE_VOTERS = "manage_voters"
    CREATE_ELECTIONS = "create_elections"
    VIEW_RESULTS = "view_results"
    VIEW_AUDIT_LOGS = "view_audit_logs"


# Role -> Permissions mapping
ROLE_PERMISSIONS = {
    Role.VOTER: [
        Permission.CAST_VOTE,
        Permission.VIEW_OWN_STATUS,
    ],
    Role.OFFICIAL: [
        Permission.MANAGE_VOTERS,
        Permission.CREATE_ELECTIONS,
        Permission.VIEW_RESULTS,
        Permission.VIEW_AUDIT_LOGS,
    ],
}


class RBACService:
    def has_permission(self, user_role, permission):
        if isinstance(user_role, str):
            user_role = Role(user_role)
        if isinstance(permission, str):
            permission = Permission(permission)
        return permission in ROLE_PERMISSIONS.get(user_role, [])

    def get_permissions(self, user_role):
        if isinstance(user_role, str):
            user_role = Role(user_role)
        return ROLE_PERMISSIONS.get(user_role, [])


_rbac = RBACService()


def check_permission(actor, permission):
    if actor is None:
        raise PermissionDenied("No acting user supplied")
    try:
        role = Role(actor.role)
    except (AttributeError, ValueError) as e:
        raise PermissionDenied("Acting user has no recognised role") from e
    if not _rbac.has_permission(role, permission):
        logger.warning("Denied %s to %s (%s)", permission.value, actor.id, role.value)
        raise PermissionDenied(f"{role.value} may not {permission.value}")


# Decorator for store methods taking an `actor` keyword argument
def require_permission(permission):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            check_permission(kwargs.get('actor'), permission)
            return func(*args, **kwargs)
        return wrapper
    return decorator
