import pytest

from ballot_ledger.authentication import rbac
from ballot_ledger.domain import Actor, Role
from ballot_ledger.errors import PermissionDenied


@pytest.mark.parametrize("role,permission,allowed", [
    ("VOTER", "cast_vote", True),
    ("VOTER", "manage_voters", False),
    ("VOTER", "view_results", False),
    ("OFFICIAL", "manage_voters", True),
    ("OFFICIAL", "create_elections", True),
    ("OFFICIAL", "view_audit_logs", True),
    ("OFFICIAL", "cast_vote", False),
])
def test_has_permission(role, permission, allowed):
    assert rbac.RBACService().has_permission(role, permission) is allowed


def test_get_permissions():
    perms = rbac.RBACService().get_permissions(Role.VOTER)
    assert rbac.Permission.CAST_VOTE in perms
    assert rbac.Permission.MANAGE_VOTERS not in perms


def test_check_permission_without_actor():
    with pytest.raises(PermissionDenied):
        rbac.check_permission(None, rbac.Permission.VIEW_RESULTS)


def test_require_permission_allows_and_denies():
    @rbac.require_permission(rbac.Permission.CREATE_ELECTIONS)
    def create(title, *, actor):
        return title

    official = Actor(id='admin-1', name='System Administrator', role=Role.OFFICIAL)
    voter = Actor(id='user-1', name='Jane Citizen', role='VOTER')

    assert create('Mayor', actor=official) == 'Mayor'
    with pytest.raises(PermissionDenied):
        create('Mayor', actor=voter)


def test_check_permission_with_unknown_role():
    intruder = Actor(id='user-x', name='Intruder', role='ADMIN')
    with pytest.raises(PermissionDenied):
        rbac.check_permission(intruder, rbac.Permission.MANAGE_VOTERS)
