"""Unit tests for the permission gate."""

import pytest
from sqlalchemy import select

from achievement_registry.kernel.errors import (
    AdministratorRequired,
    InsufficientPermission,
    InvalidPermissionLevel,
    InvalidPrincipal,
)
from achievement_registry.kernel.models.event_log import EventLog, EventType
from achievement_registry.kernel.models.permission import PermissionEntry, PermissionLevel
from achievement_registry.kernel.permissions.permission_service import PermissionGate, RegistryPolicy

from conftest import ADMIN, NULL_PRINCIPAL, STRANGER, TEACHER


@pytest.fixture
def gate(db_session) -> PermissionGate:
    return PermissionGate(db_session, ADMIN, NULL_PRINCIPAL)


class TestPermissionLookup:
    """get_permission_level resolution."""

    async def test_unknown_principal_is_level_zero(self, gate):
        assert await gate.get_permission_level(STRANGER) == 0

    async def test_none_is_level_zero(self, gate):
        assert await gate.get_permission_level(None) == 0

    async def test_bootstrap_admin_is_level_three(self, gate):
        assert await gate.get_permission_level(ADMIN) == PermissionLevel.ADMIN

    async def test_bootstrap_admin_ignores_stored_entry(self, gate):
        await gate.set_permission_level(ADMIN, ADMIN, 1)
        assert await gate.get_permission_level(ADMIN) == 3

    async def test_set_then_get(self, gate):
        await gate.set_permission_level(ADMIN, TEACHER, 2)
        assert await gate.get_permission_level(TEACHER) == 2

    async def test_overwrite_existing_level(self, gate, db_session):
        await gate.set_permission_level(ADMIN, TEACHER, 2)
        await gate.set_permission_level(ADMIN, TEACHER, 1)
        assert await gate.get_permission_level(TEACHER) == 1

        rows = (await db_session.execute(select(PermissionEntry))).scalars().all()
        assert len(rows) == 1
        assert rows[0].granted_by == ADMIN


class TestSetPermissionLevel:
    """Preconditions of set_permission_level."""

    async def test_non_admin_rejected(self, gate):
        await gate.set_permission_level(ADMIN, TEACHER, 3)
        # Level 3 in the table is not the bootstrap administrator
        with pytest.raises(AdministratorRequired):
            await gate.set_permission_level(TEACHER, STRANGER, 1)
        assert await gate.get_permission_level(STRANGER) == 0

    @pytest.mark.parametrize("level", [0, 4, -1, True, "2", 2.0])
    async def test_invalid_levels(self, gate, level):
        with pytest.raises(InvalidPermissionLevel):
            await gate.set_permission_level(ADMIN, TEACHER, level)

    @pytest.mark.parametrize("target", [NULL_PRINCIPAL, "", "   "])
    async def test_null_principal_rejected(self, gate, target):
        with pytest.raises(InvalidPrincipal):
            await gate.set_permission_level(ADMIN, target, 1)

    async def test_admin_check_runs_before_level_check(self, gate):
        with pytest.raises(AdministratorRequired):
            await gate.set_permission_level(STRANGER, TEACHER, 4)

    async def test_level_check_runs_before_principal_check(self, gate):
        with pytest.raises(InvalidPermissionLevel):
            await gate.set_permission_level(ADMIN, NULL_PRINCIPAL, 4)

    async def test_grant_is_audited(self, gate, db_session):
        await gate.set_permission_level(ADMIN, TEACHER, 2)
        events = (await db_session.execute(select(EventLog))).scalars().all()
        assert [e.event_type for e in events] == [EventType.PERMISSION_GRANTED.value]
        assert events[0].entity_id == TEACHER
        assert events[0].payload == {"level": 2, "previous_level": None}


class TestRevokePermission:

    async def test_revoke_existing(self, gate):
        await gate.set_permission_level(ADMIN, TEACHER, 2)
        assert await gate.revoke_permission(ADMIN, TEACHER) is True
        assert await gate.get_permission_level(TEACHER) == 0

    async def test_revoke_missing(self, gate):
        assert await gate.revoke_permission(ADMIN, STRANGER) is False

    async def test_revoke_requires_admin(self, gate):
        await gate.set_permission_level(ADMIN, TEACHER, 3)
        with pytest.raises(AdministratorRequired):
            await gate.revoke_permission(TEACHER, TEACHER)


class TestRequireLevel:

    async def test_zero_minimum_admits_anyone(self, gate):
        await gate.require_level(None, 0, "get_record")

    async def test_insufficient_level(self, gate):
        await gate.set_permission_level(ADMIN, TEACHER, 1)
        with pytest.raises(InsufficientPermission) as exc:
            await gate.require_level(TEACHER, 2, "create_record")
        assert exc.value.details == {
            "operation": "create_record",
            "required_level": 2,
            "level": 1,
        }

    async def test_higher_level_satisfies_lower_minimum(self, gate):
        await gate.set_permission_level(ADMIN, TEACHER, 3)
        await gate.require_level(TEACHER, 2, "create_record")


class TestRegistryPolicy:

    def test_defaults(self):
        policy = RegistryPolicy()
        assert policy.create_min_level == 2
        assert policy.archive_min_level == 3
        assert policy.read_min_level == 0

    def test_read_toggle(self):
        assert RegistryPolicy(read_requires_permission=True).read_min_level == 1
