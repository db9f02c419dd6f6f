"""AuthorizationService: the user → role → permissions walk."""

import uuid

import pytest

from app.core.errors import AppError, ErrorKind
from app.rbac.authorization import Decision
from app.rbac.identity import AuthenticatedIdentity
from tests.fakes import make_role, make_user


def identity_of(user) -> AuthenticatedIdentity:
    return AuthenticatedIdentity(user_id=user.id, email=user.email)


class TestCheckPermission:
    async def test_admin_wildcard_grants_any_pair(self, world, authorization):
        decision = await authorization.check_permission(world.admin.id, "billing", "refund")
        assert decision is Decision.GRANTED

    async def test_user_role_reads_users(self, world, authorization):
        assert await authorization.check_permission(world.regular.id, "users", "read") is Decision.GRANTED

    async def test_user_role_cannot_delete_users(self, world, authorization):
        assert await authorization.check_permission(world.regular.id, "users", "delete") is Decision.DENIED

    async def test_role_without_permissions_is_denied_without_permission_lookup(self, world, authorization):
        decision = await authorization.check_permission(world.guest.id, "users", "read")

        assert decision is Decision.DENIED
        assert not any(op == "find_by_ids" for op, _ in world.permissions.calls)

    async def test_inactive_user_is_denied_before_role_lookup(self, world, authorization):
        decision = await authorization.check_permission(world.inactive.id, "users", "read")

        assert decision is Decision.DENIED
        assert world.roles.calls == []
        assert world.permissions.calls == []

    async def test_missing_user_is_integrity_fault(self, authorization):
        with pytest.raises(AppError) as exc_info:
            await authorization.check_permission(uuid.uuid4(), "users", "read")
        assert exc_info.value.kind is ErrorKind.NOT_FOUND_INTEGRITY_FAULT
        assert exc_info.value.fields["entity"] == "User"

    async def test_soft_deleted_user_is_integrity_fault(self, world, authorization):
        with pytest.raises(AppError) as exc_info:
            await authorization.check_permission(world.deleted.id, "users", "read")
        assert exc_info.value.kind is ErrorKind.NOT_FOUND_INTEGRITY_FAULT

    async def test_missing_role_is_integrity_fault(self, world, authorization):
        orphan = world.users.add(make_user(make_role("GHOST")))

        with pytest.raises(AppError) as exc_info:
            await authorization.check_permission(orphan.id, "users", "read")
        assert exc_info.value.kind is ErrorKind.NOT_FOUND_INTEGRITY_FAULT
        assert exc_info.value.fields["entity"] == "Role"

    async def test_dangling_permission_ids_are_skipped(self, world, authorization):
        # A permission deleted from storage but still linked to the role.
        del world.permissions.rows[world.perms["users:read"].id]

        assert await authorization.check_permission(world.regular.id, "users", "read") is Decision.DENIED

    async def test_revocation_applies_on_next_check(self, world, authorization):
        assert await authorization.check_permission(world.regular.id, "users", "read") is Decision.GRANTED

        world.user_role.permissions = []

        assert await authorization.check_permission(world.regular.id, "users", "read") is Decision.DENIED

    async def test_storage_failure_propagates(self, world, authorization):
        world.roles.failing = True

        with pytest.raises(AppError) as exc_info:
            await authorization.check_permission(world.regular.id, "users", "read")
        assert exc_info.value.kind is ErrorKind.UPSTREAM_FAILURE

    async def test_repeated_checks_agree(self, world, authorization):
        first = await authorization.check_permission(world.regular.id, "roles", "read")
        second = await authorization.check_permission(world.regular.id, "roles", "read")
        assert first is second is Decision.DENIED


class TestAuthorize:
    async def test_single_code(self, world, authorization):
        assert await authorization.authorize(identity_of(world.regular), "users:read") is Decision.GRANTED

    async def test_all_codes_must_be_granted(self, world, authorization):
        decision = await authorization.authorize(identity_of(world.regular), ["users:read", "users:delete"])
        assert decision is Decision.DENIED

    async def test_admin_passes_every_code(self, world, authorization):
        decision = await authorization.authorize(
            identity_of(world.admin), ["users:read", "roles:delete", "anything:else"]
        )
        assert decision is Decision.GRANTED

    async def test_empty_requirements_are_granted(self, world, authorization):
        assert await authorization.authorize(identity_of(world.guest), []) is Decision.GRANTED
        assert world.users.calls == []

    async def test_stops_at_first_denial(self, world, authorization):
        decision = await authorization.authorize(
            identity_of(world.guest), ["users:read", "users:update", "users:delete"]
        )

        assert decision is Decision.DENIED
        assert [op for op, _ in world.users.calls] == ["find_by_id"]

    async def test_malformed_code_is_not_a_denial(self, world, authorization):
        with pytest.raises(AppError) as exc_info:
            await authorization.authorize(identity_of(world.admin), "users")
        assert exc_info.value.kind is ErrorKind.INVALID_FORMAT

    async def test_malformed_code_after_denial_is_never_parsed(self, world, authorization):
        decision = await authorization.authorize(identity_of(world.guest), ["users:read", "not-a-code"])
        assert decision is Decision.DENIED

    async def test_malformed_code_raises_before_later_checks(self, world, authorization):
        with pytest.raises(AppError):
            await authorization.authorize(identity_of(world.admin), ["users:read", "bad", "roles:read"])
        assert len(world.users.calls) == 1
