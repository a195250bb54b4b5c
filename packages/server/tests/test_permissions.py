"""
Tests for committee permission resolution.

Covers:
- PermissionLevel total order and max()
- highest_level over role grants
- resolve_permission: admin override, max across roles, unknown ids
- check_access / require_committee_access decisions and errors
- Grant changes take effect on the next call (no caching)
"""

from __future__ import annotations

import uuid

import pytest

from orgboard.core.errors import AuthorizationError, BadRequestError
from orgboard.core.permissions import (
    check_access,
    get_user_organization,
    highest_level,
    is_org_admin,
    require_committee_access,
    resolve_permission,
    role_levels,
)
from orgboard.models.committee import RoleCommitteePermission
from orgboard_shared.schemas.common import AccessRequirement, PermissionLevel

NONE = PermissionLevel.NONE
MEMBER = PermissionLevel.MEMBER
LEADER = PermissionLevel.LEADER


# ---------------------------------------------------------------------------
# Unit Tests: ordering
# ---------------------------------------------------------------------------

class TestPermissionLevelOrder:
    def test_total_order(self):
        assert NONE < MEMBER < LEADER
        assert LEADER > MEMBER > NONE
        assert MEMBER >= MEMBER and MEMBER <= MEMBER

    def test_max_picks_highest(self):
        assert max([MEMBER, NONE, LEADER, MEMBER]) == LEADER
        assert max([NONE, MEMBER]) == MEMBER

    def test_sorted(self):
        assert sorted([LEADER, NONE, MEMBER]) == [NONE, MEMBER, LEADER]

    def test_values_are_wire_strings(self):
        assert PermissionLevel("LEADER") is LEADER
        assert MEMBER.value == "MEMBER"


class TestHighestLevel:
    def test_empty_is_none(self):
        assert highest_level([]) == NONE

    def test_strings_and_enums(self):
        assert highest_level(["MEMBER", MEMBER]) == MEMBER
        assert highest_level(["MEMBER", "LEADER"]) == LEADER

    def test_order_does_not_matter(self):
        assert highest_level([LEADER, MEMBER]) == highest_level([MEMBER, LEADER]) == LEADER

    def test_unknown_values_ignored(self):
        assert highest_level(["OWNER", "MEMBER"]) == MEMBER


# ---------------------------------------------------------------------------
# Integration Tests: resolver
# ---------------------------------------------------------------------------

class TestResolvePermission:
    async def test_admin_is_leader_without_roles(self, session, admin, events):
        assert await resolve_permission(session, admin.id, events.id) == LEADER

    async def test_no_roles_is_none(self, session, factory, events):
        outsider = await factory.user("Outsider")
        assert await resolve_permission(session, outsider.id, events.id) == NONE

    async def test_max_across_roles(self, session, factory, org, events):
        user = await factory.user("Uma")
        await factory.role(org, "Volunteer", [(events, "MEMBER")], holders=[user])
        await factory.role(org, "Chair", [(events, "LEADER")], holders=[user])
        assert await resolve_permission(session, user.id, events.id) == LEADER

    async def test_grant_on_other_committee_does_not_leak(self, session, factory, org, events):
        finance = await factory.committee(org, "Finance")
        user = await factory.user("Uma")
        await factory.role(org, "Treasurer", [(finance, "LEADER")], holders=[user])
        assert await resolve_permission(session, user.id, events.id) == NONE
        assert await resolve_permission(session, user.id, finance.id) == LEADER

    async def test_role_without_holder_grants_nothing(self, session, factory, org, events):
        user = await factory.user("Uma")
        await factory.role(org, "Chair", [(events, "LEADER")])
        assert await resolve_permission(session, user.id, events.id) == NONE

    async def test_unknown_ids_resolve_to_none(self, session, admin, events):
        assert await resolve_permission(session, admin.id, uuid.uuid4()) == NONE
        assert await resolve_permission(session, uuid.uuid4(), events.id) == NONE

    async def test_role_levels_match_single_resolution(self, session, factory, org, events):
        finance = await factory.committee(org, "Finance")
        marketing = await factory.committee(org, "Marketing")
        user = await factory.user("Uma")
        await factory.role(org, "Volunteer", [(events, "MEMBER"), (finance, "MEMBER")], holders=[user])
        await factory.role(org, "Chair", [(events, "LEADER")], holders=[user])

        levels = await role_levels(session, user.id)
        assert levels == {events.id: LEADER, finance.id: MEMBER}
        for committee in (events, finance, marketing):
            expected = levels.get(committee.id, NONE)
            assert await resolve_permission(session, user.id, committee.id) == expected

        assert await role_levels(session, user.id, [finance.id]) == {finance.id: MEMBER}

    async def test_admin_of_other_org_gets_no_override(self, session, factory, events):
        other_admin = await factory.user("OtherAdmin")
        await factory.org(other_admin, "Chess Club")
        assert await resolve_permission(session, other_admin.id, events.id) == NONE

    async def test_grant_changes_apply_on_next_call(
        self, session, session_factory, factory, org, events
    ):
        user = await factory.user("Uma")
        role = await factory.role(org, "Volunteer", [(events, "MEMBER")], holders=[user])
        assert await resolve_permission(session, user.id, events.id) == MEMBER

        async with session_factory() as other:
            perm = (
                await other.execute(
                    RoleCommitteePermission.__table__.select().where(
                        RoleCommitteePermission.role_id == role.id
                    )
                )
            ).first()
            await other.execute(
                RoleCommitteePermission.__table__.update()
                .where(RoleCommitteePermission.id == perm.id)
                .values(permission_level="LEADER")
            )
            await other.commit()

        assert await resolve_permission(session, user.id, events.id) == LEADER


class TestIsOrgAdmin:
    async def test_admin_of_given_org(self, session, admin, org):
        assert await is_org_admin(session, admin.id, org.id)
        assert await is_org_admin(session, admin.id)

    async def test_not_admin(self, session, factory, org):
        user = await factory.user("Uma")
        assert not await is_org_admin(session, user.id, org.id)
        assert not await is_org_admin(session, user.id)


# ---------------------------------------------------------------------------
# Integration Tests: access decisions
# ---------------------------------------------------------------------------

class TestCheckAccess:
    async def test_member_meets_member_not_leader(self, session, factory, org, events):
        user = await factory.user("Vic")
        await factory.role(org, "Member", [(events, "MEMBER")], holders=[user])

        decision = await check_access(session, user.id, events.id, AccessRequirement.MEMBER)
        assert decision.allowed and decision.level == MEMBER and not decision.is_admin

        decision = await check_access(session, user.id, events.id, AccessRequirement.LEADER)
        assert not decision.allowed and decision.level == MEMBER

    async def test_admin_meets_everything(self, session, admin, events):
        for required in AccessRequirement:
            decision = await check_access(session, admin.id, events.id, required)
            assert decision.allowed
            assert decision.level == LEADER
            assert decision.is_admin

    async def test_leader_is_not_admin(self, session, factory, org, events):
        user = await factory.user("Uma")
        await factory.role(org, "Chair", [(events, "LEADER")], holders=[user])
        decision = await check_access(session, user.id, events.id, AccessRequirement.ADMIN)
        assert not decision.allowed
        assert decision.level == LEADER and not decision.is_admin

    async def test_missing_committee_id(self, session, admin, org):
        with pytest.raises(BadRequestError):
            await check_access(session, admin.id, None, AccessRequirement.MEMBER)

        decision = await check_access(session, admin.id, None, AccessRequirement.ADMIN)
        assert decision.allowed and decision.is_admin

    async def test_unknown_committee_denied(self, session, admin):
        decision = await check_access(session, admin.id, uuid.uuid4(), AccessRequirement.MEMBER)
        assert not decision.allowed
        assert decision.level == NONE

    async def test_require_raises_with_message(self, session, factory, org, events):
        user = await factory.user("Vic")
        await factory.role(org, "Member", [(events, "MEMBER")], holders=[user])
        with pytest.raises(AuthorizationError) as exc_info:
            await require_committee_access(session, user.id, events.id, AccessRequirement.LEADER)
        assert exc_info.value.status_code == 403
        assert "Leader access required" in exc_info.value.message


class TestGetUserOrganization:
    async def test_admin_org_first(self, session, admin, org):
        found, is_admin = await get_user_organization(session, admin.id)
        assert found.id == org.id and is_admin

    async def test_org_through_role(self, session, factory, org, events):
        user = await factory.user("Uma")
        await factory.role(org, "Member", [(events, "MEMBER")], holders=[user])
        found, is_admin = await get_user_organization(session, user.id)
        assert found.id == org.id and not is_admin

    async def test_no_org(self, session, factory):
        user = await factory.user("Loner")
        assert await get_user_organization(session, user.id) == (None, False)
