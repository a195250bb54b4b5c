"""
Integration tests for Organization endpoints.

Covers:
- Creation makes the caller admin; one org per admin
- Listing orgs by admin and role membership
- /me resolution order
- Member-only detail and admin-only update
"""

from __future__ import annotations

import uuid


class TestCreateOrg:
    async def test_creator_becomes_admin(self, client, factory, headers_for):
        user = await factory.user("Founder")
        resp = await client.post(
            "/api/organizations",
            json={"name": "Robotics Club", "description": "We build robots"},
            headers=headers_for(user),
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["name"] == "Robotics Club"
        assert data["admin_user_id"] == str(user.id)

    async def test_second_org_for_same_admin_conflicts(self, client, factory, headers_for):
        user = await factory.user("Founder")
        first = await client.post(
            "/api/organizations", json={"name": "First"}, headers=headers_for(user)
        )
        assert first.status_code == 201

        second = await client.post(
            "/api/organizations", json={"name": "Second"}, headers=headers_for(user)
        )
        assert second.status_code == 409
        assert second.json() == {"error": "Organization already exists for this user"}

    async def test_empty_name_rejected(self, client, factory, headers_for):
        user = await factory.user("Founder")
        resp = await client.post(
            "/api/organizations", json={"name": ""}, headers=headers_for(user)
        )
        assert resp.status_code == 400

    async def test_requires_auth(self, client):
        resp = await client.post("/api/organizations", json={"name": "Anon"})
        assert resp.status_code == 401


class TestListAndGet:
    async def test_list_includes_admin_and_role_orgs(
        self, client, factory, headers_for, org, events
    ):
        user = await factory.user("Uma")
        await factory.role(org, "Member", [(events, "MEMBER")], holders=[user])
        own = await factory.org(user, "Uma's Org")

        resp = await client.get("/api/organizations", headers=headers_for(user))
        assert resp.status_code == 200
        items = {item["id"]: item for item in resp.json()["data"]}
        assert items[str(own.id)]["is_admin"] is True
        assert items[str(org.id)]["is_admin"] is False

    async def test_me_for_admin(self, client, headers_for, admin, org):
        resp = await client.get("/api/organizations/me", headers=headers_for(admin))
        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == str(org.id)
        assert data["is_admin"] is True
        assert data["admin_user"]["id"] == str(admin.id)

    async def test_me_through_role(self, client, factory, headers_for, org, events):
        user = await factory.user("Uma")
        await factory.role(org, "Member", [(events, "MEMBER")], holders=[user])
        resp = await client.get("/api/organizations/me", headers=headers_for(user))
        assert resp.status_code == 200
        assert resp.json()["id"] == str(org.id)
        assert resp.json()["is_admin"] is False

    async def test_me_without_org(self, client, factory, headers_for):
        user = await factory.user("Loner")
        resp = await client.get("/api/organizations/me", headers=headers_for(user))
        assert resp.status_code == 404
        assert resp.json() == {"error": "No organization found"}

    async def test_get_by_id_for_outsider(self, client, factory, headers_for, org):
        outsider = await factory.user("Outsider")
        resp = await client.get(f"/api/organizations/{org.id}", headers=headers_for(outsider))
        assert resp.status_code == 403

    async def test_get_unknown(self, client, headers_for, admin):
        resp = await client.get(
            f"/api/organizations/{uuid.uuid4()}", headers=headers_for(admin)
        )
        assert resp.status_code == 404


class TestUpdateOrg:
    async def test_admin_updates(self, client, headers_for, admin, org):
        resp = await client.put(
            f"/api/organizations/{org.id}",
            json={"description": "Updated", "logo_url": "https://example.com/logo.png"},
            headers=headers_for(admin),
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == org.name
        assert data["description"] == "Updated"
        assert data["logo_url"] == "https://example.com/logo.png"

    async def test_leader_cannot_update(self, client, factory, headers_for, org, events):
        leader = await factory.user("Lee")
        await factory.role(org, "Chair", [(events, "LEADER")], holders=[leader])
        resp = await client.put(
            f"/api/organizations/{org.id}", json={"name": "Hijacked"}, headers=headers_for(leader)
        )
        assert resp.status_code == 403
