"""Integration tests for the invitation endpoints."""

import uuid


async def _invite(client, headers, family_id, email, role="parent"):
    return await client.post(
        f"/api/v1/families/{family_id}/invitations", headers=headers,
        json={"email": email, "role": role, "message": "Join us"},
    )


class TestInvitations:
    async def test_invite_accept_flow(self, client, household, alice, carol, headers_for):
        family_id = household["family"].id
        resp = await _invite(client, headers_for(alice), family_id, carol.email, "grandparent")
        assert resp.status_code == 201
        invitation = resp.json()
        assert invitation["status"] == "pending"

        resp = await client.get("/api/v1/invitations/pending", headers=headers_for(carol))
        assert [i["id"] for i in resp.json()] == [invitation["id"]]

        resp = await client.get(
            f"/api/v1/invitations/token/{invitation['token']}", headers=headers_for(carol),
        )
        assert resp.status_code == 200
        assert resp.json()["role"] == "grandparent"

        resp = await client.post(
            f"/api/v1/invitations/token/{invitation['token']}/accept", headers=headers_for(carol),
        )
        assert resp.status_code == 200
        member = resp.json()
        assert member["user_id"] == carol.user_id
        assert member["role"] == "grandparent"

        resp = await client.get(f"/api/v1/families/{family_id}", headers=headers_for(carol))
        assert resp.status_code == 200

    async def test_accept_unknown_token(self, client, carol, headers_for):
        resp = await client.post(
            "/api/v1/invitations/token/nope/accept", headers=headers_for(carol),
        )
        assert resp.status_code == 404

    async def test_invite_existing_member_conflicts(self, client, household, alice, bob, headers_for):
        resp = await _invite(client, headers_for(alice), household["family"].id, bob.email)
        assert resp.status_code == 409

    async def test_invalid_email(self, client, household, alice, headers_for):
        resp = await _invite(client, headers_for(alice), household["family"].id, "not-an-email")
        assert resp.status_code == 400

    async def test_stranger_cannot_invite(self, client, household, mallory, headers_for):
        resp = await _invite(client, headers_for(mallory), household["family"].id, "x@example.com")
        assert resp.status_code == 403

    async def test_decline(self, client, household, alice, carol, headers_for):
        family_id = household["family"].id
        token = (await _invite(client, headers_for(alice), family_id, carol.email)).json()["token"]

        resp = await client.post(
            f"/api/v1/invitations/token/{token}/decline", headers=headers_for(carol),
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "declined"

        resp = await client.get(
            f"/api/v1/families/{family_id}/invitations", headers=headers_for(alice),
        )
        assert resp.json() == []

    async def test_cancel(self, client, household, alice, bob, carol, headers_for):
        family_id = household["family"].id
        invitation = (await _invite(client, headers_for(alice), family_id, carol.email)).json()
        url = f"/api/v1/invitations/{invitation['id']}"

        resp = await client.delete(url, headers=headers_for(bob))
        assert resp.status_code == 403
        resp = await client.delete(url, headers=headers_for(alice))
        assert resp.status_code == 204
        resp = await client.delete(f"/api/v1/invitations/{uuid.uuid4()}", headers=headers_for(alice))
        assert resp.status_code == 404
