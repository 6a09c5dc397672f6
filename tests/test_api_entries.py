"""Integration tests for /api/v1/feed-entries and /api/v1/sleep-sessions."""

import uuid


def _feed(baby_id, **extra) -> dict:
    return {"baby_id": str(baby_id), "date": "2025-03-01", "time": "08:30",
            "feed_type": "bottle", **extra}


def _sleep(baby_id, **extra) -> dict:
    return {"baby_id": str(baby_id), "date": "2025-03-01", "start_time": "20:00", **extra}


class TestFamilyScenario:
    async def test_owner_and_member_rights(self, client, alice, headers_for, caller_factory):
        bob = caller_factory("b")
        a, b = headers_for(alice), headers_for(bob)

        family = (await client.post("/api/v1/families", headers=a, json={"name": "Smiths"})).json()
        members = (await client.get(f"/api/v1/families/{family['id']}/members", headers=a)).json()
        assert [(m["role"], m["status"]) for m in members] == [("owner", "active")]

        baby = (await client.post(
            f"/api/v1/families/{family['id']}/babies", headers=a, json={"name": "Jo"},
        )).json()
        invitation = (await client.post(
            f"/api/v1/families/{family['id']}/invitations", headers=a,
            json={"email": "b@example.com", "role": "parent"},
        )).json()

        resp = await client.post(f"/api/v1/invitations/token/{invitation['token']}/accept", headers=b)
        assert resp.status_code == 200
        assert (resp.json()["role"], resp.json()["status"]) == ("parent", "active")

        resp = await client.post("/api/v1/feed-entries", headers=b, json=_feed(baby["id"], did_pee=True))
        assert resp.status_code == 201
        b_entry = resp.json()
        assert b_entry["did_pee"] is True
        a_entry = (await client.post("/api/v1/feed-entries", headers=a, json=_feed(baby["id"]))).json()

        # the owner may delete entries created by others
        resp = await client.delete(f"/api/v1/feed-entries/{b_entry['id']}", headers=a)
        assert resp.status_code == 204
        resp = await client.delete(f"/api/v1/feed-entries/{a_entry['id']}", headers=b)
        assert resp.status_code == 403


class TestFeedEntries:
    async def test_create_and_read(self, client, household, alice, bob, headers_for):
        baby_id = household["baby"].id
        resp = await client.post(
            "/api/v1/feed-entries", headers=headers_for(alice),
            json=_feed(baby_id, feed_type="breast", starting_breast="left", temperature=36.8),
        )
        assert resp.status_code == 201
        entry = resp.json()
        assert entry["date"] == "2025-03-01"
        assert entry["time"] == "08:30"
        assert entry["created_by_display_name"] == "Alice"

        resp = await client.get(f"/api/v1/feed-entries/{entry['id']}", headers=headers_for(bob))
        assert resp.status_code == 200
        assert resp.json()["starting_breast"] == "left"

    async def test_bad_time_rejected(self, client, household, alice, headers_for):
        resp = await client.post(
            "/api/v1/feed-entries", headers=headers_for(alice),
            json=_feed(household["baby"].id, time="8.30am"),
        )
        assert resp.status_code == 400

    async def test_listing_scopes(self, client, household, alice, bob, headers_for):
        baby_id = household["baby"].id
        for day in ("2025-03-01", "2025-03-02", "2025-03-05"):
            await client.post(
                "/api/v1/feed-entries", headers=headers_for(alice), json=_feed(baby_id, date=day),
            )
        h = headers_for(bob)

        resp = await client.get("/api/v1/feed-entries", params={"baby_id": str(baby_id)}, headers=h)
        assert [e["date"] for e in resp.json()] == ["2025-03-05", "2025-03-02", "2025-03-01"]

        resp = await client.get(
            "/api/v1/feed-entries/date/2025-03-02", params={"baby_id": str(baby_id)}, headers=h,
        )
        assert len(resp.json()) == 1

        resp = await client.get(
            "/api/v1/feed-entries/range", headers=h,
            params={"baby_id": str(baby_id), "start": "2025-03-01", "end": "2025-03-02"},
        )
        assert len(resp.json()) == 2

        resp = await client.get(
            "/api/v1/feed-entries", params={"family_id": str(household["family"].id)}, headers=h,
        )
        assert len(resp.json()) == 3
        resp = await client.get("/api/v1/feed-entries", headers=h)
        assert len(resp.json()) == 3

    async def test_bad_date_in_path(self, client, household, alice, headers_for):
        resp = await client.get(
            "/api/v1/feed-entries/date/03-02-2025",
            params={"baby_id": str(household["baby"].id)}, headers=headers_for(alice),
        )
        assert resp.status_code == 400

    async def test_update_rules(self, client, household, alice, bob, headers_for):
        entry = (await client.post(
            "/api/v1/feed-entries", headers=headers_for(alice), json=_feed(household["baby"].id),
        )).json()
        url = f"/api/v1/feed-entries/{entry['id']}"

        resp = await client.put(url, headers=headers_for(bob), json={"did_poo": True})
        assert resp.status_code == 403
        resp = await client.put(url, headers=headers_for(alice), json={"did_poo": True})
        assert resp.status_code == 200
        assert resp.json()["did_poo"] is True

    async def test_missing_entry(self, client, alice, headers_for):
        resp = await client.get(f"/api/v1/feed-entries/{uuid.uuid4()}", headers=headers_for(alice))
        assert resp.status_code == 404
        resp = await client.delete(f"/api/v1/feed-entries/{uuid.uuid4()}", headers=headers_for(alice))
        assert resp.status_code == 404


class TestSleepSessions:
    async def test_active_stop_flow(self, client, household, alice, bob, headers_for):
        baby_id = str(household["baby"].id)
        resp = await client.get(
            "/api/v1/sleep-sessions/active", params={"baby_id": baby_id}, headers=headers_for(bob),
        )
        assert resp.status_code == 200
        assert resp.json() is None

        resp = await client.post(
            "/api/v1/sleep-sessions", headers=headers_for(alice),
            json=_sleep(baby_id, start_time="22:30", is_active=True),
        )
        assert resp.status_code == 201
        running = resp.json()

        resp = await client.post(
            "/api/v1/sleep-sessions", headers=headers_for(bob), json=_sleep(baby_id, is_active=True),
        )
        assert resp.status_code == 409

        resp = await client.get(
            "/api/v1/sleep-sessions/active", params={"baby_id": baby_id}, headers=headers_for(bob),
        )
        assert resp.json()["id"] == running["id"]

        stop_url = f"/api/v1/sleep-sessions/{running['id']}/stop"
        resp = await client.post(
            stop_url, headers=headers_for(bob), json={"end_time": "06:15", "duration": 465},
        )
        assert resp.status_code == 200
        stopped = resp.json()
        assert stopped["is_active"] is False
        assert stopped["end_time"] == "06:15"
        assert stopped["duration"] == 465

        resp = await client.post(
            stop_url, headers=headers_for(bob), json={"end_time": "07:00", "duration": 510},
        )
        assert resp.status_code == 409

    async def test_negative_duration_rejected(self, client, household, alice, headers_for):
        resp = await client.post(
            "/api/v1/sleep-sessions", headers=headers_for(alice),
            json=_sleep(household["baby"].id, end_time="21:00", duration=-5),
        )
        assert resp.status_code == 400

    async def test_range_and_delete(self, client, household, alice, bob, headers_for):
        baby_id = str(household["baby"].id)
        session = (await client.post(
            "/api/v1/sleep-sessions", headers=headers_for(bob),
            json=_sleep(baby_id, end_time="21:30", duration=90),
        )).json()
        assert session["created_by_display_name"] == "New Member"

        resp = await client.get(
            "/api/v1/sleep-sessions/range", headers=headers_for(alice),
            params={"baby_id": baby_id, "start": "2025-03-01", "end": "2025-02-01"},
        )
        assert resp.status_code == 400

        resp = await client.delete(f"/api/v1/sleep-sessions/{session['id']}", headers=headers_for(alice))
        assert resp.status_code == 204
