import pytest

from conftest import auth_headers, make_user


async def create_event(client, username, **fields):
    body = {"title": "Meetup", "event_date": "2026-03-14", **fields}
    res = await client.post("/api/events", json=body, headers=auth_headers(username))
    assert res.status_code == 201, res.text
    return res.json()


@pytest.mark.asyncio
async def test_month_view_shows_community_and_own_personal(client, db):
    await make_user(db, "alice")
    await make_user(db, "bob")
    await create_event(client, "alice", title="Potluck", event_time="18:00")
    await create_event(client, "alice", title="Dentist", visibility="personal")
    await create_event(client, "bob", title="Bob private", visibility="personal")
    await create_event(client, "bob", title="April thing", event_date="2026-04-01")

    res = await client.get("/api/events", params={"month": "2026-03"}, headers=auth_headers("alice"))

    assert res.status_code == 200
    titles = sorted(e["title"] for e in res.json())
    assert titles == ["Dentist", "Potluck"]


@pytest.mark.asyncio
async def test_month_must_be_well_formed(client, db):
    await make_user(db, "alice")
    res = await client.get("/api/events", params={"month": "2026-13"}, headers=auth_headers("alice"))
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_invalid_event_date(client, db):
    await make_user(db, "alice")
    res = await client.post(
        "/api/events",
        json={"title": "x", "event_date": "14/03/2026"},
        headers=auth_headers("alice"),
    )
    assert res.status_code == 400
    assert res.json()["error"] == "InvalidInput"


@pytest.mark.asyncio
async def test_only_creator_edits(client, db):
    await make_user(db, "alice")
    await make_user(db, "bob")
    event = await create_event(client, "alice")

    denied = await client.put(f"/api/events/{event['id']}", json={"title": "Mine"}, headers=auth_headers("bob"))
    allowed = await client.put(
        f"/api/events/{event['id']}",
        json={"title": "Renamed", "event_time": "09:30"},
        headers=auth_headers("alice"),
    )

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["title"] == "Renamed"
    assert allowed.json()["event_time"] == "09:30"


@pytest.mark.asyncio
async def test_admin_can_delete_any_event(client, db):
    await make_user(db, "alice")
    await make_user(db, "bob")
    await make_user(db, "root", is_admin=True)
    event = await create_event(client, "alice")

    denied = await client.delete(f"/api/events/{event['id']}", headers=auth_headers("bob"))
    allowed = await client.delete(f"/api/events/{event['id']}", headers=auth_headers("root"))
    gone = await client.delete(f"/api/events/{event['id']}", headers=auth_headers("root"))

    assert denied.status_code == 403
    assert allowed.json() == {"success": True}
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_other_members_personal_events_are_hidden(client, db):
    await make_user(db, "alice")
    await make_user(db, "bob")
    event = await create_event(client, "alice", visibility="personal")

    res = await client.put(f"/api/events/{event['id']}", json={"title": "peek"}, headers=auth_headers("bob"))

    assert res.status_code == 404
    assert res.json()["error"] == "EventNotFound"
