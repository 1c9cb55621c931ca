import pytest

from underground.core.security import get_password_hash

from conftest import auth_headers, fetch_invite, fetch_usernames, make_invite, make_user


@pytest.mark.asyncio
async def test_admin_routes_reject_members(client, db):
    await make_user(db, "alice")
    headers = auth_headers("alice")

    for method, url in [
        ("GET", "/api/admin/users"),
        ("GET", "/api/admin/export"),
        ("GET", "/api/admin/invites"),
        ("DELETE", "/api/admin/user/alice"),
    ]:
        res = await client.request(method, url, headers=headers)
        assert res.status_code == 403, url


@pytest.mark.asyncio
async def test_admin_user_list_includes_role(client, db):
    await make_user(db, "root", is_admin=True)
    await make_user(db, "alice")

    res = await client.get("/api/admin/users", headers=auth_headers("root"))

    assert res.status_code == 200
    roles = {u["username"]: u["isAdmin"] for u in res.json()}
    assert roles == {"alice": False, "root": True}
    assert all(u["createdAt"] for u in res.json())


@pytest.mark.asyncio
async def test_delete_user_keeps_invite_history(client, db, session_factory):
    await make_user(db, "root", is_admin=True)
    await make_user(db, "bob")
    await make_invite(db, "root", token="T1", used_by="bob")

    res = await client.delete("/api/admin/user/bob", headers=auth_headers("root"))

    assert res.json() == {"success": True}
    assert await fetch_usernames(session_factory) == ["root"]
    assert (await fetch_invite(session_factory, "T1")).used_by == "bob"


@pytest.mark.asyncio
async def test_delete_unknown_and_self(client, db):
    await make_user(db, "root", is_admin=True)

    missing = await client.delete("/api/admin/user/nobody", headers=auth_headers("root"))
    self_delete = await client.delete("/api/admin/user/root", headers=auth_headers("root"))

    assert missing.status_code == 404
    assert self_delete.status_code == 400


@pytest.mark.asyncio
async def test_grant_admin_is_persisted(client, db):
    await make_user(db, "root", is_admin=True)
    await make_user(db, "alice")

    res = await client.put("/api/admin/user/alice/admin", json={"isAdmin": True}, headers=auth_headers("root"))
    assert res.json()["isAdmin"] is True

    # alice is now admin purely from the stored flag
    assert (await client.get("/api/admin/users", headers=auth_headers("alice"))).status_code == 200


@pytest.mark.asyncio
async def test_export_contains_users_invites_events(client, db):
    await make_user(db, "root", is_admin=True)
    await make_invite(db, "root", token="T1")
    await client.post(
        "/api/events",
        json={"title": "Meetup", "event_date": "2026-05-01"},
        headers=auth_headers("root"),
    )

    res = await client.get("/api/admin/export", headers=auth_headers("root"))

    assert res.status_code == 200
    assert "attachment" in res.headers["content-disposition"]
    data = res.json()
    assert data["users"]["root"]["passwordHash"].startswith("$2")
    assert data["users"]["root"]["isAdmin"] is True
    assert [i["token"] for i in data["invites"]] == ["T1"]
    assert [e["title"] for e in data["events"]] == ["Meetup"]


@pytest.mark.asyncio
async def test_import_merge(client, db, session_factory):
    await make_user(db, "root", is_admin=True)
    await make_user(db, "alice")
    payload = {
        "mode": "merge",
        "users": {
            "alice": {"passwordHash": get_password_hash("x"), "fullName": "Alice Imported"},
            "zed": {"passwordHash": get_password_hash("zedpass"), "markerColor": "blue"},
        },
    }

    res = await client.post("/api/admin/import", json=payload, headers=auth_headers("root"))

    assert res.json() == {"success": True, "count": 3}
    assert await fetch_usernames(session_factory) == ["alice", "root", "zed"]
    login = await client.post("/api/login", json={"username": "zed", "password": "zedpass"})
    assert login.status_code == 200
    assert login.json()["markerColor"] == "blue"


@pytest.mark.asyncio
async def test_import_replace_keeps_acting_admin(client, db, session_factory):
    await make_user(db, "root", is_admin=True)
    await make_user(db, "alice")
    payload = {"mode": "replace", "users": {"zed": {"passwordHash": get_password_hash("z")}}}

    res = await client.post("/api/admin/import", json=payload, headers=auth_headers("root"))

    assert res.json()["count"] == 2
    assert await fetch_usernames(session_factory) == ["root", "zed"]


@pytest.mark.asyncio
async def test_import_rejects_plaintext_passwords(client, db, session_factory):
    await make_user(db, "root", is_admin=True)
    payload = {"users": {"zed": {"passwordHash": "plaintext"}}}

    res = await client.post("/api/admin/import", json=payload, headers=auth_headers("root"))

    assert res.status_code == 400
    assert res.json()["error"] == "InvalidInput"
    assert await fetch_usernames(session_factory) == ["root"]


@pytest.mark.asyncio
async def test_import_cannot_clear_own_admin_flag(client, db, session_factory):
    await make_user(db, "root", is_admin=True)
    payload = {"users": {"root": {"passwordHash": get_password_hash("x"), "isAdmin": False}}}

    res = await client.post("/api/admin/import", json=payload, headers=auth_headers("root"))

    assert res.status_code == 400
    assert res.json()["error"] == "InvalidInput"
    assert (await client.get("/api/admin/users", headers=auth_headers("root"))).status_code == 200


@pytest.mark.asyncio
async def test_import_strips_username_keys(client, db, session_factory):
    await make_user(db, "root", is_admin=True)
    payload = {"users": {" root": {"passwordHash": get_password_hash("x"), "isAdmin": True}}}

    res = await client.post("/api/admin/import", json=payload, headers=auth_headers("root"))

    assert res.json() == {"success": True, "count": 1}
    assert await fetch_usernames(session_factory) == ["root"]
