"""Group Routes — status mapping, authentication and the Readers flow over HTTP."""

from uuid import uuid4

from sqlalchemy import func, select

from circle.models.user_group import UserGroup


async def _create(client, auth, user, name="Readers", files=None):
    return await client.post(
        "/api/v1/groups/create", data={"name": name}, files=files, headers=auth(user),
    )


async def test_create_requires_authentication(client, users):
    res = await client.post("/api/v1/groups/create", data={"name": "Readers"})

    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"


async def test_invalid_token_rejected(client, users):
    res = await client.post(
        "/api/v1/groups/create", data={"name": "Readers"},
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert res.status_code == 401


async def test_create_blank_name_is_400(client, users, auth):
    res = await _create(client, auth, users.u1, name="  ")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "REQUEST_REJECTED"


async def test_create_with_picture(client, users, auth, assets):
    res = await _create(
        client, auth, users.u1,
        files={"picture": ("cover.png", b"\x89PNG", "image/png")},
    )

    group = await client.get(f"/api/v1/groups/{res.json()['id']}")
    assert res.status_code == 200
    assert group.json()["picture"].startswith("https://cdn.test/")
    assert assets.uploads[0][1:] == (300, 300)


async def test_list_empty_is_404(client, users):
    res = await client.get("/api/v1/groups/all")

    assert res.status_code == 404


async def test_list_groups_page(client, users, auth):
    for name in ("one", "two", "three"):
        await _create(client, auth, users.u1, name=name)

    res = await client.get("/api/v1/groups/all", params={"page": 1, "limit": 2})

    body = res.json()
    assert res.status_code == 200
    assert len(body["data"]) == 2
    assert body["count"] == 3
    assert body["pages"] == 2


async def test_get_unknown_group_is_404(client, users):
    res = await client.get(f"/api/v1/groups/{uuid4()}")

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_get_group_reports_membership_for_caller(client, users, auth):
    group_id = (await _create(client, auth, users.u1)).json()["id"]

    as_creator = await client.get(f"/api/v1/groups/{group_id}", headers=auth(users.u1))
    anonymous = await client.get(f"/api/v1/groups/{group_id}")

    assert as_creator.json()["is_member"] is True
    assert anonymous.json()["is_member"] is False


async def test_update_group_creator_only(client, users, auth):
    group_id = (await _create(client, auth, users.u1)).json()["id"]

    denied = await client.patch(
        f"/api/v1/groups/{group_id}", data={"name": "Mine"}, headers=auth(users.u2),
    )
    allowed = await client.patch(
        f"/api/v1/groups/{group_id}", data={"name": "Book Club"}, headers=auth(users.u1),
    )

    assert denied.status_code == 400
    assert allowed.status_code == 200
    assert (await client.get(f"/api/v1/groups/{group_id}")).json()["name"] == "Book Club"


async def test_malformed_group_id_is_400(client, users):
    res = await client.get("/api/v1/groups/not-a-uuid")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_readers_flow_over_http(client, users, auth, test_db):
    created = await _create(client, auth, users.u1)
    group_id = created.json()["id"]
    assert created.status_code == 200

    detail = (await client.get(f"/api/v1/groups/{group_id}", headers=auth(users.u1))).json()
    assert detail["is_member"] and detail["members_count"] == 1

    joined = await client.post(f"/api/v1/groups/{group_id}/join", headers=auth(users.u2))
    assert joined.status_code == 200
    assert joined.json()["username"] == "bob"
    assert (await client.get(f"/api/v1/groups/{group_id}")).json()["members_count"] == 2
    again = await client.post(f"/api/v1/groups/{group_id}/join", headers=auth(users.u2))
    assert again.status_code == 400

    posted = await client.post(
        "/api/v1/posts/create",
        data={"content": "hi", "group_id": group_id},
        headers=auth(users.u1),
    )
    assert posted.status_code == 200
    for reader in (users.u1, users.u2):
        feed = await client.get(f"/api/v1/groups/{group_id}/posts", headers=auth(reader))
        assert [p["content"] for p in feed.json()["data"]] == ["hi"]
    outsider = await client.get(f"/api/v1/groups/{group_id}/posts", headers=auth(users.u3))
    assert outsider.status_code == 400

    left = await client.post(f"/api/v1/groups/{group_id}/leave", headers=auth(users.u2))
    assert left.status_code == 200

    deleted = await client.delete(f"/api/v1/groups/{group_id}", headers=auth(users.u1))
    assert deleted.status_code == 200
    assert (await client.get(f"/api/v1/groups/{group_id}")).status_code == 404
    remaining = await test_db.scalar(select(func.count()).select_from(UserGroup))
    assert remaining == 0


async def test_overlong_group_name_is_400(client, users, auth):
    res = await _create(client, auth, users.u1, name="x" * 101)

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"
    assert (await client.get("/api/v1/groups/all")).status_code == 404


async def test_overlong_group_update_is_400(client, users, auth):
    group_id = (await _create(client, auth, users.u1)).json()["id"]

    res = await client.patch(
        f"/api/v1/groups/{group_id}", data={"description": "d" * 2001},
        headers=auth(users.u1),
    )

    assert res.status_code == 400
