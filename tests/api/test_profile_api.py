"""Profile API: caller identified by the gateway's subject header."""

from httpx import AsyncClient

_SUBJECT = {"X-Auth-Subject": "auth0|me"}


async def test_profile_requires_subject_header(client: AsyncClient) -> None:
    response = await client.get("/api/v1/profile")

    assert response.status_code == 401
    assert response.json()["error"] == "AUTHENTICATION_ERROR"


async def test_login_sync_then_read_profile(client: AsyncClient, idp) -> None:
    created = await client.post(
        "/api/v1/profile/login-sync",
        json={"email": "me@x.com", "name": "Me", "picture": "https://cdn.test/me.png"},
        headers=_SUBJECT,
    )
    assert created.status_code == 200
    assert created.json()["outcome"] == "applied"

    repeat = await client.post("/api/v1/profile/login-sync", json={"email": "me@x.com"}, headers=_SUBJECT)
    assert repeat.json()["outcome"] == "no_op"

    profile = await client.get("/api/v1/profile", headers=_SUBJECT)
    assert profile.status_code == 200
    assert profile.json()["avatar_url"] == "https://cdn.test/me.png"
    assert profile.json()["created_by"] == "auth0|me"
    assert idp.calls == []


async def test_update_profile(client: AsyncClient, idp, seed_user) -> None:
    remote = idp.add("me@x.com")
    await seed_user("me@x.com", remote_ref=remote.user_id)

    response = await client.put(
        "/api/v1/profile", json={"name": "Renamed"}, headers={"X-Auth-Subject": remote.user_id}
    )

    assert response.status_code == 200
    assert response.json()["user"]["display_name"] == "Renamed"
    assert idp.identities[remote.user_id].name == "Renamed"


async def test_update_profile_remote_failure_is_partial(client: AsyncClient, idp, seed_user) -> None:
    remote = idp.add("me@x.com")
    await seed_user("me@x.com", remote_ref=remote.user_id)
    idp.fail("update_identity")

    response = await client.put(
        "/api/v1/profile", json={"name": "Renamed"}, headers={"X-Auth-Subject": remote.user_id}
    )

    assert response.status_code == 502
    body = response.json()
    assert body["error"] == "REMOTE_STATE_DIVERGED"
    assert body["details"]["retry_recommended"] is True
    profile = await client.get("/api/v1/profile", headers={"X-Auth-Subject": remote.user_id})
    assert profile.json()["display_name"] == "Renamed"
