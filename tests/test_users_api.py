from teamap.core.security import create_access_token
from factories import auth, make_activity, make_follow, make_spot, make_user

NEW_USER = {
    "email": "Mei@Example.com",
    "username": "MeiTea",
    "password": "sencha-2026",
    "display_name": "Mei",
}


async def test_register_login_me(client):
    r = await client.post("/api/users/register/", json=NEW_USER)
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["user"]["username"] == "meitea"
    assert data["user"]["email"] == "mei@example.com"
    assert data["user"]["privacy_level"] == "public"
    assert data["token_type"] == "bearer"
    assert "accessToken" in r.cookies

    r = await client.post(
        "/api/users/login/", data={"username": "meitea", "password": "sencha-2026"}
    )
    assert r.status_code == 200
    token = r.json()["data"]["access_token"]

    r = await client.post(
        "/api/users/login/", data={"username": "mei@example.com", "password": "sencha-2026"}
    )
    assert r.status_code == 200

    r = await client.get("/api/users/me/", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["data"]["display_name"] == "Mei"


async def test_register_conflicts_and_validation(client):
    r = await client.post("/api/users/register/", json=NEW_USER)
    assert r.status_code == 201

    r = await client.post("/api/users/register/", json={**NEW_USER, "email": "other@example.com"})
    assert r.status_code == 409
    assert r.json()["error"] == "username already exists"

    r = await client.post("/api/users/register/", json={**NEW_USER, "username": "other"})
    assert r.status_code == 409

    r = await client.post("/api/users/register/", json={**NEW_USER, "username": "no spaces"})
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


async def test_bad_login(client):
    await client.post("/api/users/register/", json=NEW_USER)
    r = await client.post("/api/users/login/", data={"username": "meitea", "password": "wrong-one"})
    assert r.status_code == 401
    assert r.json()["code"] == "INVALID_CREDENTIALS"


async def test_invalid_token(client):
    r = await client.get("/api/users/me/", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["code"] == "INVALID_TOKEN"


async def test_expired_token(client, db):
    alice = await make_user(db, "alice")
    token = create_access_token(sub=str(alice.id), expires_minutes=-1)

    r = await client.get("/api/users/me/", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["code"] == "TOKEN_EXPIRED"


async def test_bad_token_is_anonymous_on_public_reads(client, db):
    alice = await make_user(db, "alice")
    await make_activity(db, alice)
    r = await client.get("/api/activities", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 200
    assert len(r.json()["data"]["data"]) == 1


async def test_update_me(client, db):
    alice = await make_user(db, "alice")
    r = await client.patch(
        "/api/users/me/",
        json={"bio": "gongfu every morning", "privacy_level": "friends"},
        headers=auth(alice),
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["bio"] == "gongfu every morning"
    assert data["privacy_level"] == "friends"


async def test_profile_counts(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    await make_spot(db, alice)
    await make_activity(db, alice)
    await make_activity(db, alice, privacy_level="private")
    await make_follow(db, bob, alice)

    r = await client.get("/api/users/alice", headers=auth(bob))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["counts"] == {"spots": 1, "activities": 2, "followers": 1, "following": 0}
    assert data["is_following"] is True

    r = await client.get("/api/users/ghost")
    assert r.status_code == 404


async def test_follow_and_unfollow(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    x = await make_activity(db, alice, privacy_level="friends")

    r = await client.post("/api/users/alice/follow", headers=auth(bob))
    assert r.status_code == 200
    assert r.json()["data"] == {"following": True, "user_id": alice.id}
    # idempotente
    r = await client.post("/api/users/alice/follow", headers=auth(bob))
    assert r.status_code == 200

    r = await client.get(f"/api/activities/{x.id}", headers=auth(bob))
    assert r.status_code == 200

    r = await client.delete("/api/users/alice/follow", headers=auth(bob))
    assert r.json()["data"]["following"] is False

    r = await client.get(f"/api/activities/{x.id}", headers=auth(bob))
    assert r.status_code == 403


async def test_cannot_follow_yourself(client, db):
    alice = await make_user(db, "alice")
    r = await client.post("/api/users/alice/follow", headers=auth(alice))
    assert r.status_code == 400
    assert r.json()["error"] == "You cannot follow yourself"


async def test_health(client):
    r = await client.get("/api/health/")
    assert r.status_code == 200
    assert r.json()["ok"] is True
