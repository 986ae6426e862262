from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
import pytest

from teamap.activities.models import ActivityLike
from teamap.media.models import Media
from factories import (
    at,
    auth,
    make_activity,
    make_comment,
    make_follow,
    make_spot,
    make_user,
)


def _ids(resp):
    return [a["id"] for a in resp.json()["data"]["data"]]


async def test_feed_envelope_and_anonymous_sees_only_public(client, db):
    alice = await make_user(db, "alice")
    pub = await make_activity(db, alice, "public one")
    await make_activity(db, alice, "for friends", privacy_level="friends")
    await make_activity(db, alice, "just me", privacy_level="private")

    r = await client.get("/api/activities")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert "timestamp" in body
    assert _ids(r) == [pub.id]
    assert body["data"]["pagination"] == {"page": 1, "limit": 20, "total": 1, "pages": 1}


async def test_friends_visibility_follows_the_follow_edge(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    x = await make_activity(db, alice, "matcha at dusk", privacy_level="friends")

    r = await client.get("/api/activities", headers=auth(bob))
    assert x.id not in _ids(r)

    await make_follow(db, bob, alice)
    r = await client.get("/api/activities", headers=auth(bob))
    assert x.id in _ids(r)

    r = await client.put(
        f"/api/activities/{x.id}",
        json={"title": "matcha at dusk", "privacy_level": "private"},
        headers=auth(alice),
    )
    assert r.status_code == 200

    r = await client.get("/api/activities", headers=auth(bob))
    assert x.id not in _ids(r)
    r = await client.get("/api/activities", headers=auth(alice))
    assert x.id in _ids(r)


async def test_being_followed_does_not_grant_friends_access(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    x = await make_activity(db, alice, privacy_level="friends")
    # alice sigue a bob, no al revés
    await make_follow(db, alice, bob)

    r = await client.get("/api/activities", headers=auth(bob))
    assert x.id not in _ids(r)
    r = await client.get(f"/api/activities/{x.id}", headers=auth(bob))
    assert r.status_code == 403


async def test_pagination_walks_every_visible_activity_once(client, db):
    alice = await make_user(db, "alice")
    created = [
        await make_activity(db, alice, f"cup {i}", created_at=at(2026, 1, 1, 10, i))
        for i in range(7)
    ]
    await make_activity(db, alice, "hidden", privacy_level="private")

    seen = []
    for page in (1, 2, 3):
        r = await client.get("/api/activities", params={"page": page, "limit": 3})
        assert r.status_code == 200
        seen.extend(_ids(r))
        assert r.json()["data"]["pagination"]["total"] == 7
        assert r.json()["data"]["pagination"]["pages"] == 3

    assert seen == [a.id for a in reversed(created)]

    r = await client.get("/api/activities", params={"page": 4, "limit": 3})
    assert _ids(r) == []


async def test_same_timestamp_orders_by_id_desc(client, db):
    alice = await make_user(db, "alice")
    first = await make_activity(db, alice, "a", created_at=at(2026, 1, 1, 9))
    second = await make_activity(db, alice, "b", created_at=at(2026, 1, 1, 9))

    r = await client.get("/api/activities")
    assert _ids(r) == [second.id, first.id]


async def test_feed_item_shape_and_comment_preview(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    spot = await make_spot(db, alice, "Gion teahouse")
    a = await make_activity(db, alice, "gyokuro", spot_id=spot.id)

    await make_comment(db, bob, a, "first", created_at=at(2026, 1, 1, 10))
    c2 = await make_comment(db, bob, a, "second", created_at=at(2026, 1, 1, 11))
    c3 = await make_comment(db, alice, a, "third", created_at=at(2026, 1, 1, 12))
    db.add(ActivityLike(activity_id=a.id, user_id=bob.id))
    await db.commit()

    r = await client.get("/api/activities", headers=auth(bob))
    item = r.json()["data"]["data"][0]

    assert item["user"]["username"] == "alice"
    assert item["spot"]["name"] == "Gion teahouse"
    assert item["is_liked"] is True
    assert item["like_count"] == 1
    assert item["comment_count"] == 3
    assert [c["id"] for c in item["comments"]] == [c3.id, c2.id]

    r = await client.get("/api/activities")
    assert r.json()["data"]["data"][0]["is_liked"] is False


async def test_invalid_pagination_is_400(client):
    r = await client.get("/api/activities", params={"limit": 0})
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["path"] == "/api/activities"
    assert body["method"] == "GET"
    assert body["details"][0]["field"] == "limit"

    r = await client.get("/api/activities", params={"page": 0})
    assert r.status_code == 400


async def test_spot_feed(client, db):
    alice = await make_user(db, "alice")
    spot = await make_spot(db, alice)
    inside = await make_activity(db, alice, "here", spot_id=spot.id)
    await make_activity(db, alice, "elsewhere")
    await make_activity(db, alice, "here but private", spot_id=spot.id, privacy_level="private")

    r = await client.get(f"/api/activities/spot/{spot.id}")
    assert r.status_code == 200
    assert _ids(r) == [inside.id]
    assert r.json()["data"]["spot"]["id"] == spot.id

    r = await client.get("/api/activities/spot/9999")
    assert r.status_code == 404


async def test_user_feed_scopes_by_relationship(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    pub = await make_activity(db, alice, "pub", created_at=at(2026, 1, 1, 1))
    fr = await make_activity(db, alice, "fr", privacy_level="friends", created_at=at(2026, 1, 1, 2))
    pr = await make_activity(db, alice, "pr", privacy_level="private", created_at=at(2026, 1, 1, 3))

    r = await client.get("/api/activities/user/alice")
    assert _ids(r) == [pub.id]

    await make_follow(db, bob, alice)
    r = await client.get("/api/activities/user/alice", headers=auth(bob))
    assert _ids(r) == [fr.id, pub.id]

    r = await client.get("/api/activities/user/alice", headers=auth(alice))
    assert _ids(r) == [pr.id, fr.id, pub.id]
    assert r.json()["data"]["user"]["username"] == "alice"

    r = await client.get("/api/activities/user/nobody")
    assert r.status_code == 404


async def test_detail_404_vs_403(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    secret = await make_activity(db, alice, privacy_level="private")

    r = await client.get("/api/activities/9999")
    assert r.status_code == 404
    assert r.json()["code"] == "NOT_FOUND"

    r = await client.get(f"/api/activities/{secret.id}", headers=auth(bob))
    assert r.status_code == 403
    assert r.json()["code"] == "AUTHORIZATION_ERROR"

    r = await client.get(f"/api/activities/{secret.id}", headers=auth(alice))
    assert r.status_code == 200
    assert r.json()["data"]["activity"]["id"] == secret.id


async def test_detail_lists_all_comments_oldest_first(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    a = await make_activity(db, alice)
    c1 = await make_comment(db, bob, a, "one", created_at=at(2026, 1, 1, 10))
    c2 = await make_comment(db, bob, a, "two", created_at=at(2026, 1, 1, 11))
    c3 = await make_comment(db, bob, a, "three", created_at=at(2026, 1, 1, 12))

    r = await client.get(f"/api/activities/{a.id}")
    activity = r.json()["data"]["activity"]
    assert [c["id"] for c in activity["comments"]] == [c1.id, c2.id, c3.id]
    assert activity["comment_count"] == 3
    assert activity["likes"] == []


async def test_create_requires_auth(client):
    r = await client.post("/api/activities", json={"title": "sencha"})
    assert r.status_code == 401
    assert r.json()["error"] == "Access token required"


async def test_token_from_query_and_cookie(client, db):
    alice = await make_user(db, "alice")
    token = auth(alice)["Authorization"].split(" ", 1)[1]
    mine = await make_activity(db, alice, privacy_level="private")

    r = await client.get(f"/api/activities/{mine.id}", params={"token": token})
    assert r.status_code == 200

    client.cookies.set("accessToken", token)
    r = await client.get(f"/api/activities/{mine.id}")
    assert r.status_code == 200


async def test_create_activity_with_photos(client, db):
    alice = await make_user(db, "alice")
    spot = await make_spot(db, alice)

    r = await client.post(
        "/api/activities",
        json={
            "title": "Hojicha by the river",
            "spot_id": spot.id,
            "tea_type": "hojicha",
            "duration_minutes": 30,
            "companions": ["bob"],
            "photos": ["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"],
        },
        headers=auth(alice),
    )
    assert r.status_code == 201
    activity = r.json()["data"]["activity"]
    assert activity["privacy_level"] == "public"
    assert activity["spot"]["id"] == spot.id
    assert activity["description"] == ""
    assert activity["companions"] == ["bob"]
    assert sorted(m["file_path"] for m in activity["media"]) == [
        "https://cdn.example.com/1.jpg",
        "https://cdn.example.com/2.jpg",
    ]
    assert activity["media"][0]["alt_text"] == "Activity photo for Hojicha by the river"


async def test_create_with_unknown_spot_is_404(client, db):
    alice = await make_user(db, "alice")
    r = await client.post(
        "/api/activities",
        json={"title": "lost", "spot_id": 4242},
        headers=auth(alice),
    )
    assert r.status_code == 404
    assert r.json()["error"] == "Spot not found"


async def test_create_validation(client, db):
    alice = await make_user(db, "alice")

    r = await client.post(
        "/api/activities",
        json={"title": "too short", "duration_minutes": 0},
        headers=auth(alice),
    )
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "duration_minutes"

    r = await client.post(
        "/api/activities",
        json={"title": "odd", "privacy_level": "everyone"},
        headers=auth(alice),
    )
    assert r.status_code == 400


async def test_update_replaces_photos_only_when_sent(client, db):
    alice = await make_user(db, "alice")
    r = await client.post(
        "/api/activities",
        json={"title": "v1", "photos": ["https://cdn.example.com/old.jpg"]},
        headers=auth(alice),
    )
    activity_id = r.json()["data"]["activity"]["id"]

    # sin photos: se conservan
    r = await client.put(
        f"/api/activities/{activity_id}", json={"title": "v2"}, headers=auth(alice)
    )
    assert [m["file_path"] for m in r.json()["data"]["activity"]["media"]] == [
        "https://cdn.example.com/old.jpg"
    ]

    r = await client.put(
        f"/api/activities/{activity_id}",
        json={"title": "v3", "photos": ["https://cdn.example.com/new.jpg"]},
        headers=auth(alice),
    )
    assert r.status_code == 200
    activity = r.json()["data"]["activity"]
    assert activity["title"] == "v3"
    assert [m["file_path"] for m in activity["media"]] == ["https://cdn.example.com/new.jpg"]

    r = await client.put(
        f"/api/activities/{activity_id}",
        json={"title": "v4", "photos": []},
        headers=auth(alice),
    )
    assert r.json()["data"]["activity"]["media"] == []


async def test_only_owner_can_update_or_delete(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    a = await make_activity(db, alice)

    r = await client.put(f"/api/activities/{a.id}", json={"title": "mine now"}, headers=auth(bob))
    assert r.status_code == 403
    assert r.json()["error"] == "You can only update your own activities"

    r = await client.delete(f"/api/activities/{a.id}", headers=auth(bob))
    assert r.status_code == 403

    r = await client.delete("/api/activities/9999", headers=auth(alice))
    assert r.status_code == 404


async def test_delete_removes_likes_comments_and_media(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    r = await client.post(
        "/api/activities",
        json={"title": "goodbye", "photos": ["https://cdn.example.com/x.jpg"]},
        headers=auth(alice),
    )
    activity_id = r.json()["data"]["activity"]["id"]
    await client.post(f"/api/activities/{activity_id}/like", headers=auth(bob))
    await client.post(
        f"/api/activities/{activity_id}/comments", json={"content": "nice"}, headers=auth(bob)
    )

    r = await client.delete(f"/api/activities/{activity_id}", headers=auth(alice))
    assert r.status_code == 200
    assert r.json()["data"] is None

    r = await client.get(f"/api/activities/{activity_id}")
    assert r.status_code == 404

    likes = await db.execute(select(ActivityLike).where(ActivityLike.activity_id == activity_id))
    media = await db.execute(select(Media).where(Media.activity_id == activity_id))
    assert likes.scalars().all() == []
    assert media.scalars().all() == []


async def test_like_toggle_pairs_cancel_out(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    carol = await make_user(db, "carol")
    a = await make_activity(db, alice)
    db.add(ActivityLike(activity_id=a.id, user_id=carol.id))
    await db.commit()

    r = await client.post(f"/api/activities/{a.id}/like", headers=auth(bob))
    assert r.json()["data"] == {"liked": True, "like_count": 2}
    assert r.json()["message"] == "Activity liked successfully"

    r = await client.post(f"/api/activities/{a.id}/like", headers=auth(bob))
    assert r.json()["data"] == {"liked": False, "like_count": 1}
    assert r.json()["message"] == "Activity unliked successfully"


async def test_cannot_like_what_you_cannot_see(client, db):
    alice = await make_user(db, "alice")
    bob = await make_user(db, "bob")
    a = await make_activity(db, alice, privacy_level="friends")

    r = await client.post(f"/api/activities/{a.id}/like", headers=auth(bob))
    assert r.status_code == 403

    r = await client.post("/api/activities/9999/like", headers=auth(bob))
    assert r.status_code == 404


async def test_like_pair_is_unique(db):
    alice = await make_user(db, "alice")
    a = await make_activity(db, alice)
    db.add(ActivityLike(activity_id=a.id, user_id=alice.id))
    await db.commit()

    db.add(ActivityLike(activity_id=a.id, user_id=alice.id))
    with pytest.raises(IntegrityError):
        await db.commit()
    await db.rollback()
