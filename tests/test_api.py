import asyncio

from sqlalchemy import func, select

from models.like import Like
from models.match import Match


async def _create_profile(client, **fields) -> dict:
    payload = {"name": "Tereza", "age": 24, "country": "CZ", "bio": "Miluji kávu"}
    payload.update(fields)
    response = await client.post("/users", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _bearer(profile: dict) -> dict:
    return {"Authorization": f"Bearer {profile['access_token']}"}


async def _make_match(client, make_user, auth_headers):
    alice = await make_user(name="Alice")
    bob = await make_user(name="Bob")
    await client.post(f"/interactions/like/{bob.id}", headers=auth_headers(alice))
    response = await client.post(f"/interactions/like/{alice.id}", headers=auth_headers(bob))
    return alice, bob, response.json()["match_id"]


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "OK"


async def test_create_profile_returns_token_and_normalized_user(client):
    profile = await _create_profile(client, email="Tereza@Example.com ")

    assert profile["token_type"] == "bearer"
    assert profile["user"]["country"] == "cz"
    assert profile["user"]["photo_url"] is None

    me = await client.get("/users/me", headers=_bearer(profile))
    assert me.status_code == 200
    assert me.json()["id"] == profile["user"]["id"]


async def test_create_profile_rejects_taken_email(client):
    await _create_profile(client, email="same@example.com")

    response = await client.post(
        "/users",
        json={"name": "Klára", "age": 26, "country": "cz", "email": "SAME@example.com"},
    )

    assert response.status_code == 409


async def test_create_profile_validates_age(client):
    response = await client.post("/users", json={"name": "Kid", "age": 15, "country": "cz"})

    assert response.status_code == 422


async def test_requests_without_token_are_rejected(client):
    response = await client.get("/users/me")

    assert response.status_code == 401


async def test_invalid_token_is_rejected(client):
    response = await client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Could not validate credentials"


async def test_update_profile(client):
    profile = await _create_profile(client)

    response = await client.put("/users/me", json={"bio": "Nové bio", "distance": 7}, headers=_bearer(profile))

    assert response.status_code == 200
    assert response.json()["bio"] == "Nové bio"
    assert response.json()["distance"] == 7
    assert response.json()["name"] == "Tereza"


async def test_like_flow_creates_match_and_notifications(client, make_user, auth_headers):
    alice = await make_user(name="Alice")
    bob = await make_user(name="Bob")

    first = await client.post(f"/interactions/like/{bob.id}", headers=auth_headers(alice))
    assert first.status_code == 200
    assert first.json()["matched"] is False

    second = await client.post(f"/interactions/like/{alice.id}", headers=auth_headers(bob))
    body = second.json()
    assert body["matched"] is True
    assert body["match_id"] is not None
    assert body["match_user"]["name"] == "Alice"

    alice_notes = (await client.get("/notifications", headers=auth_headers(alice))).json()
    assert [n["kind"] for n in alice_notes] == ["match"]

    bob_notes = (await client.get("/notifications", headers=auth_headers(bob))).json()
    assert sorted(n["kind"] for n in bob_notes) == ["like", "match"]


async def test_repeated_like_is_reported_not_duplicated(client, make_user, auth_headers, session_factory):
    alice = await make_user()
    bob = await make_user()

    first = await client.post(f"/interactions/like/{bob.id}", headers=auth_headers(alice))
    again = await client.post(f"/interactions/like/{bob.id}", headers=auth_headers(alice))

    assert again.status_code == 200
    assert again.json()["already_liked"] is True
    assert again.json()["like_id"] == first.json()["like_id"]
    assert again.json()["matched"] is False

    async with session_factory() as session:
        count = (await session.execute(select(func.count(Like.id)))).scalar_one()
    assert count == 1


async def test_self_like_returns_400(client, make_user, auth_headers):
    alice = await make_user()

    response = await client.post(f"/interactions/like/{alice.id}", headers=auth_headers(alice))

    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot like yourself"


async def test_like_unknown_user_returns_404(client, make_user, auth_headers, session_factory):
    alice = await make_user()

    response = await client.post("/interactions/like/424242", headers=auth_headers(alice))

    assert response.status_code == 404
    async with session_factory() as session:
        count = (await session.execute(select(func.count(Like.id)))).scalar_one()
    assert count == 0


async def test_mutual_endpoint(client, make_user, auth_headers):
    alice, bob, _ = await _make_match(client, make_user, auth_headers)
    carol = await make_user()

    assert (await client.get(f"/interactions/mutual/{bob.id}", headers=auth_headers(alice))).json()["mutual"] is True
    assert (await client.get(f"/interactions/mutual/{alice.id}", headers=auth_headers(bob))).json()["mutual"] is True
    assert (await client.get(f"/interactions/mutual/{carol.id}", headers=auth_headers(alice))).json()["mutual"] is False


async def test_incoming_likes_excludes_matches_and_puts_super_likes_first(client, make_user, auth_headers):
    alice, bob, _ = await _make_match(client, make_user, auth_headers)
    carol = await make_user(name="Carol")
    dave = await make_user(name="Dave")

    await client.post(f"/interactions/like/{alice.id}", headers=auth_headers(carol))
    await client.post(f"/interactions/like/{alice.id}?super=true", headers=auth_headers(dave))

    response = await client.get("/interactions/likes", headers=auth_headers(alice))

    assert response.status_code == 200
    names = [item["user"]["name"] for item in response.json()]
    assert names == ["Dave", "Carol"]
    assert response.json()[0]["is_super_like"] is True


async def test_matches_include_last_message(client, make_user, auth_headers):
    alice, bob, match_id = await _make_match(client, make_user, auth_headers)

    empty = (await client.get("/interactions/matches", headers=auth_headers(alice))).json()
    assert len(empty) == 1
    assert empty[0]["other_user"]["id"] == bob.id
    assert empty[0]["last_message"] is None

    await client.post("/messages", json={"match_id": match_id, "text": "Ahoj!"}, headers=auth_headers(bob))

    matches = (await client.get("/interactions/matches", headers=auth_headers(alice))).json()
    assert matches[0]["last_message"] == "Ahoj!"
    assert matches[0]["user1_id"] < matches[0]["user2_id"]


async def test_messages_between_match_participants(client, make_user, auth_headers):
    alice, bob, match_id = await _make_match(client, make_user, auth_headers)

    sent = await client.post("/messages", json={"match_id": match_id, "text": "Ahoj"}, headers=auth_headers(alice))
    assert sent.status_code == 201
    assert sent.json()["sender_name"] == "Alice"
    await client.post("/messages", json={"match_id": match_id, "text": "Čau"}, headers=auth_headers(bob))

    history = (await client.get(f"/messages/{match_id}", headers=auth_headers(bob))).json()
    assert [m["message_text"] for m in history] == ["Ahoj", "Čau"]

    unread = (await client.get("/notifications?unread_only=true", headers=auth_headers(bob))).json()
    assert any(n["kind"] == "message" and n["body"] == "Ahoj" for n in unread)


async def test_messages_outside_match_are_forbidden(client, make_user, auth_headers):
    _, _, match_id = await _make_match(client, make_user, auth_headers)
    stranger = await make_user()

    read = await client.get(f"/messages/{match_id}", headers=auth_headers(stranger))
    write = await client.post("/messages", json={"match_id": match_id, "text": "hi"}, headers=auth_headers(stranger))
    missing = await client.get("/messages/9999", headers=auth_headers(stranger))

    assert read.status_code == 403
    assert write.status_code == 403
    assert missing.status_code == 404


async def test_gift_catalog_and_sending(client, make_user, auth_headers, gift_catalog):
    alice = await make_user(name="Alice")
    bob = await make_user(name="Bob")

    catalog = (await client.get("/gifts")).json()
    assert len(catalog) == 6
    romantic = (await client.get("/gifts?category=romantic")).json()
    assert {g["name"] for g in romantic} == {"Růže", "Srdce"}

    rose = next(g for g in catalog if g["name"] == "Růže")
    sent = await client.post(
        "/gifts/send",
        json={"receiver_id": bob.id, "gift_id": rose["id"], "message": "Pro tebe"},
        headers=auth_headers(alice),
    )
    assert sent.status_code == 201
    assert sent.json()["receiver_name"] == "Bob"

    received = (await client.get("/gifts/transactions?direction=received", headers=auth_headers(bob))).json()
    assert len(received) == 1
    assert received[0]["gift_icon"] == "🌹"
    assert (await client.get("/gifts/transactions?direction=sent", headers=auth_headers(bob))).json() == []

    notes = (await client.get("/notifications", headers=auth_headers(bob))).json()
    assert notes[0]["kind"] == "gift_received"


async def test_gift_errors(client, make_user, auth_headers, gift_catalog):
    alice = await make_user()
    bob = await make_user()

    to_self = await client.post("/gifts/send", json={"receiver_id": alice.id, "gift_id": 1}, headers=auth_headers(alice))
    unknown_gift = await client.post("/gifts/send", json={"receiver_id": bob.id, "gift_id": 999}, headers=auth_headers(alice))
    bad_direction = await client.get("/gifts/transactions?direction=sideways", headers=auth_headers(alice))

    assert to_self.status_code == 400
    assert unknown_gift.status_code == 404
    assert bad_direction.status_code == 422


async def test_notifications_read_and_read_all(client, make_user, auth_headers):
    alice = await make_user()
    bob = await make_user()
    carol = await make_user()
    await client.post(f"/interactions/like/{alice.id}", headers=auth_headers(bob))
    await client.post(f"/interactions/like/{alice.id}", headers=auth_headers(carol))

    notes = (await client.get("/notifications", headers=auth_headers(alice))).json()
    assert len(notes) == 2

    marked = await client.post(f"/notifications/{notes[0]['id']}/read", headers=auth_headers(alice))
    assert marked.json()["is_read"] is True

    foreign = await client.post(f"/notifications/{notes[1]['id']}/read", headers=auth_headers(bob))
    assert foreign.status_code == 404

    rest = await client.post("/notifications/read-all", headers=auth_headers(alice))
    assert rest.json() == {"updated": 1}
    assert (await client.get("/notifications?unread_only=true", headers=auth_headers(alice))).json() == []


async def test_photos_first_is_primary(client, make_user, auth_headers):
    alice = await make_user()
    headers = auth_headers(alice)

    first = await client.post("/users/me/photos", json={"photo_url": "https://img.example/1.jpg"}, headers=headers)
    assert first.status_code == 201
    assert first.json()["is_primary"] is True

    await client.post("/users/me/photos", json={"photo_url": "https://img.example/2.jpg", "is_primary": True}, headers=headers)

    photos = (await client.get(f"/users/{alice.id}/photos", headers=headers)).json()
    assert [p["is_primary"] for p in photos] == [False, True]
    assert (await client.get("/users/me", headers=headers)).json()["photo_url"] == "https://img.example/2.jpg"


async def test_search_filters_and_excludes_self(client, make_user, auth_headers):
    me = await make_user(country="cz")
    await make_user(name="Near", country="cz", age=24, distance=3, verified=True)
    await make_user(name="Far", country="cz", age=30, distance=40)
    await make_user(name="Abroad", country="sk", age=24, distance=1)

    response = await client.get("/users?country=CZ&max_age=28", headers=auth_headers(me))
    assert [u["name"] for u in response.json()] == ["Near"]

    verified = await client.get("/users?verified=true", headers=auth_headers(me))
    assert [u["name"] for u in verified.json()] == ["Near"]

    everyone = await client.get("/users", headers=auth_headers(me))
    assert [u["name"] for u in everyone.json()] == ["Abroad", "Near", "Far"]


async def test_unknown_profile_returns_404(client, make_user, auth_headers):
    alice = await make_user()

    response = await client.get("/users/777", headers=auth_headers(alice))

    assert response.status_code == 404


async def test_stats(client, make_user, auth_headers, gift_catalog):
    alice, bob, match_id = await _make_match(client, make_user, auth_headers)
    await client.post("/messages", json={"match_id": match_id, "text": "Ahoj"}, headers=auth_headers(alice))
    await client.post("/gifts/send", json={"receiver_id": bob.id, "gift_id": 1}, headers=auth_headers(alice))

    stats = (await client.get("/stats")).json()

    assert stats == {"users": 2, "matches": 1, "messages": 1, "gifts": 1}


async def test_delete_profile_cascades(client, make_user, auth_headers, session_factory):
    alice, bob, match_id = await _make_match(client, make_user, auth_headers)
    await client.post("/messages", json={"match_id": match_id, "text": "Ahoj"}, headers=auth_headers(alice))

    response = await client.delete("/users/me", headers=auth_headers(alice))
    assert response.status_code == 204

    async with session_factory() as session:
        likes = (await session.execute(select(func.count(Like.id)))).scalar_one()
        matches = (await session.execute(select(func.count(Match.id)))).scalar_one()
    assert likes == 0
    assert matches == 0

    gone = await client.get("/users/me", headers=auth_headers(alice))
    assert gone.status_code == 401
    assert (await client.get("/interactions/matches", headers=auth_headers(bob))).json() == []


async def test_update_profile_ignores_null_for_required_fields(client):
    profile = await _create_profile(client)

    response = await client.put(
        "/users/me",
        json={"name": None, "age": None, "country": None, "distance": None, "bio": None},
        headers=_bearer(profile),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Tereza"
    assert body["age"] == 24
    assert body["country"] == "cz"
    assert body["bio"] is None


async def test_update_profile_rejects_taken_email(client):
    await _create_profile(client, email="taken@example.com")
    profile = await _create_profile(client, name="Klára")

    response = await client.put("/users/me", json={"email": "Taken@Example.com"}, headers=_bearer(profile))

    assert response.status_code == 409


async def test_repeated_like_after_match_returns_match_id(client, make_user, auth_headers):
    alice, bob, match_id = await _make_match(client, make_user, auth_headers)

    again = await client.post(f"/interactions/like/{alice.id}", headers=auth_headers(bob))

    assert again.status_code == 200
    assert again.json()["already_liked"] is True
    assert again.json()["matched"] is True
    assert again.json()["match_id"] == match_id


async def test_concurrent_requests_queue_on_sqlite(client, make_user, auth_headers):
    alice = await make_user()
    others = [await make_user() for _ in range(4)]

    responses = await asyncio.gather(
        *(client.get("/users/me", headers=auth_headers(alice)) for _ in range(3)),
        *(client.post(f"/interactions/like/{alice.id}", headers=auth_headers(other)) for other in others),
    )

    assert [r.status_code for r in responses] == [200] * 7
    notes = (await client.get("/notifications", headers=auth_headers(alice))).json()
    assert len(notes) == 4
