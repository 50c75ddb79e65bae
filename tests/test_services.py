import pytest

from core.errors import EmailTakenError, InactiveMatchError
from models.match import Match
from services.matching import MatchEngine
from services.messaging import send_message
from services.users import get_user, update_user


async def test_update_user_maps_unique_email_violation_to_conflict(session_factory, make_user):
    await make_user(email="taken@example.com")
    alice = await make_user(email="alice@example.com")

    async with session_factory() as session:
        user = await get_user(session, alice.id)
        # Уникальный индекс срабатывает на commit, минуя предварительную проверку
        user.email = "taken@example.com"
        with pytest.raises(EmailTakenError):
            await update_user(session, user, email="taken@example.com")

    async with session_factory() as session:
        assert (await get_user(session, alice.id)).email == "alice@example.com"


async def test_update_user_skips_null_for_required_fields(session_factory, make_user):
    alice = await make_user(name="Alice", bio="Ahoj")

    async with session_factory() as session:
        user = await get_user(session, alice.id)
        updated = await update_user(session, user, name=None, age=None, bio=None)

    assert updated.name == "Alice"
    assert updated.age == 25
    assert updated.bio is None


async def test_send_message_reports_recipient(session_factory, make_user):
    alice = await make_user()
    bob = await make_user()
    async with session_factory() as session:
        await MatchEngine.for_session(session).record_like(alice.id, bob.id)
    async with session_factory() as session:
        result = await MatchEngine.for_session(session).record_like(bob.id, alice.id)

    async with session_factory() as session:
        sent = await send_message(session, bob.id, result.match_id, "Ahoj")

    assert sent.recipient_id == alice.id
    assert sent.message.sender_id == bob.id


async def test_send_message_to_inactive_match_is_rejected(session_factory, make_user):
    alice = await make_user()
    bob = await make_user()
    async with session_factory() as session:
        match = Match(user1_id=alice.id, user2_id=bob.id, is_active=False)
        session.add(match)
        await session.commit()
        match_id = match.id

    async with session_factory() as session:
        with pytest.raises(InactiveMatchError):
            await send_message(session, alice.id, match_id, "Ahoj")
