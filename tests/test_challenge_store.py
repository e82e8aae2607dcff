"""Tests for single-use challenge storage."""

from datetime import timedelta

from sqlalchemy import func, select

from smart_checkin.database import utcnow
from smart_checkin.models.webauthn_challenge import CeremonyType, WebAuthnChallenge
from smart_checkin.services.challenge_store import ChallengeStore


async def count_challenges(db) -> int:
    result = await db.execute(select(func.count()).select_from(WebAuthnChallenge))
    return result.scalar_one()


async def test_consume_returns_value_once(db):
    store = ChallengeStore(db)
    challenge_id = await store.issue("Y2hhbGxlbmdl", CeremonyType.AUTHENTICATION)

    assert await store.consume(challenge_id, ceremony=CeremonyType.AUTHENTICATION) == "Y2hhbGxlbmdl"
    assert await store.consume(challenge_id, ceremony=CeremonyType.AUTHENTICATION) is None
    assert await count_challenges(db) == 0


async def test_consume_unknown_id(db):
    assert await ChallengeStore(db).consume("does-not-exist") is None


async def test_expired_challenge_is_deleted_and_rejected(db):
    store = ChallengeStore(db, expires_in_minutes=-1)
    challenge_id = await store.issue("ZXhwaXJlZA", CeremonyType.AUTHENTICATION)

    assert await store.consume(challenge_id) is None
    assert await count_challenges(db) == 0


async def test_wrong_ceremony_is_rejected_and_burned(db):
    store = ChallengeStore(db)
    challenge_id = await store.issue("cmVn", CeremonyType.REGISTRATION, reservation_id="res-1")

    assert await store.consume(challenge_id, ceremony=CeremonyType.AUTHENTICATION) is None
    assert await store.consume(
        challenge_id, ceremony=CeremonyType.REGISTRATION, reservation_id="res-1"
    ) is None


async def test_registration_challenge_bound_to_reservation(db):
    store = ChallengeStore(db)
    challenge_id = await store.issue("cmVn", CeremonyType.REGISTRATION, reservation_id="res-1")

    assert await store.consume(
        challenge_id, ceremony=CeremonyType.REGISTRATION, reservation_id="res-2"
    ) is None


async def test_consume_from_second_session(session_factory):
    async with session_factory() as first:
        challenge_id = await ChallengeStore(first).issue("c2Vjb25k", CeremonyType.AUTHENTICATION)

    async with session_factory() as second:
        assert await ChallengeStore(second).consume(challenge_id) == "c2Vjb25k"

    async with session_factory() as third:
        assert await ChallengeStore(third).consume(challenge_id) is None


async def test_only_one_of_two_loaded_consumers_wins(session_factory):
    async with session_factory() as setup:
        challenge_id = await ChallengeStore(setup).issue("cmFjZQ", CeremonyType.AUTHENTICATION)

    async with session_factory() as first, session_factory() as second:
        # Both sessions hold the row before either deletes it
        assert await first.get(WebAuthnChallenge, challenge_id) is not None
        assert await second.get(WebAuthnChallenge, challenge_id) is not None
        await first.commit()
        await second.commit()

        results = [
            await ChallengeStore(first).consume(challenge_id),
            await ChallengeStore(second).consume(challenge_id),
        ]

    assert results == ["cmFjZQ", None]


async def test_sweep_removes_only_expired(db):
    store = ChallengeStore(db)
    live_id = await store.issue("bGl2ZQ", CeremonyType.AUTHENTICATION)

    for _ in range(3):
        db.add(
            WebAuthnChallenge(
                challenge="b2xk",
                ceremony=CeremonyType.AUTHENTICATION.value,
                expires_at=utcnow() - timedelta(minutes=10),
            )
        )
    await db.commit()

    assert await store.sweep_expired() == 3
    assert await count_challenges(db) == 1
    assert await store.consume(live_id) == "bGl2ZQ"
