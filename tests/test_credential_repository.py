"""Tests for passkey credential persistence."""

import pytest

from smart_checkin.core.errors import DuplicateCredential
from smart_checkin.services.credential_repository import CredentialRepository


async def add_credential(db, reservation_id, credential_id="cred-123", sign_count=0):
    repository = CredentialRepository(db)
    credential = await repository.add(
        credential_id=credential_id,
        reservation_id=reservation_id,
        public_key=b"\xa5\x01\x02",
        sign_count=sign_count,
        transports=["internal", "hybrid"],
    )
    await db.commit()
    return credential


async def test_add_and_get(db, reservation):
    await add_credential(db, reservation.id)

    credential = await CredentialRepository(db).get("cred-123")
    assert credential is not None
    assert credential.reservation_id == reservation.id
    assert credential.transports_list == ["internal", "hybrid"]
    assert credential.usage_count == 0


async def test_get_unknown(db):
    assert await CredentialRepository(db).get("nope") is None


async def test_duplicate_is_rejected_and_original_kept(db, reservation):
    await add_credential(db, reservation.id, sign_count=7)

    with pytest.raises(DuplicateCredential):
        await add_credential(db, "some-other-reservation")

    credential = await CredentialRepository(db).get("cred-123")
    assert credential.reservation_id == reservation.id
    assert credential.sign_count == 7


async def test_list_for_reservation(db, reservation):
    await add_credential(db, reservation.id, credential_id="cred-1")
    await add_credential(db, reservation.id, credential_id="cred-2")

    credentials = await CredentialRepository(db).list_for_reservation(reservation.id)
    assert sorted(c.credential_id for c in credentials) == ["cred-1", "cred-2"]


async def test_advance_sign_count_is_conditional(db, reservation):
    await add_credential(db, reservation.id, sign_count=5)
    repository = CredentialRepository(db)

    assert await repository.advance_sign_count("cred-123", previous=5, new=6)
    await db.commit()
    # A second writer still holding the old counter loses
    assert not await repository.advance_sign_count("cred-123", previous=5, new=7)
    await db.commit()

    credential = await repository.get("cred-123")
    assert credential.sign_count == 6
    assert credential.usage_count == 1
    assert credential.last_used_at is not None
