"""End-to-end tests through the HTTP API."""

import pytest

from smart_checkin.config import settings

API = "/api/v1"


async def create_reservation(client, admin_auth, **body):
    response = await client.post(f"{API}/reservations", json=body, auth=admin_auth)
    assert response.status_code == 201
    return response.json()


async def register(client, authenticator, reservation_id):
    begin = await client.post(f"{API}/webauthn/register/begin", json={"reservationId": reservation_id})
    assert begin.status_code == 200
    data = begin.json()
    return await client.post(
        f"{API}/webauthn/register/complete",
        json={
            "challengeId": data["challengeId"],
            "reservationId": reservation_id,
            "credential": authenticator.create(data["options"]),
        },
    )


async def authenticate(client, authenticator, **kwargs):
    begin = await client.post(f"{API}/webauthn/authenticate/begin")
    assert begin.status_code == 200
    data = begin.json()
    return await client.post(
        f"{API}/webauthn/authenticate/complete",
        json={"challengeId": data["challengeId"], "credential": authenticator.get(data["options"], **kwargs)},
    )


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_full_check_in_flow(client, admin_auth, authenticator):
    reservation = await create_reservation(client, admin_auth, door_pin="905112")

    registered = await register(client, authenticator, reservation["id"])
    assert registered.status_code == 200
    assert registered.json()["verified"] is True

    authenticated = await authenticate(client, authenticator)
    assert authenticated.status_code == 200
    body = authenticated.json()
    assert body["reservationId"] == reservation["id"]
    assert body["checkinToken"]

    secret = f"  {reservation['secret_code'].lower()} "
    first = await client.post(
        f"{API}/checkin",
        json={"reservationId": body["reservationId"], "secretCode": secret, "checkinToken": body["checkinToken"]},
    )
    assert first.status_code == 200
    assert first.json() == {"doorPin": "905112", "alreadyCheckedIn": False}

    again = await client.post(
        f"{API}/checkin",
        json={"reservationId": reservation["id"], "secret": reservation["secret_code"]},
    )
    assert again.status_code == 200
    assert again.json() == {"doorPin": "905112", "alreadyCheckedIn": True}


async def test_admin_required_to_create_reservation(client):
    response = await client.post(f"{API}/reservations", json={})
    assert response.status_code == 401

    response = await client.post(f"{API}/reservations", json={}, auth=("admin", "wrong"))
    assert response.status_code == 401


async def test_public_view_hides_factors(client, admin_auth):
    reservation = await create_reservation(client, admin_auth)

    response = await client.get(f"{API}/reservations/{reservation['id']}")
    assert response.status_code == 200
    body = response.json()
    assert "secret_code" not in body
    assert "door_pin" not in body
    assert body["has_guest_info"] is False


async def test_unknown_reservation(client):
    assert (await client.get(f"{API}/reservations/missing")).status_code == 404
    response = await client.post(f"{API}/webauthn/register/begin", json={"reservationId": "missing"})
    assert response.status_code == 404


async def test_guest_info_locked_after_check_in(client, admin_auth):
    reservation = await create_reservation(client, admin_auth)
    guest = {"guest_name": "Hanako Yamada", "guest_address": "Tokyo", "guest_contact": "hanako@example.com"}

    response = await client.patch(f"{API}/reservations/{reservation['id']}", json=guest)
    assert response.status_code == 200
    assert response.json()["has_guest_info"] is True

    checked_in = await client.post(
        f"{API}/checkin",
        json={"reservationId": reservation["id"], "secret": reservation["secret_code"]},
    )
    assert checked_in.status_code == 200

    response = await client.patch(f"{API}/reservations/{reservation['id']}", json=guest)
    assert response.status_code == 409


async def test_check_in_errors(client, admin_auth):
    reservation = await create_reservation(client, admin_auth)

    wrong = await client.post(
        f"{API}/checkin", json={"reservationId": reservation["id"], "secret": "ZZZ-ZZZ-ZZZ"}
    )
    assert wrong.status_code == 401

    malformed = await client.post(
        f"{API}/checkin", json={"reservationId": reservation["id"], "secret": "ZZZZZZZZZ"}
    )
    assert malformed.status_code == 400

    missing = await client.post(f"{API}/checkin", json={"reservationId": "missing", "secret": "ZZZ-ZZZ-ZZZ"})
    assert missing.status_code == 404


async def test_check_in_token_enforced_when_required(client, admin_auth, monkeypatch):
    monkeypatch.setattr(settings, "require_checkin_token", True)
    reservation = await create_reservation(client, admin_auth)

    response = await client.post(
        f"{API}/checkin",
        json={"reservationId": reservation["id"], "secret": reservation["secret_code"]},
    )
    assert response.status_code == 401


async def test_registration_replay_rejected(client, admin_auth, authenticator):
    reservation = await create_reservation(client, admin_auth)
    begin = (await client.post(f"{API}/webauthn/register/begin", json={"reservationId": reservation["id"]})).json()
    payload = {
        "challengeId": begin["challengeId"],
        "reservationId": reservation["id"],
        "credential": authenticator.create(begin["options"]),
    }

    assert (await client.post(f"{API}/webauthn/register/complete", json=payload)).status_code == 200
    assert (await client.post(f"{API}/webauthn/register/complete", json=payload)).status_code == 400


async def test_registration_bad_attestation_is_400(client, admin_auth, authenticator):
    reservation = await create_reservation(client, admin_auth)
    begin = (await client.post(f"{API}/webauthn/register/begin", json={"reservationId": reservation["id"]})).json()

    response = await client.post(
        f"{API}/webauthn/register/complete",
        json={
            "challengeId": begin["challengeId"],
            "reservationId": reservation["id"],
            "credential": authenticator.create(begin["options"], origin="https://evil.example"),
        },
    )
    assert response.status_code == 400


async def test_duplicate_registration_is_409(client, admin_auth, authenticator):
    first = await create_reservation(client, admin_auth)
    second = await create_reservation(client, admin_auth)

    assert (await register(client, authenticator, first["id"])).status_code == 200
    assert (await register(client, authenticator, second["id"])).status_code == 409


async def test_unknown_passkey_is_404(client, authenticator):
    response = await authenticate(client, authenticator, user_handle=b"whoever")
    assert response.status_code == 404


async def test_replayed_assertion_is_rejected(client, admin_auth, authenticator):
    reservation = await create_reservation(client, admin_auth)
    assert (await register(client, authenticator, reservation["id"])).status_code == 200
    assert (await authenticate(client, authenticator)).status_code == 200

    # Same counter value again
    response = await authenticate(client, authenticator, sign_count=authenticator.sign_count)
    assert response.status_code == 401


async def test_cleanup_challenges(client):
    await client.post(f"{API}/webauthn/authenticate/begin")

    response = await client.post(f"{API}/maintenance/cleanup-challenges")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["deletedCount"] == 0
    assert body["timestamp"].endswith("Z")


@pytest.mark.parametrize("header, expected", [(None, 401), ("Bearer wrong", 401), ("Bearer s3cret", 200)])
async def test_cleanup_requires_cron_secret_when_set(client, monkeypatch, header, expected):
    monkeypatch.setattr(settings, "cron_secret", "s3cret")
    headers = {"Authorization": header} if header else {}

    response = await client.post(f"{API}/maintenance/cleanup-challenges", headers=headers)
    assert response.status_code == expected
