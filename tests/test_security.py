"""Tests for check-in tokens."""

from datetime import timedelta

from smart_checkin.security.auth import create_checkin_token, verify_checkin_token


def test_token_verifies_for_its_reservation():
    token = create_checkin_token("res-1")
    assert verify_checkin_token(token, "res-1")


def test_token_rejected_for_other_reservation():
    token = create_checkin_token("res-1")
    assert not verify_checkin_token(token, "res-2")


def test_expired_token_rejected():
    token = create_checkin_token("res-1", expires_delta=timedelta(seconds=-30))
    assert not verify_checkin_token(token, "res-1")


def test_missing_or_garbage_token_rejected():
    assert not verify_checkin_token(None, "res-1")
    assert not verify_checkin_token("", "res-1")
    assert not verify_checkin_token("not-a-jwt", "res-1")
