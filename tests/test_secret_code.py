"""Tests for secret code generation, normalization and comparison."""

import re

from smart_checkin.security.secret_code import (
    CHARSET,
    generate_door_pin,
    generate_secret_code,
    is_well_formed,
    normalize_secret_code,
    secret_codes_match,
)


def test_generated_code_format():
    for _ in range(50):
        code = generate_secret_code()
        assert re.fullmatch(r"[A-Z0-9]{3}-[A-Z0-9]{3}-[A-Z0-9]{3}", code)
        assert all(ch in CHARSET for ch in code.replace("-", ""))


def test_charset_has_no_lookalikes():
    for ch in "01OIL":
        assert ch not in CHARSET


def test_normalize_keeps_dashes():
    assert normalize_secret_code("  a1b-2c3-d4e \n") == "A1B-2C3-D4E"
    assert normalize_secret_code("a1b2c3d4e") == "A1B2C3D4E"


def test_well_formed():
    assert is_well_formed("a1b-2c3-d4e")
    assert is_well_formed(" A1B-2C3-D4E ")
    assert not is_well_formed("a1b2c3d4e")
    assert not is_well_formed("A1B-2C3")
    assert not is_well_formed("A1B-2C3-D4E-F5G")
    assert not is_well_formed("A1B_2C3_D4E")


def test_codes_match_case_and_whitespace_insensitive():
    assert secret_codes_match("A1B-2C3-D4E", "a1b-2c3-d4e")
    assert secret_codes_match("A1B-2C3-D4E", " a1b-2c3-d4e\t")
    assert not secret_codes_match("A1B-2C3-D4E", "A1B-2C3-D4F")
    assert not secret_codes_match("A1B-2C3-D4E", "A1B2C3D4E")


def test_door_pin_is_numeric():
    pin = generate_door_pin()
    assert len(pin) == 6 and pin.isdigit()
    assert len(generate_door_pin(digits=8)) == 8
