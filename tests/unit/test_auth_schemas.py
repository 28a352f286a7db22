"""Unit tests for signup request validation."""

import pytest
from pydantic import ValidationError

from academy.schemas.auth import SignupRequest


def _payload(**overrides) -> dict:
    data = {
        "name": "Ravi Deshmukh",
        "phone": "9123456780",
        "email": "ravi@example.com",
        "password": "pass123",
        "confirm_password": "pass123",
        "branch": "akola",
    }
    data.update(overrides)
    return data


def test_signup_valid():
    signup = SignupRequest(**_payload(name="  Ravi Deshmukh "))
    assert signup.name == "Ravi Deshmukh"
    assert signup.branch == "akola"
    assert signup.address is None


@pytest.mark.parametrize("phone", ["12345", "98765432101", "98765abcde", ""])
def test_signup_rejects_bad_phone(phone):
    with pytest.raises(ValidationError, match="10-digit"):
        SignupRequest(**_payload(phone=phone))


def test_signup_rejects_bad_email():
    with pytest.raises(ValidationError):
        SignupRequest(**_payload(email="not-an-email"))


def test_signup_rejects_short_password():
    with pytest.raises(ValidationError):
        SignupRequest(**_payload(password="abc", confirm_password="abc"))


def test_signup_rejects_mismatched_passwords():
    with pytest.raises(ValidationError, match="Passwords do not match"):
        SignupRequest(**_payload(confirm_password="pass124"))


def test_signup_rejects_blank_name():
    with pytest.raises(ValidationError):
        SignupRequest(**_payload(name="   "))


@pytest.mark.parametrize("missing", ["name", "phone", "email", "password", "confirm_password", "branch"])
def test_signup_all_fields_required(missing):
    data = _payload()
    del data[missing]
    with pytest.raises(ValidationError):
        SignupRequest(**data)


def test_signup_address_requires_core_fields():
    with pytest.raises(ValidationError):
        SignupRequest(**_payload(address={"district": "Akola", "tehsil": "", "village": "Borgaon"}))
