"""
Unit tests for request and record models.
"""
import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from app.models.user import RegisterUser, UpdateProfile, UserRecord


def base_row(**overrides):
    row = {
        "id": "123e4567-e89b-12d3-a456-426614174000",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "phone_number": "0612345678",
        "password_hash": "$2b$04$abcdefghijklmnopqrstuv",
        "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        "schema_version": 2,
    }
    row.update(overrides)
    return row


class TestUserRecord:

    def test_hash_excluded_from_dump(self):
        record = UserRecord.from_document(base_row())

        assert "password_hash" not in record.model_dump()
        assert "password_hash" not in record.model_dump_json()
        assert "$2b$" not in repr(record)

    def test_legacy_row_adapted(self):
        row = base_row(number=612345678, password="$2b$04$legacy")
        del row["phone_number"], row["password_hash"], row["schema_version"]

        record = UserRecord.from_document(row)

        assert record.phone_number == "612345678"
        assert record.password_hash == "$2b$04$legacy"
        assert record.schema_version == 1

    def test_naive_timestamps_become_utc(self):
        record = UserRecord.from_document(base_row(created_at=datetime(2026, 1, 1, 12, 0)))
        assert record.created_at.tzinfo == timezone.utc

    def test_missing_hash_is_empty(self):
        record = UserRecord.from_document(base_row(password_hash=None))
        assert record.password_hash == ""


class TestRegisterUser:

    def test_phone_is_digit_string(self):
        with pytest.raises(ValidationError):
            RegisterUser(
                first_name="A", last_name="B", email="a@example.com", password="pw",
                phone_number="12-34", gender="x", age=20,
            )

    def test_leading_zero_kept(self):
        user = RegisterUser(
            first_name="A", last_name="B", email="a@example.com", password="pw",
            phone_number="0012345678", gender="x", age=20,
        )
        assert user.phone_number == "0012345678"

    def test_password_byte_limit(self):
        with pytest.raises(ValidationError):
            RegisterUser(
                first_name="A", last_name="B", email="a@example.com", password="é" * 40,
                phone_number="0012345678", gender="x", age=20,
            )


class TestUpdateProfile:

    def test_changes_only_supplied(self):
        assert UpdateProfile(height=170.0).changes() == {"height": 170.0}

    def test_nulls_are_not_changes(self):
        assert UpdateProfile(first_name=None, age=None).changes() == {}
