"""Unit tests for group input validation."""

import pytest

from core.exceptions import ErrorCode, GroupValidationError, ValidationError
from domain.schemas.group import parse_group_create


class TestParseGroupCreate:
    def test_trims_values(self):
        data = parse_group_create("  Study01 ", "  Algorithms  ", True)

        assert data.name == "Study01"
        assert data.description == "Algorithms"
        assert data.require_approval is True

    def test_accepts_allowed_punctuation(self):
        data = parse_group_create("Bob's C.S-1_a", "ok", False)

        assert data.name == "Bob's C.S-1_a"

    def test_blank_name(self):
        with pytest.raises(GroupValidationError, match="Group name can't be blank") as exc:
            parse_group_create("   ", "desc", False)

        assert exc.value.error_code == ErrorCode.INVALID_GROUP_NAME
        assert exc.value.details == {"field": "name"}

    def test_name_too_long(self):
        with pytest.raises(GroupValidationError, match="longer than 20"):
            parse_group_create("a" * 21, "desc", False)

    def test_name_at_limit(self):
        assert parse_group_create("a" * 20, "desc", False).name == "a" * 20

    def test_name_bad_characters(self):
        with pytest.raises(GroupValidationError, match="can only contain"):
            parse_group_create("Study#1", "desc", False)

    def test_null_name(self):
        with pytest.raises(GroupValidationError, match="Group name can't be null"):
            parse_group_create(None, "desc", False)

    def test_blank_description(self):
        with pytest.raises(GroupValidationError, match="Description can't be blank") as exc:
            parse_group_create("Study01", "  ", False)

        assert exc.value.error_code == ErrorCode.VALIDATION_ERROR

    def test_description_too_long(self):
        with pytest.raises(GroupValidationError, match="longer than 200"):
            parse_group_create("Study01", "d" * 201, False)

    def test_is_validation_kind(self):
        with pytest.raises(ValidationError):
            parse_group_create("", "desc", False)
