"""Pydantic schemas validating group input."""

import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.exceptions import GroupValidationError

GROUP_NAME_MAX_LENGTH = 20
GROUP_DESCRIPTION_MAX_LENGTH = 200
GROUP_NAME_PATTERN = re.compile(r"^[A-Za-z0-9 '_.-]+$")


class GroupCreate(BaseModel):
    """Schema for creating a group. Strings are trimmed before checks."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    description: str
    require_approval: bool = Field(default=False)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value:
            raise ValueError("Group name can't be blank")
        if len(value) > GROUP_NAME_MAX_LENGTH:
            raise ValueError(
                f"Group name can't be longer than {GROUP_NAME_MAX_LENGTH} characters"
            )
        if not GROUP_NAME_PATTERN.match(value):
            raise ValueError(
                "Group name can only contain letters, numbers, spaces, dots, "
                "hyphens, underscores, or apostrophes"
            )
        return value

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        if not value:
            raise ValueError("Description can't be blank")
        if len(value) > GROUP_DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                "Description can't be longer than "
                f"{GROUP_DESCRIPTION_MAX_LENGTH} characters"
            )
        return value


_FIELD_LABELS = {"name": "Group name", "description": "Description"}


def parse_group_create(
    name: str | None, description: str | None, require_approval: bool
) -> GroupCreate:
    """Validate raw input, raising GroupValidationError with a readable message."""
    try:
        return GroupCreate(
            name=name,  # type: ignore[arg-type]
            description=description,  # type: ignore[arg-type]
            require_approval=require_approval,
        )
    except ValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else None
        label = _FIELD_LABELS.get(field or "", "Value")
        if error["type"] == "value_error":
            message = str(error["ctx"]["error"])
        elif error["type"] == "string_type" and error.get("input") is None:
            message = f"{label} can't be null"
        else:
            message = f"{label} is invalid: {error['msg']}"
        raise GroupValidationError(message, field=field) from exc
