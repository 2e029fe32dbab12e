from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Iterable, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator
from pydantic_core import PydanticCustomError

from product_catalog.core.errors import FieldViolation, ValidationError
from product_catalog.models import (
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)

Title = Annotated[str, Field(min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH)]
Description = Annotated[str, Field(min_length=DESCRIPTION_MIN_LENGTH, max_length=DESCRIPTION_MAX_LENGTH)]

_STRICT_INPUT = ConfigDict(extra="forbid", strict=True)


class ProductCreate(BaseModel):
    model_config = _STRICT_INPUT

    title: Title
    description: Description


class ProductUpdate(BaseModel):
    """Same constraints as ProductCreate, but only enforced on fields that are present."""

    model_config = _STRICT_INPUT

    title: Optional[Title] = None
    description: Optional[Description] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def _reject_null(cls, v: Any) -> Any:
        # Absent means "unchanged"; an explicit null is not a string.
        if v is None:
            raise PydanticCustomError("string_type", "Input should be a valid string")
        return v

    def changes(self) -> dict[str, str]:
        return self.model_dump(exclude_unset=True)


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        # SQLite hands timestamps back without tzinfo; everything is stored as UTC.
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Violations
# ---------------------------------------------------------------------------

_REASONS = {
    "missing": "missing",
    "string_too_short": "too_short",
    "string_too_long": "too_long",
    "string_type": "wrong_type",
    "int_type": "wrong_type",
    "int_parsing": "wrong_type",
    "model_type": "wrong_type",
    "model_attributes_type": "wrong_type",
    "dict_type": "wrong_type",
    "greater_than_equal": "out_of_range",
    "less_than_equal": "out_of_range",
    "extra_forbidden": "unexpected",
    "json_invalid": "malformed",
}

_LOC_PREFIXES = {"body", "path", "query", "header"}


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOC_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or "body"


def violations_from_errors(errors: Iterable[Mapping[str, Any]]) -> list[FieldViolation]:
    """Convert pydantic/FastAPI error dicts into FieldViolation records."""
    violations = []
    for err in errors:
        reason = _REASONS.get(str(err.get("type")), "invalid")
        # json_invalid locations are character offsets, not field names.
        field = "body" if reason == "malformed" else _field_name(err.get("loc", ()))
        violations.append(FieldViolation(field=field, reason=reason, message=str(err.get("msg", ""))))
    return violations


InputModel = TypeVar("InputModel", ProductCreate, ProductUpdate)


def validate_input(schema: type[InputModel], data: Any) -> tuple[Optional[InputModel], list[FieldViolation]]:
    """
    Validate raw input against one of the input schemas.

    Returns ``(model, [])`` on success and ``(None, violations)`` otherwise; never raises
    for bad input.
    """
    try:
        return schema.model_validate(data), []
    except PydanticValidationError as e:
        return None, violations_from_errors(e.errors())


def parse_input(schema: type[InputModel], data: Union[InputModel, Mapping[str, Any], Any]) -> InputModel:
    """Like validate_input, but raises ValidationError carrying every violation."""
    if isinstance(data, schema):
        return data

    model, violations = validate_input(schema, data)
    if violations:
        raise ValidationError(violations)
    return model
