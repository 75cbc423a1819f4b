"""Run form schemas and flatten pydantic errors into per-field message lists."""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from app.services.errors import FormValidationError

FormT = TypeVar("FormT", bound=BaseModel)


def flatten_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Group error messages by top-level field, preserving order."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("form",)
        field = str(loc[0])
        if err["type"] == "missing":
            message = f"{field.capitalize()} is required"
        else:
            message = err["msg"]
        errors.setdefault(field, []).append(message)
    return errors


def validate_form(schema: type[FormT], data: Mapping[str, Any]) -> FormT:
    """Validate raw submitted data against schema; raise FormValidationError on failure."""
    try:
        return schema.model_validate(dict(data))
    except ValidationError as e:
        raise FormValidationError(flatten_errors(e)) from e
