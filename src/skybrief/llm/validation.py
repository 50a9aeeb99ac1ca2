"""
Schema Validation for LLM Output

Validates already-parsed JSON values against pydantic models, discriminated
unions or any other type a pydantic TypeAdapter accepts. Validation is pure:
it returns an outcome and never raises for invalid data.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

T = TypeVar("T")

Schema = Union[type, TypeAdapter, Any]


@dataclass
class ValidationOutcome(Generic[T]):
    """Result of validating a value: the typed value on success, a reason on failure."""
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None


@lru_cache(maxsize=None)
def _cached_adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def get_adapter(schema: Schema) -> TypeAdapter:
    """Return a TypeAdapter for ``schema``, reusing adapters across calls."""
    if isinstance(schema, TypeAdapter):
        return schema
    try:
        return _cached_adapter(schema)
    except TypeError:
        # Unhashable annotations (rare) are adapted on every call
        return TypeAdapter(schema)


def format_validation_error(error: ValidationError) -> str:
    """
    Describe the first violated constraint of a pydantic ValidationError.

    Returns:
        "<field.path>: <message> (got <actual>)", e.g. "days: Input should be
        less than or equal to 14 (got 15)"
    """
    errors = error.errors(include_url=False)
    if not errors:
        return str(error)

    first = errors[0]
    path = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    message = first.get("msg", "Invalid value")
    if first.get("type") == "missing":
        return f"{path}: {message}"
    return f"{path}: {message} (got {first.get('input')!r})"


def validate(schema: Schema, value: Any) -> ValidationOutcome:
    """
    Validate a parsed JSON value against a schema.

    Args:
        schema: Pydantic model class, annotated union, or prebuilt TypeAdapter
        value: Value produced by json.loads

    Returns:
        ValidationOutcome with the normalized value (defaults applied) or the
        reason naming the first violated constraint
    """
    adapter = get_adapter(schema)
    try:
        return ValidationOutcome(success=True, value=adapter.validate_python(value))
    except ValidationError as e:
        return ValidationOutcome(success=False, error=format_validation_error(e))
