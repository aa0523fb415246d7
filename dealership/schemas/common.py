"""
Request-body parsing shared by every endpoint.

Bodies arrive as raw dicts so that authentication and permission checks run
before any field validation; ``parse_payload`` is the validation step of the
pipeline.
"""

from typing import Any, Iterable, Type, TypeVar

from pydantic import BaseModel, ValidationError

from dealership.core.result import Err, ErrorKind, Ok, Result, missing_fields
from dealership.services.validation import validate_required_fields

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"Invalid value for {location}: {first.get('msg', 'invalid')}"


def parse_payload(schema: Type[SchemaT], body: Any, required: Iterable[str] = ()) -> Result:
    """
    Validate a raw request body against ``schema``.

    Args:
        schema: Pydantic model describing the body
        body: Decoded JSON body
        required: Fields reported together in a "Missing required fields" message

    Returns:
        ``Ok(schema instance)`` or a VALIDATION ``Err``
    """
    if not isinstance(body, dict):
        return Err(ErrorKind.VALIDATION, "Request body must be a JSON object")

    missing = validate_required_fields(body, required)
    if missing:
        return missing_fields(missing)

    try:
        return Ok(schema.model_validate(body))
    except ValidationError as e:
        return Err(ErrorKind.VALIDATION, _describe(e))


def changed_fields(payload: BaseModel) -> dict:
    """Fields the client actually sent, without nulls."""
    return payload.model_dump(exclude_unset=True, exclude_none=True)
