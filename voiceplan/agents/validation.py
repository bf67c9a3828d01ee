"""Schema validation for repaired model output."""

from typing import Any, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from voiceplan.utils.exceptions import ValidationError
from voiceplan.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


def _error_lines(error: PydanticValidationError) -> list[str]:
    lines = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"]) or "<root>"
        lines.append(f"{field}: {item['msg']} (type: {item['type']})")
    return lines


def validate_payload(raw: Any, schema: Type[T]) -> Tuple[Optional[T], Optional[ValidationError]]:
    """
    Validate a raw value against a contract schema.

    Pure and total: never raises, returns exactly one of the validated model
    or the error describing why the value does not conform.

    Args:
        raw: Draft model or plain dictionary
        schema: Contract model to validate against

    Returns:
        Tuple of (validated_model, error)

    Example:
        plan, error = validate_payload(draft, Plan)
        if error:
            raise error
    """
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()

    if not isinstance(raw, dict):
        return None, ValidationError(
            f"{schema.__name__} payload must be an object, got {type(raw).__name__}",
            validation_errors=[f"<root>: expected object, got {type(raw).__name__}"],
        )

    try:
        return schema.model_validate(raw), None
    except PydanticValidationError as e:
        errors = _error_lines(e)
        logger.warning(
            "schema_validation_failed",
            schema_name=schema.__name__,
            errors=errors,
        )
        return None, ValidationError(
            f"{schema.__name__} does not match its schema: {'; '.join(errors)}",
            validation_errors=errors,
        )


def ensure_valid(raw: Any, schema: Type[T]) -> T:
    """
    Validate and return the contract model.

    Raises:
        ValidationError: If the value does not conform to ``schema``
    """
    validated, error = validate_payload(raw, schema)
    if error is not None:
        raise error
    return validated
