from typing import Any, Dict, FrozenSet, Type

from pydantic import BaseModel, ValidationError as PydanticValidationError

from .errors import InvalidUpdatePayload, ValidationError, describe_errors


def parse_update(payload: Any, allowed: FrozenSet[str], schema: Type[BaseModel]) -> Dict[str, Any]:
    """Validate a PATCH body as a whole before anything is changed.

    Unknown keys reject the entire update. Returns only the keys that were
    sent, already cleaned by ``schema``.
    """
    if not isinstance(payload, dict):
        raise InvalidUpdatePayload("Update body must be a JSON object")

    rejected = sorted(set(payload) - allowed)
    if rejected:
        raise InvalidUpdatePayload(f"Invalid updates: {', '.join(rejected)}")

    try:
        changes = schema.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(describe_errors(exc.errors())) from exc
    return changes.model_dump(exclude_unset=True)
