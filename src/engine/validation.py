"""
Boundary validation for store rows and request parameters using Pydantic v2.

Robot rows come back from the store with numeric columns that may be
string-encoded or malformed; they are coerced here, before anything is
compared. Request parameters are validated against the model registered for
their action, and pydantic errors are mapped onto the application's typed
exceptions.
"""
import logging
import math
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError

from security.exceptions import (
    InvalidInteractionTypeError,
    InvalidParametersError,
    MissingFieldsError,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Coercion Helpers
# ============================================================================

def coerce_numeric(value: Any) -> float | int | None:
    """
    Coerce string numbers to int/float. Handles '150', '3.5', etc.

    Store rows and client payloads frequently carry numbers as strings:
    - "150" -> 150 (int)
    - "3.5" -> 3.5 (float)
    - "tall" -> None
    - None -> None
    - 0 -> 0 (zero is a value, not an absence)
    - True -> None (booleans are not measurements)
    - NaN / inf -> None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            # Preserve int vs float distinction
            if '.' in text or 'e' in text.lower():
                number = float(text)
                return number if math.isfinite(number) else None
            return int(text)
        except ValueError:
            logger.warning("Failed to coerce string to numeric: %s", value)
            return None
    return None


def coerce_date(value: Any) -> Optional[date]:
    """
    Coerce an ISO date / timestamp string to a date; malformed values become None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            logger.warning("Failed to coerce string to date: %s", value)
            return None
    return None


# ============================================================================
# Parameter Validation
# ============================================================================

def _field_name(error: dict) -> str:
    return ".".join(str(part) for part in error["loc"])


def parse_parameters(model: type[BaseModel], raw: Any, enum_fields: set[str]) -> BaseModel:
    """
    Validate an operation's raw parameters against its model.

    Args:
        model: Parameter model registered for the action
        raw: Free-form ``parameters`` object from the request
        enum_fields: Field names whose bad values are interaction-enum errors

    Returns:
        Validated parameter model instance

    Raises:
        MissingFieldsError: If required parameters are absent
        InvalidInteractionTypeError: If an interaction enum field has an unknown value
        InvalidParametersError: For any other shape or value problem
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise InvalidParametersError(f"Expected an object for {model.__name__}, got {type(raw).__name__}")

    try:
        return model.model_validate(raw)
    except PydanticValidationError as e:
        errors = e.errors()

        missing = [_field_name(err) for err in errors if err["type"] == "missing"]
        if missing:
            raise MissingFieldsError(
                f"Missing required parameters: {', '.join(missing)}",
                fields=missing,
            )

        for err in errors:
            field = str(err["loc"][0]) if err["loc"] else ""
            if field in enum_fields:
                value = err.get("input")
                raise InvalidInteractionTypeError(
                    f"Invalid {field}: {value!r}. {err['msg']}",
                    field=field,
                    value=str(value),
                )

        details = "; ".join(
            f"{_field_name(err)}: {err['msg']} (got: {err.get('input', 'N/A')})"
            for err in errors
        )
        logger.info("Parameter validation failed for %s: %s", model.__name__, details)
        first = _field_name(errors[0]) if errors else None
        raise InvalidParametersError(f"Invalid parameters: {details}", field=first)
