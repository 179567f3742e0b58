"""
Typed exception hierarchy for structured error handling.

Every failure the comparison engine can report maps to one class here.
All exceptions carry structured metadata (error_code, is_transient) so the
request dispatcher can turn them into the uniform response envelope without
string matching.
"""
from typing import Optional


class ApplicationError(Exception):
    """
    Base exception for all application errors.

    Carries structured metadata for downstream error handling:
    - error_code: Machine-readable error identifier
    - is_transient: Whether error is temporary (store outage, timeout)
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        is_transient: bool = False,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.is_transient = is_transient

    def __str__(self) -> str:
        """Return clean message without metadata (keeps logs readable)."""
        return super().__str__()


# ============================================================================
# Permanent Errors (Caller Must Change The Request)
# ============================================================================

class PermanentError(ApplicationError):
    """Base class for errors caused by the request itself."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message=message, error_code=error_code, is_transient=False)


class MissingFieldsError(PermanentError):
    """Required request fields are absent."""

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message=message, error_code="MISSING_FIELDS")
        self.fields = fields or []


class UnknownOperationError(PermanentError):
    """Tool or action name is not in the supported set."""

    def __init__(self, message: str, supported: Optional[list[str]] = None):
        super().__init__(message=message, error_code="UNKNOWN_OPERATION")
        self.supported = supported or []


class EntityNotFoundError(PermanentError):
    """Referenced robot id(s) do not resolve in the entity store."""

    def __init__(self, message: str, entity_ids: Optional[list[str]] = None):
        super().__init__(message=message, error_code="ENTITY_NOT_FOUND")
        self.entity_ids = entity_ids or []


class InvalidInteractionTypeError(PermanentError):
    """An enumerated interaction field was given a value outside its set."""

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[str] = None):
        super().__init__(message=message, error_code="INVALID_INTERACTION_TYPE")
        self.field = field
        self.value = value


class NotEnoughCandidatesError(PermanentError):
    """Random selection cannot satisfy the requested count under its filters."""

    def __init__(self, message: str, requested: int = 0, available: int = 0):
        super().__init__(message=message, error_code="NOT_ENOUGH_CANDIDATES")
        self.requested = requested
        self.available = available


class ValidationError(PermanentError):
    """Input validation failed (bad id, bad parameter value, etc.)."""

    def __init__(self, message: str, field: Optional[str] = None, error_code: str = "VALIDATION_ERROR"):
        super().__init__(message=message, error_code=error_code)
        self.field = field


class InvalidParametersError(ValidationError):
    """Operation parameters are present but malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message=message, field=field, error_code="INVALID_PARAMETERS")


class ConfigurationError(PermanentError):
    """Application configuration is invalid or missing."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="CONFIG_ERROR")


# ============================================================================
# Transient Errors (Store Unavailable)
# ============================================================================

class TransientError(ApplicationError):
    """Base class for failures of an external dependency."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message=message, error_code=error_code, is_transient=True)


class DependencyFailureError(TransientError):
    """The entity store call failed (5xx, connection refused, bad payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message=message, error_code="DEPENDENCY_FAILURE")
        self.status_code = status_code


class DependencyTimeoutError(DependencyFailureError):
    """The entity store call exceeded the request-level timeout."""

    def __init__(self, message: str, timeout_seconds: float):
        super().__init__(message=message)
        self.error_code = "DEPENDENCY_TIMEOUT"
        self.timeout_seconds = timeout_seconds


# ============================================================================
# Convenience Tuples for Catch Blocks
# ============================================================================

# Store-side failures (reported verbatim, never retried)
TRANSIENT_ERRORS = (DependencyFailureError, DependencyTimeoutError)

# Request-side failures
PERMANENT_ERRORS = (
    MissingFieldsError,
    UnknownOperationError,
    EntityNotFoundError,
    InvalidInteractionTypeError,
    NotEnoughCandidatesError,
    ValidationError,
    ConfigurationError,
)
