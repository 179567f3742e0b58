"""
Security module for credential sanitization, input validation, and typed exceptions.
"""
from .sanitization import SensitiveDataFilter, sanitize_text, install_log_sanitization
from .validators import validate_robot_id, validate_session_id
from .exceptions import (
    ApplicationError,
    PermanentError,
    TransientError,
    MissingFieldsError,
    UnknownOperationError,
    EntityNotFoundError,
    InvalidInteractionTypeError,
    NotEnoughCandidatesError,
    ValidationError,
    InvalidParametersError,
    ConfigurationError,
    DependencyFailureError,
    DependencyTimeoutError,
    TRANSIENT_ERRORS,
    PERMANENT_ERRORS,
)

__all__ = [
    # Sanitization
    "SensitiveDataFilter",
    "sanitize_text",
    "install_log_sanitization",
    # Validation
    "validate_robot_id",
    "validate_session_id",
    # Exception hierarchy
    "ApplicationError",
    "PermanentError",
    "TransientError",
    "MissingFieldsError",
    "UnknownOperationError",
    "EntityNotFoundError",
    "InvalidInteractionTypeError",
    "NotEnoughCandidatesError",
    "ValidationError",
    "InvalidParametersError",
    "ConfigurationError",
    "DependencyFailureError",
    "DependencyTimeoutError",
    # Convenience tuples
    "TRANSIENT_ERRORS",
    "PERMANENT_ERRORS",
]
