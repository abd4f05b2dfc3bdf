"""
Domain Exceptions

Defines the error taxonomy shared by the terminal components. Every error
carries an ErrorType discriminator so callers and the HTTP layer can decide
whether a failure is blocking or advisory without inspecting messages.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"
    INVALID_TRANSITION = "invalid_transition"


Details = dict[str, str | int | float | bool | None]


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: Details | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, str | Details]:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when input is malformed or a required value is missing."""

    def __init__(
        self,
        field_name: str,
        value: str | int | float | bool | None,
        message: str,
        error_code: str | None = None,
        details: Details | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.error_code = error_code or "VALIDATION_ERROR"

        full_message = f"Validation failed for field '{field_name}': {message}"
        details = details or {}
        details.update(
            {
                "field": field_name,
                "value": str(value) if value is not None else None,
                "error_code": self.error_code,
            }
        )

        super().__init__(full_message, ErrorType.VALIDATION, details)


class MissingDataError(ValidationError):
    """Raised when job data or a quantity needed for a computation is absent."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(field_name, None, message, "MISSING_DATA")


class AuthenticationError(DomainError):
    """Raised when a credential or permission check fails."""

    def __init__(
        self,
        message: str,
        role: str | None = None,
        details: Details | None = None,
    ) -> None:
        details = details or {}
        if role:
            details["role"] = role
        super().__init__(message, ErrorType.AUTHENTICATION, details)
        self.role = role


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    def __init__(
        self,
        entity_type: str,
        identifier: str | int,
        message: str | None = None,
    ) -> None:
        details: Details = {"entity_type": entity_type, "identifier": str(identifier)}
        super().__init__(
            message or f"{entity_type} not found: {identifier}",
            ErrorType.NOT_FOUND,
            details,
        )
        self.entity_type = entity_type
        self.identifier = identifier


class ConflictError(DomainError):
    """Raised on duplicate creation or a stale version."""

    def __init__(self, message: str, details: Details | None = None) -> None:
        super().__init__(message, ErrorType.CONFLICT, details)


class PersistenceError(DomainError):
    """Raised when the underlying store rejects or fails a statement."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        details: Details = {"operation": operation} if operation else {}
        super().__init__(message, ErrorType.PERSISTENCE, details)
        self.operation = operation


class InvalidTransitionError(DomainError):
    """Raised when an action is not legal in the terminal's current state."""

    def __init__(self, action: str, state: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Cannot {action} while terminal is {state}",
            ErrorType.INVALID_TRANSITION,
            {"action": action, "state": state},
        )
        self.action = action
        self.state = state
