from .exceptions import (
    AuthenticationError,
    ConflictError,
    DomainError,
    ErrorType,
    InvalidTransitionError,
    MissingDataError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .result import Err, Ok, Result

__all__ = [
    "AuthenticationError",
    "ConflictError",
    "DomainError",
    "Err",
    "ErrorType",
    "InvalidTransitionError",
    "MissingDataError",
    "NotFoundError",
    "Ok",
    "PersistenceError",
    "Result",
    "ValidationError",
]
