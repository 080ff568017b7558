"""Public shared error API for Module Update Router components."""

from . import codes
from .factories import (
    dependency_error,
    validation_error,
)
from .result import Result, failure, success
from .types import ErrorCategory, ErrorDetail

__all__ = [
    "ErrorCategory",
    "ErrorDetail",
    "Result",
    "codes",
    "dependency_error",
    "failure",
    "success",
    "validation_error",
]
