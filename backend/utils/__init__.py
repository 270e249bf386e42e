"""
Utils Package

Provides utility modules for:
- validation_errors: Domain error taxonomy and structured HTTP error bodies
- clock: The single point where the API reads today's date
"""

from .validation_errors import (
    InvalidArgumentError,
    NotFoundError,
    ValidationErrorResponse,
    to_http_exception,
)
from .clock import business_today

__all__ = [
    'InvalidArgumentError',
    'NotFoundError',
    'ValidationErrorResponse',
    'to_http_exception',
    'business_today',
]
