"""
Structured Validation Error Utilities

Error taxonomy shared by the calculation engine and the API layer:
- InvalidArgumentError: client input rejected (never retried) -> 400
- NotFoundError: referenced provider/category/template does not exist -> 404
Anything else (database unreachable, query failure) propagates unchanged.

Error Response Format:
{
    "error": "invalid_parameter" | "not_found",
    "parameter": "quarter",
    "message": "Invalid quarter \"Q5\". Must be Q1, Q2, Q3, or Q4.",
    "received_value": "Q5"
}
"""

from fastapi import HTTPException, status
from typing import Optional, Any


class InvalidArgumentError(ValueError):
    """Client input failed validation. The message names the offending value."""

    def __init__(self, message: str, parameter: Optional[str] = None, value: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.parameter = parameter
        self.value = value


class NotFoundError(LookupError):
    """A referenced entity does not exist."""

    def __init__(self, resource: str, resource_id: Any):
        self.resource = resource
        self.resource_id = resource_id
        self.message = f'{resource} with ID "{resource_id}" not found'
        super().__init__(self.message)


class ValidationErrorResponse:
    """Structured validation error response builder."""

    @staticmethod
    def invalid_parameter(parameter: Optional[str], message: str, value: Optional[Any] = None) -> dict:
        """
        Create an invalid parameter error response.

        Args:
            parameter: Name of the invalid parameter
            message: Description of the validation error
            value: The invalid value (optional, for debugging)

        Returns:
            Structured error dict
        """
        response = {
            "error": "invalid_parameter",
            "parameter": parameter,
            "message": message
        }
        if value is not None:
            response["received_value"] = str(value)[:100]  # Truncate for safety
        return response

    @staticmethod
    def not_found(resource: str, resource_id: Any) -> dict:
        """Create a not-found error response."""
        return {
            "error": "not_found",
            "resource": resource,
            "resource_id": str(resource_id),
            "message": f'{resource} with ID "{resource_id}" not found'
        }


def to_http_exception(error: Exception) -> HTTPException:
    """
    Translate a domain error into an HTTPException with a structured body.

    Raises:
        TypeError if the error is not part of the domain taxonomy
    """
    if isinstance(error, InvalidArgumentError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=ValidationErrorResponse.invalid_parameter(error.parameter, error.message, error.value)
        )
    if isinstance(error, NotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ValidationErrorResponse.not_found(error.resource, error.resource_id)
        )
    raise TypeError(f"Not a domain error: {type(error).__name__}")
