from typing import Any, Mapping, Optional


class NutriLogError(Exception):
    """Base class for errors raised by the service layer.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, offending ids)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Unexpected error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(NutriLogError):
    """Raised when input is invalid or a precondition for a write is not met.

    Nothing has been written when this is raised.
    """

    http_status = 400
    default_message = "Invalid input"


class NotFoundError(NutriLogError):
    """Raised when a referenced food, serving, entry or bundle does not exist."""

    http_status = 404
    default_message = "Not found"


class ConflictError(NutriLogError):
    """Raised when a write collides with existing state (e.g. duplicate key)."""

    http_status = 409
    default_message = "Conflict"
