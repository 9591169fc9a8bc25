"""Standardized errors for the events and bookings data layer.

This module provides:
1. A base exception carrying a machine-readable error type and context
2. The validation, reference and storage errors raised by the stores
3. A serializable error response model for upstream request handlers

Usage:
    from eventhub.errors import RequiredFieldMissing, NotFoundError

    if not value.strip():
        raise RequiredFieldMissing(field="title")

    try:
        await create_booking(event_id, email)
    except EventHubError as exc:
        payload = exc.to_response().model_dump(exclude_none=True)
"""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    detail: str | None = None
    error_code: str | None = None
    context: dict[str, Any] | None = None


class EventHubError(Exception):
    """Base class for data layer errors."""

    error: str = "internal_error"
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: str | None = None,
        error_code: str | None = None,
        **context: Any,
    ) -> None:
        self.detail = detail or self.__class__.detail
        self.error_code = error_code
        self.context = context if context else None
        super().__init__(self.detail)

    def to_response(self) -> ErrorResponse:
        """Convert exception to error response model."""
        return ErrorResponse(
            error=self.error,
            detail=self.detail,
            error_code=self.error_code,
            context=self.context,
        )


class ValidationError(EventHubError):
    """A record was rejected before being written."""

    error = "validation_error"
    detail = "Record failed validation"


class RequiredFieldMissing(ValidationError):
    """A required string field is missing or blank."""

    error = "required_field_missing"
    detail = "Required field is missing"

    def __init__(self, field: str, detail: str | None = None, **context: Any) -> None:
        self.field = field
        super().__init__(
            detail or f'Field "{field}" is required and must be a non-empty string',
            field=field,
            **context,
        )


class InvalidEnumValue(ValidationError):
    """A field holds a value outside its fixed set of choices."""

    error = "invalid_enum_value"
    detail = "Value is not one of the allowed choices"


class EmptyListField(ValidationError):
    """A required list field is missing or empty."""

    error = "empty_list_field"
    detail = "List field must not be empty"

    def __init__(self, field: str, detail: str | None = None, **context: Any) -> None:
        self.field = field
        super().__init__(
            detail or f'Field "{field}" is required and must be a non-empty array',
            field=field,
            **context,
        )


class InvalidDate(ValidationError):
    """A date string could not be parsed into a UTC calendar date."""

    error = "invalid_date"
    detail = "Invalid event date"


class InvalidTime(ValidationError):
    """A time string is neither HH:mm nor h:mm AM/PM."""

    error = "invalid_time"
    detail = "Invalid event time format"


class InvalidEmail(ValidationError):
    """An email address does not match local-part@domain.tld."""

    error = "invalid_email"
    detail = "Invalid email address"


class DanglingReference(ValidationError):
    """The referenced event does not exist."""

    error = "dangling_reference"
    detail = "Referenced event does not exist"


class ReferenceCheckFailed(EventHubError):
    """The referenced record could not be looked up (store unreachable)."""

    error = "reference_check_failed"
    detail = "Could not verify referenced event"


class DuplicateBooking(EventHubError):
    """This email already booked this event (unique index)."""

    error = "duplicate_booking"
    detail = "A booking for this event and email already exists"


class DuplicateSlug(EventHubError):
    """Another event already uses this slug (unique index)."""

    error = "duplicate_slug"
    detail = "An event with this slug already exists"


class NotFoundError(EventHubError):
    """Resource not found."""

    error = "not_found"
    detail = "Resource not found"


class ConnectionFailure(EventHubError):
    """The database could not be reached. The next call retries."""

    error = "connection_failure"
    detail = "Could not connect to the database"
