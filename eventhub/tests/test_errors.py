"""Tests for the data layer error taxonomy."""

import pytest

from eventhub.errors import (
    ConnectionFailure,
    DanglingReference,
    DuplicateBooking,
    EmptyListField,
    ErrorResponse,
    EventHubError,
    InvalidDate,
    InvalidEmail,
    InvalidEnumValue,
    InvalidTime,
    NotFoundError,
    ReferenceCheckFailed,
    RequiredFieldMissing,
    ValidationError,
)


class TestErrors:

    def test_base_defaults(self):
        error = EventHubError()
        assert error.error == "internal_error"
        assert error.detail == "An unexpected error occurred"
        assert error.context is None
        assert str(error) == error.detail

    def test_not_found_with_context(self):
        error = NotFoundError(detail="Event not found", resource_type="event", resource_id="abc")
        assert error.error == "not_found"
        assert error.context == {"resource_type": "event", "resource_id": "abc"}

    def test_required_field_names_field(self):
        error = RequiredFieldMissing(field="venue")
        assert error.field == "venue"
        assert error.detail == 'Field "venue" is required and must be a non-empty string'
        assert error.context == {"field": "venue"}

    def test_empty_list_names_field(self):
        error = EmptyListField(field="tags")
        assert error.detail == 'Field "tags" is required and must be a non-empty array'

    @pytest.mark.parametrize(
        "cls",
        [RequiredFieldMissing, EmptyListField, InvalidEnumValue, InvalidDate, InvalidTime, InvalidEmail, DanglingReference],
    )
    def test_validation_family(self, cls):
        assert issubclass(cls, ValidationError)

    @pytest.mark.parametrize("cls", [ReferenceCheckFailed, DuplicateBooking, ConnectionFailure])
    def test_non_validation_errors(self, cls):
        assert issubclass(cls, EventHubError)
        assert not issubclass(cls, ValidationError)

    def test_reference_errors_are_distinct(self):
        assert DanglingReference.error != ReferenceCheckFailed.error


class TestErrorResponse:

    def test_to_response(self):
        error = InvalidTime(error_code="TIME_FORMAT", value="25:00")
        response = error.to_response()
        assert isinstance(response, ErrorResponse)
        assert response.model_dump(exclude_none=True) == {
            "error": "invalid_time",
            "detail": "Invalid event time format",
            "error_code": "TIME_FORMAT",
            "context": {"value": "25:00"},
        }

    def test_to_response_without_context(self):
        response = DuplicateBooking().to_response()
        assert response.model_dump(exclude_none=True) == {
            "error": "duplicate_booking",
            "detail": "A booking for this event and email already exists",
        }

    def test_every_error_is_documented(self):
        import eventhub.errors as errors

        classes = [
            obj
            for obj in vars(errors).values()
            if isinstance(obj, type) and issubclass(obj, EventHubError)
        ]
        assert len(classes) == 14
        assert all(cls.__doc__ and cls.__doc__.strip() for cls in classes)
