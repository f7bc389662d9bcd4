"""Tests for application errors."""
import pytest
from sqlalchemy.exc import OperationalError

from humidor_club.core.errors import (
    ErrorCode,
    InsufficientQuantityError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    translate_persistence_errors,
)


class TestErrorBodies:
    def test_validation_error_includes_details(self):
        error = ValidationError("Quantity exceeds available quantity (5)", {"limit": 5, "requested": 6})

        assert error.status_code == 400
        assert error.to_dict() == {
            "detail": "Quantity exceeds available quantity (5)",
            "code": "VALIDATION_ERROR",
            "details": {"limit": 5, "requested": 6},
        }

    def test_details_omitted_when_empty(self):
        assert "details" not in UnauthorizedError().to_dict()

    def test_not_found_names_resource(self):
        error = NotFoundError("Listing")
        assert error.message == "Listing not found"
        assert error.status_code == 404

    def test_insufficient_quantity(self):
        error = InsufficientQuantityError(requested=3, available=1)

        assert error.code == ErrorCode.INSUFFICIENT_QUANTITY
        assert error.status_code == 422
        assert error.details == {"requested": 3, "available": 1}

    def test_unauthorized_sets_bearer_challenge(self):
        assert UnauthorizedError().headers == {"WWW-Authenticate": "Bearer"}


class TestTranslatePersistenceErrors:
    async def test_database_errors_become_internal(self):
        @translate_persistence_errors("test.operation")
        async def failing():
            raise OperationalError("SELECT 1", {}, Exception("connection lost"))

        with pytest.raises(InternalError) as exc_info:
            await failing()

        assert "connection lost" not in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, OperationalError)

    async def test_app_errors_pass_through(self):
        @translate_persistence_errors("test.operation")
        async def failing():
            raise NotFoundError("Cigar")

        with pytest.raises(NotFoundError):
            await failing()

    async def test_result_is_returned(self):
        @translate_persistence_errors("test.operation")
        async def succeeding(value):
            return value * 2

        assert await succeeding(21) == 42
