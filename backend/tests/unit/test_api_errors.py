"""Tests for API error classes."""

from clubhub.core.errors import (
    AccessDeniedError,
    APIError,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)


class TestAPIError:
    """Tests for base APIError class."""

    def test_api_error_has_required_attributes(self):
        error = APIError(
            code="TEST_ERROR",
            message="Test message",
            status_code=418,
            details=[{"field": "test"}],
        )
        assert error.code == "TEST_ERROR"
        assert error.message == "Test message"
        assert error.status_code == 418
        assert error.details == [{"field": "test"}]

    def test_api_error_defaults_to_500(self):
        assert APIError(code="TEST", message="Test").status_code == 500

    def test_api_error_is_exception(self):
        error = APIError(code="TEST", message="Test")
        assert isinstance(error, Exception)
        assert str(error) == "Test"


class TestErrorSubclasses:
    """Status and code of each error kind."""

    def test_validation_error(self):
        error = ValidationError("bad", details=[{"loc": ["body"]}])
        assert (error.status_code, error.code) == (400, "VALIDATION_ERROR")
        assert error.details == [{"loc": ["body"]}]

    def test_access_denied(self):
        error = AccessDeniedError()
        assert (error.status_code, error.code) == (403, "ACCESS_DENIED")
        assert error.message == "Access denied"

    def test_not_found_names_resource(self):
        error = NotFoundError("Site", "chess")
        assert (error.status_code, error.code) == (404, "NOT_FOUND")
        assert error.message == "Site 'chess' not found"

    def test_not_found_without_id(self):
        assert NotFoundError("App shell").message == "App shell not found"

    def test_conflict_is_400_site_exists(self):
        error = ConflictError()
        assert (error.status_code, error.code) == (400, "SITE_EXISTS")

    def test_upstream_failure(self):
        error = UpstreamError()
        assert (error.status_code, error.code) == (500, "UPSTREAM_FAILURE")
