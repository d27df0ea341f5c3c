"""Tests for errors module."""

from modelfusion.errors import (
    AbortError,
    ApiCallError,
    ErrorClass,
    JSONParseError,
    ModelFusionError,
    RetryError,
    RetryReason,
    StructureValidationError,
    ToolCallGenerationError,
    ToolExecutionError,
    TypeValidationError,
    classify_http_status,
    extract_error_message,
    is_retryable,
)


class TestApiCallError:
    """Tests for ApiCallError."""

    def test_rate_limit_is_retryable(self) -> None:
        """Test that 429 responses are retryable by default."""
        error = ApiCallError("Too many requests", url="https://api.test/v1", status_code=429)
        assert error.is_retryable is True

    def test_server_error_is_retryable(self) -> None:
        """Test that 5xx responses are retryable by default."""
        error = ApiCallError("Boom", url="https://api.test/v1", status_code=503)
        assert error.is_retryable is True

    def test_client_error_not_retryable(self) -> None:
        """Test that 4xx responses are not retryable by default."""
        error = ApiCallError("Bad request", url="https://api.test/v1", status_code=400)
        assert error.is_retryable is False

    def test_transport_error_not_retryable_by_default(self) -> None:
        """Test that errors without status are not retryable unless flagged."""
        error = ApiCallError("Connection reset", url="https://api.test/v1")
        assert error.is_retryable is False

    def test_explicit_retryable_overrides_status(self) -> None:
        """Test explicit is_retryable flag."""
        error = ApiCallError(
            "Bad request", url="https://api.test/v1", status_code=400, is_retryable=True
        )
        assert error.is_retryable is True

    def test_cause_and_to_dict(self) -> None:
        """Test cause chaining and serialization."""
        cause = ValueError("bad json")
        error = ApiCallError(
            "Invalid JSON response",
            url="https://api.test/v1",
            request_body_values={"prompt": "hi"},
            status_code=200,
            response_body="{",
            cause=cause,
        )
        assert error.cause is cause
        data = error.to_dict()
        assert data["name"] == "ApiCallError"
        assert data["message"] == "Invalid JSON response"
        assert data["request_body_values"] == {"prompt": "hi"}
        assert data["response_body"] == "{"

    def test_is_modelfusion_error(self) -> None:
        """Test error hierarchy."""
        error = ApiCallError("x", url="u")
        assert isinstance(error, ModelFusionError)
        assert "[api]" in str(error)


class TestRetryError:
    """Tests for RetryError."""

    def test_last_error(self) -> None:
        """Test that last_error is the final attempt's error."""
        first = ApiCallError("first", url="u", status_code=500)
        second = ApiCallError("second", url="u", status_code=500)
        error = RetryError(
            "Failed after 2 attempt(s)",
            reason=RetryReason.MAX_TRIES_EXCEEDED,
            errors=[first, second],
        )
        assert error.last_error is second
        assert error.reason == RetryReason.MAX_TRIES_EXCEEDED
        assert error.errors == [first, second]


class TestSimpleErrors:
    """Tests for the remaining error types."""

    def test_abort_error_default_message(self) -> None:
        """Test AbortError message and reason."""
        error = AbortError(reason="user")
        assert error.message == "Call was aborted."
        assert error.reason == "user"

    def test_type_validation_error(self) -> None:
        """Test TypeValidationError keeps value and cause."""
        cause = ValueError("not an int")
        error = TypeValidationError(value={"a": "x"}, cause=cause)
        assert error.value == {"a": "x"}
        assert error.cause is cause

    def test_json_parse_error(self) -> None:
        """Test JSONParseError keeps the text."""
        error = JSONParseError(text="{oops", cause=ValueError("bad"))
        assert error.text == "{oops"

    def test_structure_validation_error(self) -> None:
        """Test StructureValidationError fields."""
        cause = ValueError("missing field")
        error = StructureValidationError(value_text='{"a": 1}', value={"a": 1}, cause=cause)
        assert error.value == {"a": 1}
        assert error.value_text == '{"a": 1}'
        assert error.cause is cause

    def test_tool_call_generation_error_with_message(self) -> None:
        """Test ToolCallGenerationError accepts a plain message."""
        error = ToolCallGenerationError("calculator", "The model did not generate a tool call.")
        assert error.tool_name == "calculator"
        assert "did not generate" in error.message

    def test_tool_execution_error(self) -> None:
        """Test ToolExecutionError fields."""
        cause = ZeroDivisionError("division by zero")
        error = ToolExecutionError("calculator", {"a": 1, "b": 0}, cause)
        assert error.tool_name == "calculator"
        assert error.input == {"a": 1, "b": 0}
        assert error.cause is cause


class TestClassification:
    """Tests for HTTP status classification."""

    def test_status_mapping(self) -> None:
        """Test standard status codes."""
        assert classify_http_status(400) == ErrorClass.INVALID_REQUEST
        assert classify_http_status(401) == ErrorClass.AUTHENTICATION
        assert classify_http_status(429) == ErrorClass.RATE_LIMITED
        assert classify_http_status(503) == ErrorClass.OVERLOADED
        assert classify_http_status(418) == ErrorClass.INVALID_REQUEST
        assert classify_http_status(599) == ErrorClass.SERVER_ERROR

    def test_quota_exhausted(self) -> None:
        """Test that 429 with quota text is not a rate limit."""
        body = {"error": {"message": "You exceeded your current quota", "type": "x"}}
        assert classify_http_status(429, body) == ErrorClass.QUOTA_EXHAUSTED
        assert not is_retryable(ErrorClass.QUOTA_EXHAUSTED)

    def test_retryable_classes(self) -> None:
        """Test retryable classes."""
        assert is_retryable(ErrorClass.RATE_LIMITED)
        assert is_retryable(ErrorClass.SERVER_ERROR)
        assert not is_retryable(ErrorClass.AUTHENTICATION)

    def test_extract_error_message(self) -> None:
        """Test common error envelopes."""
        assert extract_error_message({"error": {"message": "a"}}) == "a"
        assert extract_error_message({"error": "b"}) == "b"
        assert extract_error_message({"message": "c"}) == "c"
        assert extract_error_message({"detail": "d"}) == "d"
        assert extract_error_message({}) is None
        assert extract_error_message(None) is None
