"""
tests/unit/test_error_classifier.py

Every row of the error mapping tables, plus details handling.

Verifies:
✔ Upstream 401 -> 500 AuthenticationError (never 401)
✔ 429 / 400 / 503 / other statuses map per table
✔ timeout -> 408, connectivity -> 503, missing credential -> 500
✔ Upstream error.message passed through only where allowed
✔ InternalError details hidden unless exposure is enabled
"""

import pytest

from enhancer.errors import (
    ERROR_LABELS,
    ErrorCode,
    classify,
    classify_exception,
    classify_validation,
    upstream_error_message,
)
from inference.types import UpstreamFailure


def http_failure(status, body=None):
    return UpstreamFailure(kind="http_status", status_code=status, body=body)


class TestStatusTable:
    @pytest.mark.parametrize("upstream, http_status, code", [
        (401, 500, ErrorCode.AUTHENTICATION_ERROR),
        (429, 429, ErrorCode.RATE_LIMITED),
        (400, 400, ErrorCode.INVALID_UPSTREAM_REQUEST),
        (503, 503, ErrorCode.UPSTREAM_UNAVAILABLE),
        (402, 500, ErrorCode.UPSTREAM_ERROR),
        (403, 500, ErrorCode.UPSTREAM_ERROR),
        (404, 500, ErrorCode.UPSTREAM_ERROR),
        (500, 500, ErrorCode.UPSTREAM_ERROR),
        (502, 500, ErrorCode.UPSTREAM_ERROR),
    ])
    def test_row(self, upstream, http_status, code):
        error = classify(http_failure(upstream))
        assert error.http_status == http_status
        assert error.error_code is code

    def test_401_never_exposed(self):
        body = {"error": {"message": "Invalid API key sk-or-abc"}}
        error = classify(http_failure(401, body))
        assert error.http_status != 401
        assert "sk-or-abc" not in error.details

    def test_rate_limited_exact(self):
        error = classify(http_failure(429))
        assert (error.http_status, error.error_code.value) == (429, "RateLimited")

    def test_400_passes_upstream_message(self):
        error = classify(http_failure(400, {"error": {"message": "context length exceeded"}}))
        assert error.details == "context length exceeded"

    def test_400_default_details(self):
        assert classify(http_failure(400, None)).details == "Bad request to upstream API"

    def test_other_status_uses_message_or_status(self):
        assert classify(http_failure(502, {"error": {"message": "bad gateway"}})).details == "bad gateway"
        assert classify(http_failure(502, "<html>")).details == "HTTP 502 error"


class TestFailureKindTable:
    @pytest.mark.parametrize("kind, http_status, code", [
        ("missing_credential", 500, ErrorCode.CONFIGURATION_ERROR),
        ("timeout", 408, ErrorCode.REQUEST_TIMEOUT),
        ("connectivity", 503, ErrorCode.SERVICE_UNAVAILABLE),
        ("unexpected", 500, ErrorCode.INTERNAL_ERROR),
    ])
    def test_row(self, kind, http_status, code):
        error = classify(UpstreamFailure(kind=kind))
        assert error.http_status == http_status
        assert error.error_code is code

    def test_internal_details_hidden_by_default(self):
        error = classify(UpstreamFailure(kind="unexpected", message="KeyError: 'choices'"))
        assert error.details == "Something went wrong"

    def test_internal_details_exposed_when_enabled(self):
        error = classify(
            UpstreamFailure(kind="unexpected", message="KeyError: 'choices'"),
            expose_internal=True,
        )
        assert error.details == "KeyError: 'choices'"

    def test_exposure_does_not_affect_other_kinds(self):
        error = classify(UpstreamFailure(kind="timeout", message="raw"), expose_internal=True)
        assert error.details == "Upstream API request timed out"

    def test_classify_exception(self):
        error = classify_exception(ValueError("boom"), expose_internal=True)
        assert error.error_code is ErrorCode.INTERNAL_ERROR
        assert error.details == "ValueError: boom"


class TestValidationAndBody:
    @pytest.mark.parametrize("code", [
        ErrorCode.INVALID_PROMPT,
        ErrorCode.PROMPT_TOO_LONG,
        ErrorCode.INVALID_MODE,
    ])
    def test_validation_codes_are_400(self, code):
        assert classify_validation(code, "bad").http_status == 400

    def test_every_code_has_a_label(self):
        assert set(ERROR_LABELS) == set(ErrorCode)

    def test_body_is_flat(self):
        body = classify(http_failure(429)).to_body()
        assert body == {
            "error": "Rate limit exceeded",
            "code": "RateLimited",
            "details": "Too many requests to upstream API",
        }
        assert all(isinstance(v, str) for v in body.values())


class TestUpstreamErrorMessage:
    @pytest.mark.parametrize("body, expected", [
        ({"error": {"message": "nope"}}, "nope"),
        ({"error": "plain"}, "plain"),
        ({"error": {"code": 400}}, None),
        ({}, None),
        (None, None),
        ("text", None),
    ])
    def test_extraction(self, body, expected):
        assert upstream_error_message(body) == expected
