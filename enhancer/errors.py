"""
Error Classifier
================

Maps every failure path of the relay onto a stable outward taxonomy.

The mapping is data, not control flow: upstream HTTP statuses and
transport failure kinds each have a lookup table, so every row can be
audited (and tested) on its own.

Invariants:
- An upstream 401 is never surfaced as 401 (caller is a client of the relay,
  not of the upstream API)
- Upstream auth details are never echoed back
- No stack traces in any ClassifiedError
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from inference.types import UpstreamFailure


class ErrorCode(str, Enum):
    """Outward error taxonomy."""

    # Client input (400)
    INVALID_PROMPT = "InvalidPrompt"
    PROMPT_TOO_LONG = "PromptTooLong"
    INVALID_MODE = "InvalidMode"

    # Operator / upstream / local
    CONFIGURATION_ERROR = "ConfigurationError"
    AUTHENTICATION_ERROR = "AuthenticationError"
    RATE_LIMITED = "RateLimited"
    INVALID_UPSTREAM_REQUEST = "InvalidUpstreamRequest"
    UPSTREAM_UNAVAILABLE = "UpstreamUnavailable"
    UPSTREAM_ERROR = "UpstreamError"
    REQUEST_TIMEOUT = "RequestTimeout"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    INTERNAL_ERROR = "InternalError"


# Short human label rendered as the "error" field of the response body
ERROR_LABELS: Mapping[ErrorCode, str] = {
    ErrorCode.INVALID_PROMPT: "Missing or invalid prompt",
    ErrorCode.PROMPT_TOO_LONG: "Prompt too long",
    ErrorCode.INVALID_MODE: "Missing or invalid mode",
    ErrorCode.CONFIGURATION_ERROR: "Server configuration error",
    ErrorCode.AUTHENTICATION_ERROR: "Authentication error",
    ErrorCode.RATE_LIMITED: "Rate limit exceeded",
    ErrorCode.INVALID_UPSTREAM_REQUEST: "Invalid request",
    ErrorCode.UPSTREAM_UNAVAILABLE: "Upstream unavailable",
    ErrorCode.UPSTREAM_ERROR: "Upstream API error",
    ErrorCode.REQUEST_TIMEOUT: "Request timeout",
    ErrorCode.SERVICE_UNAVAILABLE: "Service unavailable",
    ErrorCode.INTERNAL_ERROR: "Internal server error",
}


@dataclass(frozen=True)
class ClassifiedError:
    """Outward error: HTTP status, stable code, human-readable details."""

    http_status: int
    error_code: ErrorCode
    details: str

    @property
    def label(self) -> str:
        return ERROR_LABELS[self.error_code]

    def to_body(self) -> Dict[str, str]:
        """Flat JSON body returned to the caller."""
        return {
            "error": self.label,
            "code": self.error_code.value,
            "details": self.details,
        }


# ── Lookup Tables ─────────────────────────────────────────────────────────────
# (http_status, error_code, default details)

_Row = Tuple[int, ErrorCode, str]

VALIDATION_TABLE: Mapping[ErrorCode, int] = {
    ErrorCode.INVALID_PROMPT: 400,
    ErrorCode.PROMPT_TOO_LONG: 400,
    ErrorCode.INVALID_MODE: 400,
}

UPSTREAM_STATUS_TABLE: Mapping[int, _Row] = {
    401: (500, ErrorCode.AUTHENTICATION_ERROR, "Upstream API rejected the relay credentials"),
    429: (429, ErrorCode.RATE_LIMITED, "Too many requests to upstream API"),
    400: (400, ErrorCode.INVALID_UPSTREAM_REQUEST, "Bad request to upstream API"),
    503: (503, ErrorCode.UPSTREAM_UNAVAILABLE, "Upstream API is temporarily unavailable"),
}

# Any upstream status not listed above
UPSTREAM_STATUS_FALLBACK: Tuple[int, ErrorCode] = (500, ErrorCode.UPSTREAM_ERROR)

FAILURE_KIND_TABLE: Mapping[str, _Row] = {
    "missing_credential": (500, ErrorCode.CONFIGURATION_ERROR, "Upstream API key not configured"),
    "timeout": (408, ErrorCode.REQUEST_TIMEOUT, "Upstream API request timed out"),
    "connectivity": (503, ErrorCode.SERVICE_UNAVAILABLE, "Cannot connect to upstream API"),
    "unexpected": (500, ErrorCode.INTERNAL_ERROR, "Something went wrong"),
}

# Statuses whose upstream error message may be passed through as details
_PASSTHROUGH_STATUSES = frozenset({400})


def upstream_error_message(body: Any) -> Optional[str]:
    """Pull `error.message` out of an upstream error body, if present."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    elif isinstance(error, str) and error:
        return error
    return None


def classify_validation(code: ErrorCode, details: str) -> ClassifiedError:
    """Classify a request validation failure."""
    return ClassifiedError(
        http_status=VALIDATION_TABLE[code],
        error_code=code,
        details=details,
    )


def classify(failure: UpstreamFailure, expose_internal: bool = False) -> ClassifiedError:
    """
    Map a raw upstream failure onto a ClassifiedError.

    Args:
        failure: Raw failure signal returned by a completion backend
        expose_internal: Include local exception text in InternalError details
                         (development only)
    """
    if failure.kind == "http_status" and failure.status_code is not None:
        return _classify_status(failure)

    status, code, default_details = FAILURE_KIND_TABLE.get(
        failure.kind, FAILURE_KIND_TABLE["unexpected"]
    )
    details = default_details
    if code is ErrorCode.INTERNAL_ERROR and expose_internal and failure.message:
        details = failure.message
    return ClassifiedError(http_status=status, error_code=code, details=details)


def classify_exception(exc: BaseException, expose_internal: bool = False) -> ClassifiedError:
    """Classify a local exception that escaped the normal failure path."""
    return classify(
        UpstreamFailure(kind="unexpected", message=f"{type(exc).__name__}: {exc}"),
        expose_internal=expose_internal,
    )


def _classify_status(failure: UpstreamFailure) -> ClassifiedError:
    status_code = failure.status_code
    row = UPSTREAM_STATUS_TABLE.get(status_code)  # type: ignore[arg-type]

    if row is not None:
        status, code, details = row
        if status_code in _PASSTHROUGH_STATUSES:
            details = upstream_error_message(failure.body) or details
        return ClassifiedError(http_status=status, error_code=code, details=details)

    status, code = UPSTREAM_STATUS_FALLBACK
    details = upstream_error_message(failure.body) or f"HTTP {status_code} error"
    return ClassifiedError(http_status=status, error_code=code, details=details)
