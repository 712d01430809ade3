"""Prompt enhancement relay - Module Exports"""

from .errors import ClassifiedError, ErrorCode, classify, classify_validation
from .health import HealthChecker, HealthStatus
from .modes import Mode, ModeTemplate, all_templates, lookup
from .relay import RelayHandler, RelayOutcome, RelayState
from .router import router
from .schemas import EnhancementRequest, EnhancementResponse, ErrorBody
from .validation import (
    LEGACY_MODE_ALIASES,
    MAX_PROMPT_CHARS,
    RequestValidationError,
    normalize_mode,
    parse_mode,
    resolve_mode_field,
    validate_request,
)

__all__ = [
    # Modes
    "Mode",
    "ModeTemplate",
    "lookup",
    "all_templates",
    # Validation
    "validate_request",
    "resolve_mode_field",
    "normalize_mode",
    "parse_mode",
    "RequestValidationError",
    "LEGACY_MODE_ALIASES",
    "MAX_PROMPT_CHARS",
    # Errors
    "ErrorCode",
    "ClassifiedError",
    "classify",
    "classify_validation",
    # Relay
    "RelayHandler",
    "RelayOutcome",
    "RelayState",
    # Schemas
    "EnhancementRequest",
    "EnhancementResponse",
    "ErrorBody",
    # Health
    "HealthChecker",
    "HealthStatus",
    # Router
    "router",
]
