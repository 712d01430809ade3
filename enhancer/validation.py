"""
Request Validator
=================

Turns a raw inbound payload into a normalized EnhancementRequest.

Mode normalization is two explicit, independently testable steps:
  1. normalize_mode(): legacy alias lookup (quick -> quick-refine, ...)
  2. parse_mode():     canonical enum validation

Every function here is pure: no I/O, no logging, no globals besides the
constant alias map.
"""

from typing import Any, Mapping, Optional

from .errors import ErrorCode
from .modes import Mode
from .schemas import EnhancementRequest

MAX_PROMPT_CHARS: int = 10000

LEGACY_MODE_ALIASES: Mapping[str, Mode] = {
    "quick": Mode.QUICK_REFINE,
    "advanced": Mode.THINK_MODE,
}

# Checked in order; the first key present wins
_MODE_FIELDS = ("mode", "enhancementType")


class RequestValidationError(Exception):
    """Inbound payload failed validation. Carries the outward error code."""

    def __init__(self, code: ErrorCode, details: str):
        self.code = code
        self.details = details
        super().__init__(f"{code.value}: {details}")


def resolve_mode_field(payload: Mapping[str, Any]) -> Optional[Any]:
    """Pick the mode value, preferring `mode` over legacy `enhancementType`."""
    for key in _MODE_FIELDS:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def normalize_mode(raw: Any) -> Any:
    """Map a legacy alias onto its canonical mode value; identity otherwise."""
    if isinstance(raw, str) and raw in LEGACY_MODE_ALIASES:
        return LEGACY_MODE_ALIASES[raw].value
    return raw


def parse_mode(value: Any) -> Mode:
    """
    Validate a (normalized) mode value against the canonical enum.

    Raises:
        RequestValidationError(INVALID_MODE)
    """
    if isinstance(value, str):
        try:
            return Mode(value)
        except ValueError:
            pass
    allowed = ", ".join(f'"{m.value}"' for m in Mode)
    raise RequestValidationError(
        ErrorCode.INVALID_MODE,
        f"Mode must be one of {allowed}",
    )


def validate_prompt(prompt: Any) -> str:
    """
    Raises:
        RequestValidationError(INVALID_PROMPT | PROMPT_TOO_LONG)
    """
    if not isinstance(prompt, str) or not prompt:
        raise RequestValidationError(
            ErrorCode.INVALID_PROMPT,
            "Prompt must be a non-empty string",
        )
    try:
        prompt.encode("utf-8")
    except UnicodeEncodeError:
        # e.g. a lone surrogate from a JSON "\ud800" escape
        raise RequestValidationError(
            ErrorCode.INVALID_PROMPT,
            "Prompt must be valid Unicode text",
        ) from None
    if len(prompt) > MAX_PROMPT_CHARS:
        raise RequestValidationError(
            ErrorCode.PROMPT_TOO_LONG,
            f"Prompt must be at most {MAX_PROMPT_CHARS:,} characters",
        )
    return prompt


def validate_request(payload: Any) -> EnhancementRequest:
    """
    Validate and normalize an inbound payload.

    Order: prompt presence, prompt length, then mode. The legacy `model`
    field is accepted and ignored; the upstream model is fixed.

    Raises:
        RequestValidationError: first failing check
    """
    if not isinstance(payload, Mapping):
        payload = {}

    prompt = validate_prompt(payload.get("prompt"))
    mode = parse_mode(normalize_mode(resolve_mode_field(payload)))
    return EnhancementRequest(prompt=prompt, mode=mode)
