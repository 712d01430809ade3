"""
Relay Handler
=============

Orchestrates one enhancement request:

    Validator -> Mode Registry -> Upstream backend -> Error Classifier

State machine (per request, never shared):

    IDLE -> VALIDATING -> DISPATCHING -> COMPLETED
    IDLE -> VALIDATING -> REJECTED
    IDLE -> VALIDATING -> DISPATCHING -> FAILED

Invariants:
- Validation failures never reach the backend
- Exactly one backend call per dispatched request, never retried
- Terminal states (COMPLETED, REJECTED, FAILED) are never left
- The response timestamp is taken after the upstream call returns
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from inference import CompletionBackend

from .errors import ClassifiedError, classify, classify_exception, classify_validation
from .modes import lookup
from .schemas import EnhancementRequest, EnhancementResponse
from .validation import RequestValidationError, validate_request

logger = logging.getLogger(__name__)


class RelayState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    DISPATCHING = "dispatching"
    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"


TERMINAL_STATES = frozenset({RelayState.COMPLETED, RelayState.REJECTED, RelayState.FAILED})

_TRANSITIONS: Dict[RelayState, Tuple[RelayState, ...]] = {
    RelayState.IDLE: (RelayState.VALIDATING,),
    RelayState.VALIDATING: (RelayState.DISPATCHING, RelayState.REJECTED),
    RelayState.DISPATCHING: (RelayState.COMPLETED, RelayState.FAILED),
}


class InvalidTransition(RuntimeError):
    pass


@dataclass
class _Lifecycle:
    """State trail of a single request."""

    trail: List[RelayState] = field(default_factory=lambda: [RelayState.IDLE])

    @property
    def state(self) -> RelayState:
        return self.trail[-1]

    def advance(self, target: RelayState) -> None:
        if target not in _TRANSITIONS.get(self.state, ()):
            raise InvalidTransition(f"{self.state.value} -> {target.value}")
        self.trail.append(target)


@dataclass(frozen=True)
class RelayOutcome:
    """Terminal result of one request."""

    state: RelayState
    trail: Tuple[RelayState, ...]
    response: Optional[EnhancementResponse] = None
    error: Optional[ClassifiedError] = None

    @property
    def status_code(self) -> int:
        return self.error.http_status if self.error else 200

    def to_body(self) -> Dict[str, Any]:
        if self.error is not None:
            return self.error.to_body()
        if self.response is None:
            raise ValueError(f"outcome in state {self.state.value} has neither response nor error")
        return self.response.to_body()


def utc_timestamp() -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RelayHandler:
    """
    Single-route enhancement relay.

    Holds only immutable collaborators; safe for unlimited concurrent use.
    """

    def __init__(self, backend: CompletionBackend, expose_internal_errors: bool = False):
        """
        Args:
            backend: Upstream completion backend
            expose_internal_errors: Put local exception text in InternalError
                                    details (development only)
        """
        self.backend = backend
        self.expose_internal_errors = expose_internal_errors

    async def handle(self, payload: Any) -> RelayOutcome:
        lifecycle = _Lifecycle()
        lifecycle.advance(RelayState.VALIDATING)

        try:
            request = validate_request(payload)
        except RequestValidationError as e:
            lifecycle.advance(RelayState.REJECTED)
            logger.info(f"Rejected enhancement request: {e.code.value}")
            return self._finish(lifecycle, error=classify_validation(e.code, e.details))

        lifecycle.advance(RelayState.DISPATCHING)
        return await self._dispatch(lifecycle, request)

    async def _dispatch(self, lifecycle: _Lifecycle, request: EnhancementRequest) -> RelayOutcome:
        template = lookup(request.mode)

        try:
            completion = await self.backend.complete(template, request.prompt)
        except Exception as e:
            # Backends should not raise; treat escapes as local failures
            logger.error(f"Completion backend raised: {type(e).__name__}: {e}", exc_info=True)
            lifecycle.advance(RelayState.FAILED)
            return self._finish(
                lifecycle,
                error=classify_exception(e, expose_internal=self.expose_internal_errors),
            )

        if completion.status != "success" or completion.text is None:
            lifecycle.advance(RelayState.FAILED)
            failure = completion.failure
            if failure is None:
                error = classify_exception(
                    RuntimeError("backend returned no text"),
                    expose_internal=self.expose_internal_errors,
                )
            else:
                error = classify(failure, expose_internal=self.expose_internal_errors)
            logger.warning(
                f"Enhancement failed: {error.error_code.value} (HTTP {error.http_status})"
            )
            return self._finish(lifecycle, error=error)

        lifecycle.advance(RelayState.COMPLETED)
        response = EnhancementResponse(
            enhanced_prompt=completion.text,
            mode=request.mode.value,
            model_id=self.backend.model_id,
            original_length=len(request.prompt),
            enhanced_length=len(completion.text),
            usage=completion.usage.to_dict() if completion.usage else None,
            timestamp=utc_timestamp(),
        )
        return self._finish(lifecycle, response=response)

    @staticmethod
    def _finish(
        lifecycle: _Lifecycle,
        response: Optional[EnhancementResponse] = None,
        error: Optional[ClassifiedError] = None,
    ) -> RelayOutcome:
        return RelayOutcome(
            state=lifecycle.state,
            trail=tuple(lifecycle.trail),
            response=response,
            error=error,
        )
