"""
Upstream boundary layer for prompt rewriting.

This package provides a clean abstraction over the completion API,
allowing the relay to remain agnostic of the concrete upstream.

Supported backends:
- StubCompletionBackend: Deterministic fake upstream (default for CI/tests)
- OpenRouterBackend: OpenRouter-compatible /chat/completions over httpx

Example usage:
    from enhancer.modes import Mode, lookup
    from inference import StubCompletionBackend

    backend = StubCompletionBackend()
    response = await backend.complete(lookup(Mode.QUICK_REFINE), "fix my code")
"""

from .types import (
    CompletionRequest,
    CompletionResponse,
    CompletionStatus,
    FailureKind,
    TokenUsage,
    UpstreamFailure,
)
from .base import CompletionBackend
from .stub import StubCompletionBackend
from .openrouter import OpenRouterBackend, UPSTREAM_MODEL_ID

__all__ = [
    "CompletionRequest",
    "CompletionResponse",
    "CompletionStatus",
    "FailureKind",
    "TokenUsage",
    "UpstreamFailure",
    "CompletionBackend",
    "StubCompletionBackend",
    "OpenRouterBackend",
    "UPSTREAM_MODEL_ID",
]
