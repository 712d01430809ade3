from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .types import CompletionResponse

if TYPE_CHECKING:
    from enhancer.modes import ModeTemplate


class CompletionBackend(ABC):
    """
    Abstract upstream boundary.
    Relay code must depend ONLY on this interface.

    Implementations never raise for upstream failures: they return
    CompletionResponse(status="error") carrying the raw UpstreamFailure.
    """

    name: str = "abstract"

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Identifier of the model that produces completions."""
        raise NotImplementedError

    @property
    def is_configured(self) -> bool:
        """True when the backend has everything it needs to make a call."""
        return True

    @abstractmethod
    async def complete(self, template: "ModeTemplate", user_prompt: str) -> CompletionResponse:
        """Rewrite user_prompt under template's system instruction (one call, no retry)."""
        raise NotImplementedError
