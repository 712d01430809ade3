from typing import TYPE_CHECKING, List, Optional, Tuple

from .base import CompletionBackend
from .types import CompletionResponse, TokenUsage, UpstreamFailure

if TYPE_CHECKING:
    from enhancer.modes import ModeTemplate

STUB_MODEL_ID = "stub/echo"


class StubCompletionBackend(CompletionBackend):
    """
    Deterministic fake upstream for local development and tests.

    Never touches the network. Records every call so tests can assert on
    call counts and the exact instruction/prompt pair that was dispatched.
    """

    name = "stub"

    def __init__(
        self,
        text: Optional[str] = None,
        usage: Optional[TokenUsage] = None,
        failure: Optional[UpstreamFailure] = None,
    ):
        """
        Args:
            text:    Fixed completion text; defaults to an echo of the prompt
            usage:   Token usage to report on success
            failure: When set, every call fails with this signal
        """
        self._text = text
        self._usage = usage
        self._failure = failure
        self.calls: List[Tuple[str, str]] = []

    @property
    def model_id(self) -> str:
        return STUB_MODEL_ID

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def complete(self, template: "ModeTemplate", user_prompt: str) -> CompletionResponse:
        self.calls.append((template.system_instruction, user_prompt))

        if self._failure is not None:
            return CompletionResponse.error(self._failure, backend="stub")

        text = self._text if self._text is not None else f"[{template.mode.value}] {user_prompt}"
        return CompletionResponse.success(text, usage=self._usage, backend="stub")
