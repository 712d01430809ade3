from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

CompletionStatus = Literal["success", "error"]

# missing_credential | http_status | timeout | connectivity | unexpected
FailureKind = Literal["missing_credential", "http_status", "timeout", "connectivity", "unexpected"]


@dataclass(frozen=True)
class CompletionRequest:
    """One upstream chat-completion call. Built fresh per request."""

    model: str
    system_instruction: str
    user_prompt: str
    max_tokens: int
    temperature: float
    top_p: float
    frequency_penalty: float
    presence_penalty: float
    timeout_s: float

    def to_payload(self) -> Dict[str, Any]:
        """Upstream JSON body."""
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_instruction},
                {"role": "user", "content": self.user_prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
        }


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["TokenUsage"]:
        """Parse the upstream `usage` object; None when absent or malformed."""
        if not isinstance(payload, dict):
            return None

        def count(key: str) -> Optional[int]:
            value = payload.get(key)
            return value if isinstance(value, int) and not isinstance(value, bool) else None

        return cls(
            prompt_tokens=count("prompt_tokens"),
            completion_tokens=count("completion_tokens"),
            total_tokens=count("total_tokens"),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            key: value
            for key, value in (
                ("prompt_tokens", self.prompt_tokens),
                ("completion_tokens", self.completion_tokens),
                ("total_tokens", self.total_tokens),
            )
            if value is not None
        }


@dataclass(frozen=True)
class UpstreamFailure:
    """Raw failure signal. Interpretation belongs to the error classifier."""

    kind: FailureKind
    status_code: Optional[int] = None
    message: str = ""
    body: Optional[Any] = None


@dataclass(frozen=True)
class CompletionResponse:
    status: CompletionStatus
    text: Optional[str] = None
    usage: Optional[TokenUsage] = None
    failure: Optional[UpstreamFailure] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, text: str, usage: Optional[TokenUsage] = None, **metadata: Any) -> "CompletionResponse":
        return cls(status="success", text=text, usage=usage, metadata=metadata)

    @classmethod
    def error(cls, failure: UpstreamFailure, **metadata: Any) -> "CompletionResponse":
        return cls(status="error", failure=failure, metadata=metadata)
