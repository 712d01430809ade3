"""
OpenRouter-compatible chat-completion backend.

Invariants:
- Exactly one POST per complete() call; no retries
- No network I/O at all when the API key is missing
- The call is bounded by timeout_s even if the transport ignores timeouts
- The API key never appears in logs or in returned metadata
- Never raises: every failure becomes CompletionResponse(status="error")
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx

from .base import CompletionBackend
from .types import CompletionRequest, CompletionResponse, TokenUsage, UpstreamFailure

if TYPE_CHECKING:
    from enhancer.modes import ModeTemplate

logger = logging.getLogger(__name__)

# ── Fixed Outbound Parameters ─────────────────────────────────────────────────
UPSTREAM_MODEL_ID = "deepseek/deepseek-chat"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
MAX_TOKENS = 1500
TEMPERATURE = 0.7
TOP_P = 0.9
FREQUENCY_PENALTY = 0.1
PRESENCE_PENALTY = 0.1

_PLACEHOLDER_PREFIX = "your_"


def credential_present(api_key: Optional[str]) -> bool:
    """True for a real-looking key (not empty, not a `your_...` placeholder)."""
    return bool(api_key) and not api_key.startswith(_PLACEHOLDER_PREFIX)  # type: ignore[union-attr]


class OpenRouterBackend(CompletionBackend):
    """
    Upstream client for an OpenRouter-style /chat/completions endpoint.

    Flow:
      1. Fail fast with missing_credential if no API key
      2. Build CompletionRequest from the mode template + fixed parameters
      3. POST once, bounded by the template timeout (or the override)
      4. Return first choice text + usage, or the raw failure signal
    """

    name = "openrouter"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        referer: str = "",
        title: str = "",
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key:   Bearer credential; None/placeholder disables all calls
            base_url:  API root, without the /chat/completions suffix
            referer:   HTTP-Referer attribution header
            title:     X-Title attribution header
            timeout_s: Overrides every mode's timeout when set
            transport: httpx transport (unit-test hook, e.g. httpx.MockTransport)
        """
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.referer = referer
        self.title = title
        self.timeout_override = timeout_s
        self._transport = transport

    @property
    def model_id(self) -> str:
        return UPSTREAM_MODEL_ID

    @property
    def is_configured(self) -> bool:
        return credential_present(self._api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def build_request(self, template: "ModeTemplate", user_prompt: str) -> CompletionRequest:
        return CompletionRequest(
            model=UPSTREAM_MODEL_ID,
            system_instruction=template.system_instruction,
            user_prompt=user_prompt,
            max_tokens=MAX_TOKENS,
            temperature=TEMPERATURE,
            top_p=TOP_P,
            frequency_penalty=FREQUENCY_PENALTY,
            presence_penalty=PRESENCE_PENALTY,
            timeout_s=self.timeout_override or template.timeout_s,
        )

    def _build_headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        if self.title:
            headers["X-Title"] = self.title
        return headers

    async def complete(self, template: "ModeTemplate", user_prompt: str) -> CompletionResponse:
        base_metadata = {"backend": self.name, "model": UPSTREAM_MODEL_ID}

        if not self.is_configured:
            return CompletionResponse.error(
                UpstreamFailure(kind="missing_credential", message="API key not configured"),
                **base_metadata,
            )

        request = self.build_request(template, user_prompt)
        logger.info(f"Enhancing prompt with {request.model} ({template.mode.value})")

        try:
            response = await asyncio.wait_for(self._post(request), timeout=request.timeout_s)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.warning(f"Upstream request timed out after {request.timeout_s}s")
            return CompletionResponse.error(
                UpstreamFailure(kind="timeout", message=f"timed out after {request.timeout_s}s"),
                **base_metadata,
            )
        except (httpx.NetworkError, httpx.RemoteProtocolError) as e:
            logger.warning(f"Upstream connectivity failure: {type(e).__name__}")
            return CompletionResponse.error(
                UpstreamFailure(kind="connectivity", message=type(e).__name__),
                **base_metadata,
            )
        except Exception as e:
            logger.error(f"Upstream call failed: {type(e).__name__}: {e}")
            return CompletionResponse.error(
                UpstreamFailure(kind="unexpected", message=f"{type(e).__name__}: {e}"),
                **base_metadata,
            )

        if response.is_error:
            body = _safe_json(response)
            logger.warning(f"Upstream API error: HTTP {response.status_code}")
            return CompletionResponse.error(
                UpstreamFailure(
                    kind="http_status",
                    status_code=response.status_code,
                    message=f"HTTP {response.status_code}",
                    body=body,
                ),
                **base_metadata,
            )

        return self._parse_success(response, base_metadata)

    async def _post(self, request: CompletionRequest) -> httpx.Response:
        async with httpx.AsyncClient(timeout=request.timeout_s, transport=self._transport) as client:
            return await client.post(
                self.endpoint,
                json=request.to_payload(),
                headers=self._build_headers(),
            )

    @staticmethod
    def _parse_success(response: httpx.Response, metadata: Dict[str, Any]) -> CompletionResponse:
        """Extract the first choice's text and optional usage counters."""
        try:
            data = response.json()
            text = data["choices"][0]["message"]["content"]
            if not isinstance(text, str):
                raise TypeError(f"completion content is {type(text).__name__}, not str")
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Malformed upstream response: {type(e).__name__}: {e}")
            return CompletionResponse.error(
                UpstreamFailure(
                    kind="unexpected",
                    message=f"Malformed upstream response: {type(e).__name__}",
                ),
                **metadata,
            )

        usage = TokenUsage.from_payload(data.get("usage"))
        total = usage.total_tokens if usage and usage.total_tokens is not None else "unknown"
        logger.info(f"Successfully enhanced prompt. Tokens used: {total}")
        return CompletionResponse.success(text, usage=usage, **metadata)


def _safe_json(response: httpx.Response) -> Optional[Any]:
    try:
        return response.json()
    except ValueError:
        return None
