"""
Relay HTTP routes.

Endpoints:
- GET  /health   status snapshot (no upstream call)
- GET  /         service description and supported modes
- POST /enhance  prompt enhancement

Collaborators (RelayHandler, HealthChecker, RelayConfig) are read from
app.state, where create_app() put them at startup.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from .health import HealthChecker
from .modes import describe_modes
from .relay import RelayHandler, utc_timestamp
from .schemas import ErrorBody
from .validation import LEGACY_MODE_ALIASES

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Prompt Enhancer"])


def get_relay(request: Request) -> RelayHandler:
    return request.app.state.relay


def get_health_checker(request: Request) -> HealthChecker:
    return request.app.state.health_checker


@router.get("/health")
async def health(request: Request) -> Dict[str, Any]:
    """Status snapshot, including whether an upstream credential is configured."""
    checker = get_health_checker(request)
    return checker.to_dict(checker.check())


@router.get("/")
async def root(request: Request) -> Dict[str, Any]:
    """Service description."""
    config = request.app.state.config
    return {
        "message": "Grok Prompt Enhancer API",
        "version": request.app.version,
        "environment": config.environment,
        "endpoints": {
            "health": "GET /health",
            "enhance": "POST /enhance",
        },
        "modes": describe_modes(),
        "aliases": {alias: mode.value for alias, mode in LEGACY_MODE_ALIASES.items()},
        "documentation": (
            "This API rewrites prompts through an upstream completion model. "
            "POST {prompt, mode} to /enhance."
        ),
        "timestamp": utc_timestamp(),
    }


@router.post(
    "/enhance",
    responses={
        400: {"model": ErrorBody},
        408: {"model": ErrorBody},
        429: {"model": ErrorBody},
        500: {"model": ErrorBody},
        503: {"model": ErrorBody},
    },
)
async def enhance(request: Request) -> JSONResponse:
    """
    Enhance a prompt.

    Expected payload:
    {
        "prompt": "fix my code",
        "mode": "quick-refine"     # or legacy "enhancementType": "quick"
    }

    Returns:
        200 with EnhancementResponse, or a flat {error, code, details} body
    """
    payload = await _read_json(request)
    outcome = await get_relay(request).handle(payload)
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_body())


async def _read_json(request: Request) -> Any:
    """Parse the body; malformed JSON behaves like an empty object."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.debug("Malformed JSON body on /enhance")
        return {}
