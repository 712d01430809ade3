"""
FastAPI Application Entry Point

Integrates:
  - Prompt enhancement relay (POST /enhance)
  - Health check and service description
  - Middleware for CORS, logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 3000
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import CHROME_EXTENSION_ORIGIN_REGEX, VERSION, RelayConfig, get_config
from enhancer import ErrorBody, HealthChecker, RelayHandler, router as enhancer_router
from inference import CompletionBackend

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, details: str) -> JSONResponse:
    body = ErrorBody(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def create_app(config: RelayConfig, backend: Optional[CompletionBackend] = None) -> FastAPI:
    """
    Build the relay application.

    Args:
        config:  Immutable configuration, read once at startup
        backend: Upstream backend override (tests); defaults to config.create_backend()
    """
    backend = backend if backend is not None else config.create_backend()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan: startup and shutdown handlers.
        """
        # Startup
        logger.info("=" * 60)
        logger.info(f"Prompt Enhancer relay starting up (v{VERSION})")
        logger.info(f"Port: {config.port}")
        logger.info(f"Environment: {config.environment}")
        logger.info(f"Upstream backend: {backend.name} ({backend.model_id})")
        logger.info(f"Upstream API: {'Configured' if config.upstream_configured else 'Not configured'}")
        logger.info("=" * 60)

        yield

        # Shutdown
        logger.info("Prompt Enhancer relay shutting down...")

    app = FastAPI(
        title="Grok Prompt Enhancer API",
        description="Relay that rewrites prompts through an upstream completion model",
        version=VERSION,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.relay = RelayHandler(backend, expose_internal_errors=config.is_development)
    app.state.health_checker = HealthChecker(
        environment=config.environment,
        version=VERSION,
        upstream_configured=config.upstream_configured,
        backend=backend.name,
    )

    # Middleware for logging; catches anything the routes let escape
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests."""
        logger.debug(f"{request.method} {request.url.path}")
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error: {e}", exc_info=True)
            return _error_response(
                500,
                "Internal server error",
                str(e) if config.is_development else "Something went wrong",
            )

    # Added last so it wraps the logging middleware and error responses get headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_origin_regex=CHROME_EXTENSION_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown path or unsupported method on a known path: both are "not found"
        if exc.status_code in (404, 405):
            return _error_response(
                404,
                "Endpoint not found",
                f"Route {request.method} {request.url.path} does not exist",
            )
        return _error_response(exc.status_code, str(exc.detail), str(exc.detail))

    app.include_router(enhancer_router)
    return app


config = get_config()

# Setup logging
logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = create_app(config)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=config.port,
        reload=config.is_development,
    )
