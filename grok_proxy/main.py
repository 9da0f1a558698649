from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, get_settings
from .errors import ClientValidationError, ConfigurationError, ProxyError
from .llm_service import ChatBackend, build_backend
from .logging_conf import setup_logging
from .middlewares import log_requests
from .schemas import ChatRequest, ChatResponse, DebugResponse, ErrorResponse
from .selector import Backend
from .utils import INVALID_REQUEST_TEXT, NO_BACKEND_TEXT

logger = structlog.get_logger()

MOCK_NOTE = "Mock mode enabled. /api/grok returns canned responses."
FORWARD_NOTE = "Proxy will forward to configured backend (RapidAPI/OpenAI/Grok) when key is present."


def _error(exc: ProxyError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.error, details=exc.details).model_dump(exclude_none=True),
    )


def parse_chat_request(body) -> ChatRequest:
    """Validate an inbound body. Only a missing/empty `messages` list is a client error."""
    messages = body.get("messages") if isinstance(body, dict) else None
    if not isinstance(messages, list) or not messages:
        raise ClientValidationError(INVALID_REQUEST_TEXT)
    return ChatRequest.model_validate(body)


def create_app(settings: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, settings.APP_ENV)
    backend: ChatBackend = build_backend(settings, http_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "proxy_started",
            url=f"http://{settings.HOST}:{settings.PORT}",
            backend=backend.name.value,
        )
        if settings.OPENAI_API_KEY:
            logger.info("openai_key_present")
        if settings.RAPIDAPI_URL:
            logger.info("rapidapi_forwarding_enabled")
        if backend.name is Backend.NONE:
            logger.warning("no_backend_configured", hint=NO_BACKEND_TEXT)
        yield
        await backend.aclose()

    app = FastAPI(title=settings.APP_NAME, version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.backend = backend

    # ---------------------------------------------------
    # CORS
    # ---------------------------------------------------
    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if origins == ["*"] else origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)

    # ---------------------------------------------------
    # Routes
    # ---------------------------------------------------
    @app.get("/")
    async def root():
        """Root metadata endpoint."""
        return {
            "service": settings.APP_NAME,
            "version": __version__,
            "status": "running",
            "endpoints": {
                "chat": "/api/grok (POST)",
                "health": "/api/health (GET)",
                "debug": "/api/grok/debug (GET)",
            },
        }

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "service": settings.APP_NAME}

    @app.post(
        "/api/grok",
        response_model=None,
        responses={
            200: {"model": ChatResponse},
            400: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
    )
    async def grok(request: Request):
        """
        Chat endpoint:
        - Rejects everything when no backend is configured
        - Validates the messages list, in mock mode too: a body without
          messages gets 400 rather than the canned reply
        - Forwards to the backend chosen at startup and relays its answer
        """
        try:
            if backend.name is Backend.NONE:
                raise ConfigurationError(NO_BACKEND_TEXT)

            raw = await request.body()
            body = await request.json() if raw else {}
            chat_request = parse_chat_request(body)

            data = await backend.complete(chat_request)
            return JSONResponse(content=data)

        except ClientValidationError as e:
            logger.warning("validation_error", error=e.error)
            return _error(e)
        except ProxyError as e:
            logger.error("proxy_error", error=e.error, status_code=e.status_code)
            return _error(e)
        except Exception as e:
            logger.exception("proxy_internal_error", error=str(e))
            return JSONResponse(
                status_code=500,
                content=ErrorResponse(error="Internal server error", message=str(e)).model_dump(exclude_none=True),
            )

    @app.get("/api/grok/debug", response_model=DebugResponse)
    async def debug():
        """Which signals are present (never their values) and the chosen backend."""
        return DebugResponse(
            mock=settings.GROK_MOCK,
            hasGrokKey=bool(settings.GROK_API_KEY),
            hasOpenAIKey=bool(settings.OPENAI_API_KEY),
            hasRapidAPI=bool(settings.RAPIDAPI_URL),
            selectedBackend=None if backend.name is Backend.NONE else backend.name.value,
            note=MOCK_NOTE if settings.GROK_MOCK else FORWARD_NOTE,
        )

    return app


app = create_app()
