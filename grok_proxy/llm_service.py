from typing import Any, Dict, Optional

import httpx
import structlog
from openai import (
    APIStatusError,
    AsyncOpenAI,
    AuthenticationError,
    PermissionDeniedError,
)

from .config import Settings
from .errors import UpstreamRejection
from .schemas import ChatRequest
from .selector import Backend, select_backend
from .utils import (
    MOCK_MODEL,
    MOCK_TEXT,
    OPENAI_KEY_REJECTED_TEXT,
    OPENAI_MOCK_MODEL,
    OPENAI_UNREACHABLE_TEXT,
    canned_response,
    map_model_for_openai,
)

logger = structlog.get_logger()


# ---------------------------------------------------
# Base
# ---------------------------------------------------
class ChatBackend:
    """One upstream integration. `complete` returns the JSON body for a 200."""

    name: Backend

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.settings.UPSTREAM_TIMEOUT)
        return self._http_client

    async def complete(self, request: ChatRequest) -> Dict[str, Any]:
        raise NotImplementedError

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


class OpenAICompatibleBackend(ChatBackend):
    """Shared client setup for providers speaking the OpenAI wire format."""

    base_url: str
    api_key: Optional[str]

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(settings, http_client)
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            kwargs: Dict[str, Any] = {
                "api_key": self.api_key,
                "base_url": self.base_url,
                "max_retries": 0,
                "http_client": self.http_client,
            }
            if self.settings.UPSTREAM_TIMEOUT is not None:
                kwargs["timeout"] = self.settings.UPSTREAM_TIMEOUT
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def aclose(self) -> None:
        self._client = None
        await super().aclose()


# ---------------------------------------------------
# Providers
# ---------------------------------------------------
class MockBackend(ChatBackend):
    name = Backend.MOCK

    async def complete(self, request: ChatRequest) -> Dict[str, Any]:
        return canned_response("mock-1", request.model or MOCK_MODEL, MOCK_TEXT).model_dump()


class UnconfiguredBackend(ChatBackend):
    """Placeholder for `Backend.NONE`; the route refuses requests before dispatch."""

    name = Backend.NONE


class RapidAPIBackend(ChatBackend):
    name = Backend.RAPIDAPI

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.RAPIDAPI_KEY:
            headers["X-RapidAPI-Key"] = self.settings.RAPIDAPI_KEY
        if self.settings.RAPIDAPI_HOST:
            headers["X-RapidAPI-Host"] = self.settings.RAPIDAPI_HOST
        return headers

    async def complete(self, request: ChatRequest) -> Dict[str, Any]:
        payload = {
            "messages": request.upstream_messages(),
            "model": request.upstream_model,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }
        response = await self.http_client.post(
            self.settings.RAPIDAPI_URL, json=payload, headers=self._headers()
        )
        if response.is_error:
            logger.error("upstream_error", backend=self.name.value, status_code=response.status_code, body=response.text)
            raise UpstreamRejection("RapidAPI", response.status_code, response.reason_phrase, response.text)
        return response.json()


class OpenAIBackend(OpenAICompatibleBackend):
    name = Backend.OPENAI

    @property
    def base_url(self) -> str:
        return self.settings.OPENAI_BASE_URL

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.OPENAI_API_KEY

    async def complete(self, request: ChatRequest) -> Dict[str, Any]:
        model = map_model_for_openai(request.model)
        try:
            completion = await self.client.chat.completions.create(
                messages=request.upstream_messages(),
                model=model,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )
            return completion.to_dict()
        except (AuthenticationError, PermissionDeniedError) as e:
            logger.warning(
                "openai_key_rejected",
                status_code=e.status_code,
                hint="returning fallback response, rotate the OpenAI API key",
            )
            return canned_response(
                "fallback-openai-mock", OPENAI_MOCK_MODEL, OPENAI_KEY_REJECTED_TEXT
            ).model_dump()
        except APIStatusError as e:
            logger.error("upstream_error", backend=self.name.value, status_code=e.status_code, body=e.response.text)
            raise UpstreamRejection("OpenAI", e.status_code, e.response.reason_phrase, e.response.text)
        except Exception as e:
            logger.exception("openai_unreachable", error=str(e))
            return canned_response(
                "fallback-openai-error", OPENAI_MOCK_MODEL, OPENAI_UNREACHABLE_TEXT
            ).model_dump()


class GrokBackend(OpenAICompatibleBackend):
    # No fallback here: auth and transport failures surface to the caller.
    name = Backend.GROK

    @property
    def base_url(self) -> str:
        return self.settings.GROK_BASE_URL

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.GROK_API_KEY

    async def complete(self, request: ChatRequest) -> Dict[str, Any]:
        try:
            completion = await self.client.chat.completions.create(
                messages=request.upstream_messages(),
                model=request.upstream_model,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
                stream=False,
            )
        except APIStatusError as e:
            logger.error("upstream_error", backend=self.name.value, status_code=e.status_code, body=e.response.text)
            raise UpstreamRejection("Grok API", e.status_code, e.response.reason_phrase, e.response.text)
        return completion.to_dict()


BACKENDS = {
    Backend.MOCK: MockBackend,
    Backend.OPENAI: OpenAIBackend,
    Backend.RAPIDAPI: RapidAPIBackend,
    Backend.GROK: GrokBackend,
    Backend.NONE: UnconfiguredBackend,
}


def build_backend(settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> ChatBackend:
    """Resolve the backend once and instantiate its integration."""
    return BACKENDS[select_backend(settings)](settings, http_client)
