"""Pytest configuration and shared fixtures"""

from typing import Callable, List

import httpx
import pytest

from grok_proxy.config import Settings
from grok_proxy.main import create_app


def make_settings(**overrides) -> Settings:
    """Settings isolated from the host environment and any `.env` file."""
    values = {
        "GROK_MOCK": False,
        "OPENAI_API_KEY": None,
        "RAPIDAPI_URL": None,
        "RAPIDAPI_KEY": None,
        "RAPIDAPI_HOST": None,
        "GROK_API_KEY": None,
        "UPSTREAM_TIMEOUT": None,
        "APP_ENV": "test",
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class Upstream:
    """Records outbound requests and answers them with a canned handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def completion_body(content: str = "Box box!", model: str = "gpt-4o-mini") -> dict:
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


@pytest.fixture
def messages() -> list:
    return [{"role": "user", "content": "hi"}]


@pytest.fixture
async def build_client():
    """Factory returning an in-process HTTP client for an app built from the given settings."""
    clients: List[httpx.AsyncClient] = []

    def _build(settings: Settings, upstream: Upstream = None) -> httpx.AsyncClient:
        if upstream is not None:
            clients.append(upstream.client())
        app = create_app(settings, http_client=clients[-1] if upstream is not None else None)
        client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _build

    for client in clients:
        await client.aclose()
