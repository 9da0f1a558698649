"""
Async client for the proxy's `/api/grok` endpoint.

Mirrors what a UI does with the service: send a system prompt plus the user's
text and read back `choices[0].message.content`.
"""
from typing import Any, Dict, Optional

import httpx
import structlog

from .schemas import DEFAULT_MODEL

logger = structlog.get_logger()

API_ENDPOINT = "/api/grok"
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant integrated into an F1 racing platform avatar. "
    "Keep responses concise, engaging, and relevant to Formula 1 when appropriate. "
    "Use natural conversational language suitable for text-to-speech."
)


class ProxyClientError(Exception):
    pass


def _extract_reply(data: Dict[str, Any]) -> str:
    if not isinstance(data, dict):
        return ""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    return content or data.get("reply") or ""


class ProxyClient:
    def __init__(self, base_url: str = "http://localhost:3001", http_client: Optional[httpx.AsyncClient] = None):
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(base_url=base_url)

    async def __aenter__(self) -> "ProxyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def ask(
        self,
        prompt: str,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 500,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> str:
        """Send one prompt and return the reply text, stripped."""
        payload = {
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": False,
        }
        try:
            response = await self._client.post(API_ENDPOINT, json=payload)
        except httpx.TransportError as e:
            logger.error("proxy_unreachable", error=str(e))
            raise ProxyClientError("Unable to connect to AI service. Please check your connection.") from e

        if response.is_error:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            if not isinstance(error_data, dict):
                error_data = {}
            status_msg = error_data.get("error") or f"API request failed: {response.status_code}"
            details = error_data.get("details")
            raise ProxyClientError(f"{status_msg} - details: {details}" if details else status_msg)

        reply = _extract_reply(response.json())
        if not reply:
            raise ProxyClientError("Empty response from Grok")
        return reply.strip()

    async def check_connection(self) -> bool:
        try:
            reply = await self.ask("Hello", max_tokens=10)
        except ProxyClientError as e:
            logger.warning("connection_test_failed", error=str(e))
            return False
        return len(reply) > 0
