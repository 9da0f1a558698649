import time
from typing import Any, Optional

from .schemas import ChatResponse, Choice, ChoiceMessage

OPENAI_FALLBACK_MODEL = "gpt-4o-mini"
MOCK_MODEL = "grok-mock"
OPENAI_MOCK_MODEL = "openai-fallback-mock"

MOCK_TEXT = (
    "[MOCK] This is a local mock response. "
    "Your Grok account may need credits to get real responses."
)
OPENAI_KEY_REJECTED_TEXT = (
    "[FALLBACK] OpenAI API key invalid or disabled. The server returned a fallback "
    "mock response so the UI keeps functioning. Please rotate your OpenAI API key."
)
OPENAI_UNREACHABLE_TEXT = (
    "[FALLBACK] Unable to reach OpenAI service. "
    "Returning mock response to keep UI functional."
)

NO_BACKEND_TEXT = (
    "No AI backend configured. Please set OPENAI_API_KEY, GROK_API_KEY "
    "(or VITE_GROK_API_KEY), or RAPIDAPI_URL in your .env, "
    "or enable GROK_MOCK=true for local development."
)
INVALID_REQUEST_TEXT = "Invalid request: messages array is required"


def map_model_for_openai(model_name: Optional[str]) -> str:
    """Return a model name the OpenAI endpoint will accept."""
    if not model_name:
        return OPENAI_FALLBACK_MODEL
    low = str(model_name).lower()

    # Already OpenAI-style: keep the caller's spelling
    if low.startswith("gpt-") or low.startswith("gpt_") or "openai" in low:
        return model_name

    if "grok" in low:
        return OPENAI_FALLBACK_MODEL

    return OPENAI_FALLBACK_MODEL


def now_ms() -> int:
    return int(time.time() * 1000)


def canned_response(id: str, model: Any, content: str) -> ChatResponse:
    return ChatResponse(
        id=id,
        created=now_ms(),
        model=model,
        choices=[Choice(message=ChoiceMessage(role="assistant", content=content))],
    )
