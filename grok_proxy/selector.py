from enum import Enum

from .config import Settings


class Backend(str, Enum):
    MOCK = "mock"
    OPENAI = "openai"
    RAPIDAPI = "rapidapi"
    GROK = "grok"
    NONE = "none"


def select_backend(settings: Settings) -> Backend:
    """
    Pick the single upstream for the whole process.

    First match wins: mock flag, OpenAI key, RapidAPI URL, Grok key.
    Empty strings count as absent.
    """
    if settings.GROK_MOCK:
        return Backend.MOCK
    if settings.OPENAI_API_KEY:
        return Backend.OPENAI
    if settings.RAPIDAPI_URL:
        return Backend.RAPIDAPI
    if settings.GROK_API_KEY:
        return Backend.GROK
    return Backend.NONE
