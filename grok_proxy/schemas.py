from pydantic import BaseModel, Field
from typing import Any, List, Optional

DEFAULT_MODEL = "grok-2-1212"


class ChatRequest(BaseModel):
    # Only the messages list is checked (in main.parse_chat_request); its items and
    # model, temperature and max_tokens go upstream exactly as received.

    messages: List[Any]
    model: Any = Field(default=None)
    temperature: Any = Field(default=0.7)
    max_tokens: Any = Field(default=500)

    @property
    def upstream_model(self) -> Any:
        return self.model or DEFAULT_MODEL

    def upstream_messages(self) -> List[Any]:
        return list(self.messages)


class ChoiceMessage(BaseModel):
    role: str = "assistant"
    content: str


class Choice(BaseModel):
    message: ChoiceMessage


class ChatResponse(BaseModel):
    id: str
    object: str = "chat.completion"
    created: int
    # Echoes whatever the caller sent in mock mode
    model: Any
    choices: List[Choice]


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    message: Optional[str] = None


class DebugResponse(BaseModel):
    mock: bool
    hasGrokKey: bool
    hasOpenAIKey: bool
    hasRapidAPI: bool
    selectedBackend: Optional[str]
    note: str
