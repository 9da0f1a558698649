"""Unit tests for model name mapping and canned responses"""

import pytest

from grok_proxy.utils import canned_response, map_model_for_openai


class TestMapModelForOpenAI:
    """Test the OpenAI model name mapper"""

    @pytest.mark.parametrize("name", ["GPT-4", "gpt-4o", "gpt_4_turbo", "my-openai-finetune", "OpenAI/gpt"])
    def test_openai_names_unchanged(self, name):
        """OpenAI-style names keep the caller's spelling"""
        assert map_model_for_openai(name) == name

    @pytest.mark.parametrize("name", [None, "", "grok-2-1212", "GROK-beta", "llama-3", "claude-3", "gpt4"])
    def test_everything_else_falls_back(self, name):
        """Absent, grok and unknown names map to the fixed default"""
        assert map_model_for_openai(name) == "gpt-4o-mini"


class TestCannedResponse:
    """Test synthesized chat responses"""

    def test_shape(self):
        """A canned response looks like a chat completion"""
        data = canned_response("mock-1", "grok-mock", "hello").model_dump()

        assert data["id"] == "mock-1"
        assert data["object"] == "chat.completion"
        assert data["model"] == "grok-mock"
        assert isinstance(data["created"], int)
        assert data["choices"] == [{"message": {"role": "assistant", "content": "hello"}}]
