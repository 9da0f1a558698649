"""Chat proxy that forwards to one configured LLM provider."""

__version__ = "1.0.0"
