"""Language-model provider adapter."""

from .client import ChatClient, LLMConfig, LLMResponse, build_messages, create_client

__all__ = [
    "ChatClient",
    "LLMConfig",
    "LLMResponse",
    "build_messages",
    "create_client",
]
