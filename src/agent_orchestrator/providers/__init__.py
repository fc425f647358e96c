"""LLM providers: pluggable backends for the agent orchestrator."""

from .anthropic_provider import AnthropicProvider
from .base import LLMProvider
from .ollama import OllamaProvider
from .openai_provider import OpenAIProvider

__all__ = [
    "LLMProvider",
    "AnthropicProvider",
    "OllamaProvider",
    "OpenAIProvider",
]
