"""LLM facade: provider resolution and the chat call used by the agent loop."""

from __future__ import annotations

from typing import Any, Tuple

from .config import DEFAULT_MODEL
from .errors import UpstreamError
from .models import Message
from .providers import (
    AnthropicProvider,
    LLMProvider,
    OllamaProvider,
    OpenAIProvider,
)

_provider_cache: dict[str, LLMProvider] = {}


def _split_model(model: str | None) -> Tuple[str, str]:
    """Split "provider:model_name" into its parts; no colon means Ollama."""
    effective_model = (model or DEFAULT_MODEL).strip()
    if ":" in effective_model:
        provider_name, raw_model = effective_model.split(":", 1)
        return provider_name.strip().lower(), raw_model.strip()
    return "ollama", effective_model


def _get_provider_for_model(model: str | None) -> Tuple[LLMProvider, str]:
    """
    Resolve provider and underlying model name from a model string.

    Expected formats:
    - "provider:model_name" (e.g. "anthropic:claude-3-5-sonnet-20241022", "openai:gpt-4.1-nano")
    - "model_name" (no colon) → treated as an Ollama model.
    """
    provider_name, model_name = _split_model(model)

    if provider_name not in _provider_cache:
        if provider_name in ("anthropic", "claude"):
            _provider_cache[provider_name] = AnthropicProvider()
        elif provider_name == "openai":
            _provider_cache[provider_name] = OpenAIProvider()
        elif provider_name == "ollama":
            _provider_cache[provider_name] = OllamaProvider()
        else:
            raise UpstreamError(f"Unknown model provider: {provider_name}")

    return _provider_cache[provider_name], model_name


async def chat(
    messages: list[Message],
    model: str | None = None,
    tools: list[dict[str, Any]] | None = None,
    provider: LLMProvider | None = None,
    **kwargs: Any,
) -> tuple[str, list[dict[str, Any]]]:
    """One model round. Any provider failure is raised as UpstreamError."""
    if provider is not None:
        # An injected provider only needs the bare model name
        p, resolved_model = provider, _split_model(model)[1]
    else:
        p, resolved_model = _get_provider_for_model(model)
    try:
        return await p.chat(messages, model=resolved_model, tools=tools, **kwargs)
    except Exception as exc:
        raise UpstreamError(f"Model call failed: {exc}") from exc
