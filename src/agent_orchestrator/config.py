"""Orchestrator configuration: paths and defaults."""

from __future__ import annotations

import os
from pathlib import Path

from main_config import (
    DEFAULT_SYSTEM_PROMPT_PATH as _DEFAULT_SYSTEM_PROMPT_PATH,
    LOG_LEVEL as _LOG_LEVEL,
)

DEFAULT_SYSTEM_PROMPT_PATH = Path(_DEFAULT_SYSTEM_PROMPT_PATH)
LOG_LEVEL = _LOG_LEVEL

# "provider:model"; a bare model name is served by Ollama
DEFAULT_MODEL = os.getenv("AGENT_MODEL", "anthropic:claude-3-5-sonnet-20241022")
DEFAULT_MAX_TOKENS = 4096
DEFAULT_MAX_TOOL_ITERATIONS = 10
DEFAULT_REQUEST_TIMEOUT = float(os.getenv("AGENT_REQUEST_TIMEOUT", "120"))

FALLBACK_REPLY = "I apologize, but I was unable to generate a response."
