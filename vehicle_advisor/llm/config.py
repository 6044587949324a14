from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# .env sits at the repository root, next to pyproject.toml
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class LLMConfig:
    """Settings for the optional per-vehicle explanation call."""

    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    timeout: float = float(os.getenv("GROQ_TIMEOUT", "10"))
    max_tokens: int = 512
    temperature: float = 0.3
    enabled: bool = _flag("LLM_ENABLED", "true")


DEFAULT_LLM_CONFIG = LLMConfig()
