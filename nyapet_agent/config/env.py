"""nyapet_agent.config.env
=======================

Environment variable helpers for provider credentials.

Provider instances normally carry their API key in ``ProviderConfig``; when
that field is empty the provider may fall back to the process environment
(``OPENAI_API_KEY`` ...). Placeholder-looking values are ignored so sample
``.env`` files never leak into real requests.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

# Provider type id -> canonical env var
ENV_MAP: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "siliconflow": "SILICONFLOW_API_KEY",
    "moonshot": "MOONSHOT_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "dashscope": "DASHSCOPE_API_KEY",
    "zhipu": "ZHIPU_API_KEY",
    "volcengine": "ARK_API_KEY",
    "groq": "GROQ_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "xai": "XAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openai_tts": "OPENAI_API_KEY",
    "elevenlabs": "ELEVENLABS_API_KEY",
    "fish_audio": "FISH_AUDIO_API_KEY",
}

# Provider type id -> ordered aliases (canonical first)
ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "elevenlabs": ("ELEVENLABS_API_KEY", "XI_API_KEY"),
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "zhipu": ("ZHIPU_API_KEY", "ZHIPUAI_API_KEY"),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if ``val`` looks like a placeholder or test value.

    Heuristics: contains 'placeholder', 'changeme' or 'example', or starts
    with 'test_' (case-insensitive).
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or "example" in v or v.startswith("test_")


def get_env_var_candidates(provider_id: str) -> Iterable[str]:
    """Yield acceptable env var names for ``provider_id``, canonical first."""
    p = (provider_id or "").lower()
    canonical = ENV_MAP.get(p)
    if canonical:
        yield canonical
    for alias in ENV_ALIASES.get(p, ()):
        if alias != canonical:
            yield alias


def resolve_provider_key(provider_id: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, env_var_used)`` for the first usable env credential.

    ``(None, None)`` when nothing usable is set.
    """
    for name in get_env_var_candidates(provider_id):
        val = os.environ.get(name)
        if val and not is_placeholder(val):
            return val, name
    return None, None


__all__ = [
    "ENV_MAP",
    "ENV_ALIASES",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_provider_key",
]
