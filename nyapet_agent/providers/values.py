"""Typed configuration value lookup shared by LLM and TTS providers.

``ProviderConfig`` mixes fixed fields (``api_key``, ``timeout``...) with a
free-form ``extra`` mapping whose values are usually strings coming from a
settings form. :func:`get_config_value` reads either kind and coerces string
values to the type of the supplied default, falling back to that default
when the value is missing, blank or unparsable.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

from .models import ProviderConfig

T = TypeVar("T")

_FIXED_FIELDS = ("api_key", "base_url", "model", "timeout", "proxy")

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def _coerce_bool(value: str) -> Optional[bool]:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    return None


def _coerce_number(value: str) -> Any:
    for kind in (int, float):
        try:
            return kind(value)
        except ValueError:
            continue
    return None


def _coerce(value: str, default: Any) -> Any:
    """Convert a raw string to the type of ``default`` (``None`` on failure)."""
    # bool first: bool is a subclass of int
    if isinstance(default, bool):
        return _coerce_bool(value)
    if isinstance(default, int):
        try:
            return int(value.strip())
        except ValueError:
            number = _coerce_number(value.strip())
            return int(number) if isinstance(number, float) else None
    if isinstance(default, float):
        try:
            return float(value.strip())
        except ValueError:
            return None
    if isinstance(default, str):
        return value
    if default is None:
        boolean = _coerce_bool(value)
        if boolean is not None:
            return boolean
        number = _coerce_number(value.strip())
        return number if number is not None else value
    return value


def get_config_value(config: ProviderConfig, key: str, default: T) -> T:
    """Return ``key`` from ``config`` coerced to the type of ``default``.

    Fixed fields are read directly; anything else comes from
    ``config.extra``. ``None`` and blank strings yield ``default``.
    """
    if key in _FIXED_FIELDS:
        value = getattr(config, key)
    else:
        value = config.extra.get(key)
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return default
    if isinstance(value, str):
        converted = _coerce(value, default)
        return default if converted is None else converted
    if isinstance(default, bool) and not isinstance(value, bool):
        return default
    if isinstance(default, float) and isinstance(value, int) and not isinstance(value, bool):
        return float(value)  # type: ignore[return-value]
    return value


_AUDIO_MIME_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "opus": "audio/opus",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "pcm": "audio/pcm",
    "ogg": "audio/ogg",
}


def audio_format_to_mime_type(fmt: Optional[str]) -> str:
    """Map an audio format name to its MIME type (``audio/mpeg`` by default)."""
    return _AUDIO_MIME_TYPES.get((fmt or "").lower(), "audio/mpeg")


__all__ = ["get_config_value", "audio_format_to_mime_type"]
