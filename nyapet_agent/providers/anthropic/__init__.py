"""Anthropic (Claude) chat provider."""

from .client import ANTHROPIC_METADATA, AnthropicProvider


def register_anthropic_provider(registry) -> None:
    registry.register(ANTHROPIC_METADATA, AnthropicProvider)


__all__ = ["ANTHROPIC_METADATA", "AnthropicProvider", "register_anthropic_provider"]
