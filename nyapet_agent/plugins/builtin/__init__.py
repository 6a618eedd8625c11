"""Plugins shipped with the runtime."""

from .core_commands import LLM_INSTANCES_SERVICE, CoreCommandsPlugin

__all__ = ["CoreCommandsPlugin", "LLM_INSTANCES_SERVICE"]
