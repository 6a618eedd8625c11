"""Composition root for the agent runtime."""

from __future__ import annotations

from .container import TTS_INSTANCES_SERVICE, AgentContainer, build_container

__all__ = ["AgentContainer", "build_container", "TTS_INSTANCES_SERVICE"]
