"""Configuration layer for the agent runtime.

* ``defaults``: protocol constants and provider default URLs/models.
* ``env``: credential lookup from the process environment.
* ``settings``: the persisted application settings (provider instances,
  MCP servers) and their storage port. Import it explicitly as
  ``nyapet_agent.config.settings``; it depends on the provider and MCP
  models and is kept out of this package's eager imports.
"""

from __future__ import annotations

from .env import is_placeholder, resolve_provider_key

__all__ = ["is_placeholder", "resolve_provider_key"]
