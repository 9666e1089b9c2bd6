"""API route modules."""
from __future__ import annotations

from sitecraft.api.routes import command, generate, health, pipeline

__all__ = ["command", "generate", "health", "pipeline"]
