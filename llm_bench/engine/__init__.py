"""Client for the external benchmark execution engine."""

from .client import EngineClient

__all__ = ["EngineClient"]
