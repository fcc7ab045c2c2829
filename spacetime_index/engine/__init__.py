"""Search engine client implementations."""

from .base import SearchEngineClient
from .memory import MemoryEngine

__all__ = [
    "SearchEngineClient",
    "MemoryEngine",
]
