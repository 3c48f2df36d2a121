"""Durable observation stores."""

from .base import ObservationStore
from .memory import InMemoryObservationStore
from .sql import SqlObservationStore

__all__ = [
    "ObservationStore",
    "InMemoryObservationStore",
    "SqlObservationStore",
]
