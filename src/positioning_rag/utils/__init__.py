"""Utility modules for the positioning pipeline."""

from .lru import LRUMap
from .single_flight import SingleFlight

__all__ = [
    "LRUMap",
    "SingleFlight",
]
