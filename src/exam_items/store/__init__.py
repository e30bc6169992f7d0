"""Record store layer for data access."""

from .base import RecordStore
from .factory import create_stores

__all__ = [
    "RecordStore",
    "create_stores",
]
