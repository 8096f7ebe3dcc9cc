"""Abstract key-value store the tree repository persists through."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string for key, or None if absent. Raises StorageError."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value. Raises StorageError."""
        ...
