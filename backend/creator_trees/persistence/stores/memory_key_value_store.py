"""In-process KeyValueStore, used by tests and embedders."""
from __future__ import annotations
from typing import Dict, Optional

from creator_trees.persistence.interfaces.key_value_store import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
