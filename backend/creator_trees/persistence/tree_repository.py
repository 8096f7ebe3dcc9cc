"""Per-user tree collection over a key-value store."""
from __future__ import annotations
import json
import logging
from typing import List, Optional, Sequence

from creator_trees.core.config import STORAGE_KEY_PREFIX
from creator_trees.domain.common.errors import MalformedTreeData, StorageError
from creator_trees.domain.common.result import Result
from creator_trees.domain.tree.mapping import tree_from_dict, tree_to_dict
from creator_trees.domain.tree.models import Tree
from creator_trees.persistence.interfaces.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)


class TreeRepository:
    """
    Serialisation boundary for one user's trees, stored as a single JSON array
    under one key per user. ``load``/``save`` are best-effort and never raise;
    ``load_result``/``save_result`` report storage problems instead.
    """

    def __init__(self, store: KeyValueStore, key_prefix: str = STORAGE_KEY_PREFIX):
        self._store = store
        self._key_prefix = key_prefix

    def storage_key(self, user_id: str) -> str:
        return f"{self._key_prefix}{user_id}"

    # ------------------------------------------------------------------
    # Strict variants
    # ------------------------------------------------------------------
    def load_result(self, user_id: str) -> Result[List[Tree]]:
        if not user_id:
            return Result.ok([])
        try:
            raw = self._store.get(self.storage_key(user_id))
        except StorageError as e:
            return Result.fail(f"Could not read trees for '{user_id}': {e}")
        if not raw:
            return Result.ok([])
        try:
            parsed = json.loads(raw)
        except ValueError as e:
            return Result.fail(f"Stored trees for '{user_id}' are not valid JSON: {e}")
        if not isinstance(parsed, list):
            return Result.fail(f"Stored trees for '{user_id}' are not a list.")
        try:
            return Result.ok([tree_from_dict(item) for item in parsed])
        except MalformedTreeData as e:
            return Result.fail(f"Stored trees for '{user_id}' are malformed: {e}")

    def save_result(self, user_id: str, trees: Optional[Sequence[Tree]]) -> Result[None]:
        if not user_id:
            return Result.ok(None)
        try:
            payload = json.dumps([tree_to_dict(t) for t in trees or []])
            self._store.set(self.storage_key(user_id), payload)
        except (StorageError, TypeError, ValueError) as e:
            return Result.fail(f"Could not save trees for '{user_id}': {e}")
        return Result.ok(None)

    # ------------------------------------------------------------------
    # Best-effort variants
    # ------------------------------------------------------------------
    def load(self, user_id: str) -> List[Tree]:
        """Return the user's trees in storage order; empty on missing or malformed data."""
        result = self.load_result(user_id)
        if not result.is_success:
            logger.warning("Treating stored trees as empty: %s", result.error)
        return result.value_or([])

    def save(self, user_id: str, trees: Optional[Sequence[Tree]]) -> None:
        """Replace the user's whole collection. Failures are logged, not raised."""
        result = self.save_result(user_id, trees)
        if not result.is_success:
            logger.warning("Dropping unsaved trees: %s", result.error)

    def find(self, user_id: str, tree_id: str) -> Optional[Tree]:
        for tree in self.load(user_id):
            if tree.id == tree_id:
                return tree
        return None
