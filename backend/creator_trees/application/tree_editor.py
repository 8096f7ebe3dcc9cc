"""Application service — load collection → domain op → persist collection."""
from __future__ import annotations
import logging
from typing import Any, Callable, List, Mapping, Optional

from creator_trees.domain.common.identifiers import IdentifierGenerator
from creator_trees.domain.tree.models import Tree
from creator_trees.domain.tree.service import TreeDomainService
from creator_trees.domain.tree.validator import IntegrityValidator, MasterLookup, ValidationReport
from creator_trees.persistence.tree_repository import TreeRepository

logger = logging.getLogger(__name__)


class TreeEditor:
    """
    Structural edits to a user's trees. Every mutation reads the whole
    collection, changes one tree and writes the whole collection back, so
    concurrent sessions for one user are last-writer-wins.

    Unknown trees yield None and unknown nodes leave the tree unchanged;
    neither raises.
    """

    def __init__(
        self,
        repo: TreeRepository,
        ids: IdentifierGenerator,
        validator: Optional[IntegrityValidator] = None,
    ):
        self._repo = repo
        self._domain = TreeDomainService(ids)
        self._validator = validator or IntegrityValidator()

    def _mutate(self, user_id: str, tree_id: str, op: Callable[[Tree], bool]) -> Optional[Tree]:
        trees = self._repo.load(user_id)
        tree = next((t for t in trees if t.id == tree_id), None)
        if tree is None:
            return None
        if op(tree):
            self._repo.save(user_id, trees)
        return tree

    # ------------------------------------------------------------------
    # CREATE
    # ------------------------------------------------------------------
    def create(self, user_id: str, meta: Optional[Mapping[str, Any]] = None) -> Tree:
        tree = self._domain.new_tree(user_id, meta)
        trees = self._repo.load(user_id)
        trees.append(tree)
        self._repo.save(user_id, trees)
        logger.info("Created tree %s (%s) for user %s", tree.id, tree.slug, user_id)
        return tree

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------
    def get(self, user_id: str, tree_id: str) -> Optional[Tree]:
        return self._repo.find(user_id, tree_id)

    def list(self, user_id: str) -> List[Tree]:
        return self._repo.load(user_id)

    def validate(self, user_id: str, tree_id: str, master_lookup: MasterLookup) -> Optional[ValidationReport]:
        tree = self._repo.find(user_id, tree_id)
        if tree is None:
            return None
        return self._validator.validate(tree, master_lookup)

    # ------------------------------------------------------------------
    # UPDATE
    # ------------------------------------------------------------------
    def patch(self, user_id: str, tree_id: str, fields: Mapping[str, Any]) -> Optional[Tree]:
        def op(tree: Tree) -> bool:
            self._domain.patch_tree(tree, fields)
            return True

        return self._mutate(user_id, tree_id, op)

    def regenerate_slug(self, user_id: str, tree_id: str) -> Optional[Tree]:
        def op(tree: Tree) -> bool:
            self._domain.regenerate_slug(tree)
            return True

        return self._mutate(user_id, tree_id, op)

    # ------------------------------------------------------------------
    # NODES & EDGES
    # ------------------------------------------------------------------
    def add_node(self, user_id: str, tree_id: str, concept_id: str) -> Optional[Tree]:
        logger.debug("add_node %s to %s", concept_id, tree_id)
        return self._mutate(user_id, tree_id, lambda t: self._domain.add_node(t, concept_id))

    def connect(self, user_id: str, tree_id: str, from_id: str, to_id: str) -> Optional[Tree]:
        logger.debug("connect %s -> %s in %s", from_id, to_id, tree_id)
        return self._mutate(user_id, tree_id, lambda t: self._domain.connect(t, from_id, to_id))

    def set_unlock_conditions(
        self, user_id: str, tree_id: str, concept_id: str, conditions: Mapping[str, Any]
    ) -> Optional[Tree]:
        return self._mutate(
            user_id, tree_id, lambda t: self._domain.set_unlock_conditions(t, concept_id, conditions)
        )

    def set_next_ids(self, user_id: str, tree_id: str, concept_id: str, next_ids: Any) -> Optional[Tree]:
        return self._mutate(user_id, tree_id, lambda t: self._domain.set_next_ids(t, concept_id, next_ids))

    # ------------------------------------------------------------------
    # DELETE
    # ------------------------------------------------------------------
    def delete(self, user_id: str, tree_id: str) -> bool:
        trees = self._repo.load(user_id)
        remaining = [t for t in trees if t.id != tree_id]
        deleted = len(remaining) != len(trees)
        if deleted:
            self._repo.save(user_id, remaining)
            logger.info("Deleted tree %s for user %s", tree_id, user_id)
        return deleted
