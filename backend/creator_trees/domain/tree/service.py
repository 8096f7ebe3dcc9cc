"""Domain service — pure structural operations on a single creator tree."""
from __future__ import annotations
import copy
from typing import Any, List, Mapping, Optional

from creator_trees.domain.common.identifiers import IdentifierGenerator
from creator_trees.domain.tree.mapping import KNOWN_KEYS, METADATA_FIELDS, nodes_from_list
from creator_trees.domain.tree.models import (
    DEFAULT_DOMAIN,
    DEFAULT_TITLE,
    Node,
    Tree,
    UnlockConditions,
)
from creator_trees.domain.tree.rules import merge_unlock_conditions, normalize_next_ids

# Identity fields a patch may never touch
_IMMUTABLE_KEYS = {"id", "creatorId", "slug"}


def _copy_list(value: Any) -> List[str]:
    return list(value) if isinstance(value, (list, tuple)) else []


class TreeDomainService:
    """
    Pure domain operations, no I/O. Mutating methods change the tree in place
    and return True when the operation applied, False when it was a no-op.
    The application layer loads, calls these and persists via the repository.
    """

    def __init__(self, ids: IdentifierGenerator):
        self._ids = ids

    def new_tree(self, owner_id: str, meta: Optional[Mapping[str, Any]] = None) -> Tree:
        """Create an empty tree with a fresh id and slug, defaulting every optional field."""
        meta = meta or {}
        title = str(meta.get("title") or DEFAULT_TITLE).strip()
        return Tree(
            id=self._ids.new_tree_id(),
            slug=self._ids.new_slug(meta.get("title") or "course"),
            creator_id=owner_id,
            title=title,
            description=meta.get("description") or "",
            primary_domain=meta.get("primaryDomain") or DEFAULT_DOMAIN,
            tags=_copy_list(meta.get("tags")),
            root_concept_id=meta.get("rootConceptId") or "",
        )

    def rebuild_tree(self, owner_id: str, data: Mapping[str, Any]) -> Tree:
        """
        Build a new tree from foreign data. Identity is always regenerated and
        nested lists are copied so the caller's payload is never aliased.
        """
        tree = self.new_tree(owner_id, data)
        tree.nodes = nodes_from_list(copy.deepcopy(data.get("nodes")))
        ui = data.get("ui")
        if isinstance(ui, Mapping):
            tree.ui = dict(copy.deepcopy(ui))
        tree.extra = {k: copy.deepcopy(v) for k, v in data.items() if k not in KNOWN_KEYS}
        return tree

    def regenerate_slug(self, tree: Tree) -> None:
        tree.slug = self._ids.new_slug(tree.title or "course")

    def patch_tree(self, tree: Tree, fields: Mapping[str, Any]) -> Tree:
        """
        Merge top-level fields. ``nodes`` only replaces the node list when truthy;
        a None metadata value leaves the current value in place.
        """
        for key, value in fields.items():
            if key in _IMMUTABLE_KEYS:
                continue
            if value is None and key in METADATA_FIELDS:
                continue
            if key == "nodes":
                if value:
                    tree.nodes = nodes_from_list(copy.deepcopy(value))
            elif key == "tags":
                tree.tags = _copy_list(value)
            elif key in METADATA_FIELDS:
                setattr(tree, METADATA_FIELDS[key], copy.deepcopy(value))
            else:
                tree.extra[key] = copy.deepcopy(value)
        return tree

    def add_node(self, tree: Tree, concept_id: str) -> bool:
        if tree.find_node(concept_id):
            return False
        tree.nodes.append(Node(concept_id=concept_id, next_ids=[], unlock_conditions=UnlockConditions()))
        if not tree.root_concept_id:
            tree.root_concept_id = concept_id
        return True

    def connect(self, tree: Tree, from_id: str, to_id: str) -> bool:
        """Nodes before edges: both ends must already be in the tree. Self links are refused."""
        if from_id == to_id:
            return False
        from_node = tree.find_node(from_id)
        if not from_node or not tree.find_node(to_id):
            return False
        if to_id not in from_node.next_ids:
            from_node.next_ids.append(to_id)
        return True

    def set_unlock_conditions(self, tree: Tree, concept_id: str, conditions: Mapping[str, Any]) -> bool:
        node = tree.find_node(concept_id)
        if not node:
            return False
        node.unlock_conditions = merge_unlock_conditions(node.unlock_conditions, conditions)
        return True

    def set_next_ids(self, tree: Tree, concept_id: str, next_ids: Any) -> bool:
        node = tree.find_node(concept_id)
        if not node:
            return False
        node.next_ids = normalize_next_ids(concept_id, next_ids)
        return True
