"""Export trees as standalone snapshots and import them into a user's collection."""
from __future__ import annotations
import json
import logging
from typing import Any, Optional

from creator_trees.domain.common.errors import MalformedTreeData, TreeValidationError
from creator_trees.domain.common.identifiers import IdentifierGenerator
from creator_trees.domain.tree.mapping import tree_to_dict
from creator_trees.domain.tree.models import Tree
from creator_trees.domain.tree.rules import validate_tree_payload
from creator_trees.domain.tree.service import TreeDomainService
from creator_trees.domain.tree.validator import IntegrityValidator, MasterLookup
from creator_trees.persistence.tree_repository import TreeRepository

logger = logging.getLogger(__name__)


class ExchangeCodec:

    def __init__(
        self,
        repo: TreeRepository,
        ids: IdentifierGenerator,
        validator: Optional[IntegrityValidator] = None,
    ):
        self._repo = repo
        self._domain = TreeDomainService(ids)
        self._validator = validator or IntegrityValidator()

    def export_tree(self, tree: Tree) -> dict:
        """Value-only snapshot; shares nothing with the live tree."""
        return tree_to_dict(tree)

    def export_json(self, tree: Tree) -> str:
        return json.dumps(self.export_tree(tree), indent=2)

    def import_tree(self, user_id: str, data: Any, master_lookup: Optional[MasterLookup] = None) -> Tree:
        """
        Add a copy of ``data`` to the user's collection under a new id and slug.

        All or nothing: raises MalformedTreeData for a payload that is not an
        object, and TreeValidationError when ``master_lookup`` is given and the
        rebuilt tree has any integrity error. Nothing is persisted on failure.
        """
        check = validate_tree_payload(data)
        if not check.is_success:
            raise MalformedTreeData(check.error)

        tree = self._domain.rebuild_tree(user_id, data)
        if master_lookup is not None:
            report = self._validator.validate(tree, master_lookup)
            if not report.ok:
                logger.info("Rejected import for user %s: %d error(s)", user_id, len(report.errors))
                raise TreeValidationError(report.errors)

        trees = self._repo.load(user_id)
        trees.append(tree)
        self._repo.save(user_id, trees)
        logger.info("Imported tree %s (%s) for user %s", tree.id, tree.slug, user_id)
        return tree

    def import_json(self, user_id: str, text: str, master_lookup: Optional[MasterLookup] = None) -> Tree:
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise MalformedTreeData(f"Invalid tree data: {e}") from e
        return self.import_tree(user_id, data, master_lookup)
