"""Integrity validation for creator trees against the master graph."""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Set, Tuple

from creator_trees.domain.tree.models import Tree
from creator_trees.domain.tree.rules import is_valid_badge

logger = logging.getLogger(__name__)

MasterLookup = Mapping[str, Any]

_DONE = object()


@dataclass
class ValidationReport:
    ok: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"ok": self.ok, "errors": list(self.errors)}


def _resolves(master_lookup: MasterLookup, concept_id: str) -> bool:
    return master_lookup.get(concept_id) is not None


class IntegrityValidator:
    """
    Runs four independent checks and returns every violation found:
    duplicates/unknown references, self links, cycles, reachability.
    Never stops at the first error.
    """

    def validate(self, tree: Tree, master_lookup: MasterLookup) -> ValidationReport:
        errors: List[str] = []
        errors.extend(self.check_references(tree, master_lookup))
        errors.extend(self.check_self_links(tree))
        adjacency = self._adjacency(tree)
        errors.extend(self.check_cycles(tree, adjacency))
        errors.extend(self.check_reachability(tree, adjacency))
        logger.debug("Validated tree %s: %d node(s), %d error(s)", tree.id, len(tree.nodes), len(errors))
        return ValidationReport(ok=not errors, errors=errors)

    # ------------------------------------------------------------------
    # Pass 1: duplicates, unknown concepts, badges, dangling edges
    # ------------------------------------------------------------------
    def check_references(self, tree: Tree, master_lookup: MasterLookup) -> List[str]:
        errors: List[str] = []
        in_tree = set(tree.concept_ids())
        seen: Set[str] = set()
        for node in tree.nodes:
            cid = node.concept_id
            if cid in seen:
                errors.append(f"Duplicate conceptId: {cid}")
            else:
                seen.add(cid)
            if not _resolves(master_lookup, cid):
                errors.append(f"Unknown conceptId: {cid}")

            badge = node.unlock_conditions.min_badge
            if not is_valid_badge(badge):
                errors.append(f"Invalid minBadge for {cid}: {str(badge).lower()}")
            for rc in node.unlock_conditions.required_concept_ids:
                if not _resolves(master_lookup, rc):
                    errors.append(f"Unknown requiredConceptId '{rc}' referenced by {cid}")

            # Tree membership and master membership are separate questions
            for nx in node.next_ids:
                if nx not in in_tree:
                    errors.append(f"nextId '{nx}' of {cid} not found in tree nodes")
                if not _resolves(master_lookup, nx):
                    errors.append(f"nextId '{nx}' of {cid} not found in Master Graph")
        return errors

    # ------------------------------------------------------------------
    # Pass 2: self links
    # ------------------------------------------------------------------
    def check_self_links(self, tree: Tree) -> List[str]:
        return [
            f"Self link not allowed: {node.concept_id}"
            for node in tree.nodes
            for nx in node.next_ids
            if nx == node.concept_id
        ]

    # ------------------------------------------------------------------
    # Pass 3: cycles
    # ------------------------------------------------------------------
    def check_cycles(self, tree: Tree, adjacency: Dict[str, List[str]]) -> List[str]:
        """
        Iterative DFS from every node in storage order. ``visiting`` holds the
        current path; ``settled`` nodes are fully explored and never re-entered.
        Reaching a node on the current path reports that node as a cycle witness.
        """
        errors: List[str] = []
        visiting: Set[str] = set()
        settled: Set[str] = set()

        for start in tree.concept_ids():
            if start in settled:
                continue
            visiting.add(start)
            stack: List[Tuple[str, Iterator[str]]] = [(start, iter(adjacency.get(start, ())))]
            while stack:
                current, children = stack[-1]
                nxt = next(children, _DONE)
                if nxt is _DONE:
                    stack.pop()
                    visiting.discard(current)
                    settled.add(current)
                elif nxt in visiting:
                    errors.append(f"Cycle detected involving {nxt}")
                elif nxt not in settled:
                    visiting.add(nxt)
                    stack.append((nxt, iter(adjacency.get(nxt, ()))))
        return errors

    # ------------------------------------------------------------------
    # Pass 4: reachability from start nodes
    # ------------------------------------------------------------------
    def check_reachability(self, tree: Tree, adjacency: Dict[str, List[str]]) -> List[str]:
        has_parent: Set[str] = set()
        for node in tree.nodes:
            has_parent.update(node.next_ids)
        starts = [cid for cid in tree.concept_ids() if cid not in has_parent]
        if not starts:
            # Entirely cyclic or empty; the cycle pass already covers it
            return []

        visited: Set[str] = set()
        stack = list(starts)
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            stack.extend(nx for nx in adjacency.get(current, ()) if nx not in visited)

        return [f"Unreachable node: {cid}" for cid in tree.concept_ids() if cid not in visited]

    @staticmethod
    def _adjacency(tree: Tree) -> Dict[str, List[str]]:
        # Later duplicates overwrite earlier ones
        return {node.concept_id: list(node.next_ids) for node in tree.nodes}


def validate_tree(tree: Tree, master_lookup: MasterLookup) -> ValidationReport:
    return IntegrityValidator().validate(tree, master_lookup)
