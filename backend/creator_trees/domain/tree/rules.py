"""Value rules for creator trees: badge tiers, edge normalisation, payload shape."""
from __future__ import annotations
from typing import Any, List, Mapping

from creator_trees.domain.common.result import Result
from creator_trees.domain.tree.models import UnlockConditions, badge_rank


def is_valid_badge(badge: Any) -> bool:
    """Empty counts as the default tier; otherwise case-insensitive match on a known tier."""
    if not badge:
        return True
    try:
        badge_rank(str(badge))
    except ValueError:
        return False
    return True


def normalize_next_ids(concept_id: str, next_ids: Any) -> List[str]:
    """Order-preserving dedup with self references and empty ids removed."""
    if not isinstance(next_ids, (list, tuple)):
        return []
    seen = set()
    out = []
    for nx in next_ids:
        if not nx or nx == concept_id or nx in seen:
            continue
        seen.add(nx)
        out.append(nx)
    return out


def merge_unlock_conditions(current: UnlockConditions, conditions: Mapping[str, Any]) -> UnlockConditions:
    """
    Partial merge: each field is replaced only when the incoming value is present.
    Unspecified fields keep their current values.
    """
    required = conditions.get("requiredConceptIds")
    min_badge = conditions.get("minBadge")
    custom_rule_id = conditions.get("customRuleId")
    return UnlockConditions(
        required_concept_ids=list(required) if required is not None else list(current.required_concept_ids),
        min_badge=min_badge if min_badge is not None else current.min_badge,
        custom_rule_id=custom_rule_id if custom_rule_id is not None else current.custom_rule_id,
    )


def validate_tree_payload(data: Any) -> Result[Mapping[str, Any]]:
    """Validates that an import payload is an object whose nodes are objects with string ids."""
    if not isinstance(data, Mapping):
        return Result.fail("Invalid tree data: expected an object.")
    nodes = data.get("nodes")
    if not isinstance(nodes, list):
        # Missing or non-list nodes import as an empty tree
        return Result.ok(data)
    for idx, node in enumerate(nodes):
        if not isinstance(node, Mapping):
            return Result.fail(f"Invalid tree data: node #{idx} is not an object.")
        if not isinstance(node.get("conceptId"), str):
            return Result.fail(f"Invalid tree data: node #{idx} has no string conceptId.")
        if not _all_strings(node.get("nextIds")):
            return Result.fail(f"Invalid tree data: node #{idx} has a non-string nextId.")
        conditions = node.get("unlockConditions")
        if isinstance(conditions, Mapping) and not _all_strings(conditions.get("requiredConceptIds")):
            return Result.fail(f"Invalid tree data: node #{idx} has a non-string requiredConceptId.")
    return Result.ok(data)


def _all_strings(values: Any) -> bool:
    """True for a list of strings; anything that is not a list is ignored by the mapper."""
    if not isinstance(values, list):
        return True
    return all(isinstance(v, str) for v in values)
