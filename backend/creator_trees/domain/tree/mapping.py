"""Conversion between Tree dataclasses and the stored/exported camelCase shape."""
from __future__ import annotations
import copy
from typing import Any, Dict, List, Mapping

from creator_trees.domain.common.errors import MalformedTreeData
from creator_trees.domain.tree.models import (
    DEFAULT_DOMAIN,
    DEFAULT_MIN_BADGE,
    DEFAULT_TITLE,
    Node,
    Tree,
    UnlockConditions,
    default_ui,
)

# Wire key -> dataclass attribute for the plain metadata fields
METADATA_FIELDS: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "primaryDomain": "primary_domain",
    "tags": "tags",
    "rootConceptId": "root_concept_id",
    "ui": "ui",
}

# Keys handled explicitly; anything else lands in Tree.extra
KNOWN_KEYS = set(METADATA_FIELDS) | {"id", "slug", "creatorId", "nodes"}


def _string_list(value: Any) -> List[str]:
    # Non-string ids would poison set lookups in the validator
    return [v for v in value if isinstance(v, str)] if isinstance(value, list) else []


def conditions_to_dict(c: UnlockConditions) -> dict:
    out = {
        "requiredConceptIds": list(c.required_concept_ids),
        "minBadge": c.min_badge,
    }
    if c.custom_rule_id:
        out["customRuleId"] = c.custom_rule_id
    return out


def node_to_dict(n: Node) -> dict:
    return {
        "conceptId": n.concept_id,
        "nextIds": list(n.next_ids),
        "unlockConditions": conditions_to_dict(n.unlock_conditions),
    }


def tree_to_dict(t: Tree) -> dict:
    out = copy.deepcopy(t.extra)
    out.update({
        "id": t.id,
        "slug": t.slug,
        "title": t.title,
        "description": t.description,
        "creatorId": t.creator_id,
        "primaryDomain": t.primary_domain,
        "tags": list(t.tags),
        "rootConceptId": t.root_concept_id,
        "ui": copy.deepcopy(t.ui),
        "nodes": [node_to_dict(n) for n in t.nodes],
    })
    return out


def conditions_from_dict(data: Any) -> UnlockConditions:
    if not isinstance(data, Mapping):
        return UnlockConditions()
    return UnlockConditions(
        required_concept_ids=_string_list(data.get("requiredConceptIds")),
        min_badge=data.get("minBadge") or DEFAULT_MIN_BADGE,
        custom_rule_id=data.get("customRuleId") or None,
    )


def node_from_dict(data: Any) -> Node:
    if not isinstance(data, Mapping):
        raise MalformedTreeData(f"Node entry must be an object, got {type(data).__name__}")
    concept_id = data.get("conceptId")
    if not isinstance(concept_id, str):
        raise MalformedTreeData(f"Node conceptId must be a string, got {type(concept_id).__name__}")
    return Node(
        concept_id=concept_id,
        next_ids=_string_list(data.get("nextIds")),
        unlock_conditions=conditions_from_dict(data.get("unlockConditions")),
    )


def nodes_from_list(data: Any) -> List[Node]:
    return [node_from_dict(n) for n in data] if isinstance(data, list) else []


def tree_from_dict(data: Any) -> Tree:
    """Rebuild a stored tree as-is (identity included). Raises MalformedTreeData."""
    if not isinstance(data, Mapping):
        raise MalformedTreeData(f"Tree entry must be an object, got {type(data).__name__}")
    ui = data.get("ui")
    return Tree(
        id=data.get("id") or "",
        slug=data.get("slug") or "",
        creator_id=data.get("creatorId") or "",
        title=data.get("title") or DEFAULT_TITLE,
        description=data.get("description") or "",
        primary_domain=data.get("primaryDomain") or DEFAULT_DOMAIN,
        tags=_string_list(data.get("tags")),
        root_concept_id=data.get("rootConceptId") or "",
        nodes=nodes_from_list(data.get("nodes")),
        ui=copy.deepcopy(ui) if isinstance(ui, Mapping) else default_ui(),
        extra={k: copy.deepcopy(v) for k, v in data.items() if k not in KNOWN_KEYS},
    )
