"""Creator tree domain models — pure Python, no DB or HTTP dependencies."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class BadgeTier(str, Enum):
    NONE = "none"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


# Ordered weakest to strongest
BADGE_TIERS = tuple(tier.value for tier in BadgeTier)
DEFAULT_MIN_BADGE = BadgeTier.NONE.value

DEFAULT_TITLE = "Untitled Tree"
DEFAULT_DOMAIN = "general"
DEFAULT_LAYOUT_MODE = "top-down"


def badge_rank(badge: str) -> int:
    """Ordinal of a badge tier; raises ValueError for unknown tiers."""
    return BADGE_TIERS.index((badge or DEFAULT_MIN_BADGE).lower())


def default_ui() -> Dict[str, Any]:
    return {"layoutMode": DEFAULT_LAYOUT_MODE}


@dataclass
class UnlockConditions:
    required_concept_ids: List[str] = field(default_factory=list)
    # Kept as a raw string so bad stored values reach the validator
    min_badge: str = DEFAULT_MIN_BADGE
    custom_rule_id: Optional[str] = None  # reserved, never validated


@dataclass
class Node:
    concept_id: str
    next_ids: List[str] = field(default_factory=list)
    unlock_conditions: UnlockConditions = field(default_factory=UnlockConditions)


@dataclass
class Tree:
    id: str
    slug: str
    creator_id: str
    title: str = DEFAULT_TITLE
    description: str = ""
    primary_domain: str = DEFAULT_DOMAIN
    tags: List[str] = field(default_factory=list)
    root_concept_id: str = ""
    nodes: List[Node] = field(default_factory=list)
    ui: Dict[str, Any] = field(default_factory=default_ui)
    # Unrecognised top-level keys, carried through storage untouched
    extra: Dict[str, Any] = field(default_factory=dict)

    def find_node(self, concept_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.concept_id == concept_id:
                return node
        return None

    def concept_ids(self) -> List[str]:
        return [n.concept_id for n in self.nodes]
