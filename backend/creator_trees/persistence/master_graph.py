"""Master graph index, concept id to concept record."""
from __future__ import annotations
import json
import logging
import os
from typing import Any, Dict, Iterable, Mapping

logger = logging.getLogger(__name__)


def build_master_index(nodes: Iterable[Mapping[str, Any]]) -> Dict[str, Mapping[str, Any]]:
    """Key concept records by their ``id``; records without an id are skipped."""
    return {n["id"]: n for n in nodes if isinstance(n, Mapping) and n.get("id")}


def load_master_index(path: str) -> Dict[str, Mapping[str, Any]]:
    """
    Read a master graph export: either a list of concept records or an object
    with a ``nodes`` list. A missing file yields an empty index.
    """
    if not os.path.isfile(path):
        logger.warning("Master graph not found at %s; every concept will be unknown", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    nodes = data.get("nodes", []) if isinstance(data, Mapping) else data
    if not isinstance(nodes, list):
        raise ValueError(f"Master graph at {path} has no node list")
    index = build_master_index(nodes)
    logger.info("Loaded %d master concepts from %s", len(index), path)
    return index
