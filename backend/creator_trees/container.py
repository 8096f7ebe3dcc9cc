"""Dependency injection container — wires implementations to interfaces."""
from __future__ import annotations
from functools import lru_cache
from typing import Any, Dict

from creator_trees.application.exchange_codec import ExchangeCodec
from creator_trees.application.tree_editor import TreeEditor
from creator_trees.core.config import CREATOR_TREES_DB_PATH, MASTER_GRAPH_PATH
from creator_trees.domain.common.identifiers import RandomIdentifierGenerator
from creator_trees.persistence.master_graph import load_master_index
from creator_trees.persistence.stores.sqlite_key_value_store import SqliteKeyValueStore
from creator_trees.persistence.tree_repository import TreeRepository


@lru_cache(maxsize=1)
def get_tree_repo() -> TreeRepository:
    return TreeRepository(store=SqliteKeyValueStore(CREATOR_TREES_DB_PATH))


@lru_cache(maxsize=1)
def get_identifier_generator() -> RandomIdentifierGenerator:
    return RandomIdentifierGenerator()


@lru_cache(maxsize=1)
def get_tree_editor() -> TreeEditor:
    return TreeEditor(repo=get_tree_repo(), ids=get_identifier_generator())


@lru_cache(maxsize=1)
def get_exchange_codec() -> ExchangeCodec:
    return ExchangeCodec(repo=get_tree_repo(), ids=get_identifier_generator())


@lru_cache(maxsize=1)
def get_master_index() -> Dict[str, Any]:
    return load_master_index(MASTER_GRAPH_PATH)
