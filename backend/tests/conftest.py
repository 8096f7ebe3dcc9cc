import itertools

import pytest

from creator_trees.application.exchange_codec import ExchangeCodec
from creator_trees.application.tree_editor import TreeEditor
from creator_trees.domain.common.identifiers import IdentifierGenerator, slugify_title
from creator_trees.persistence.master_graph import build_master_index
from creator_trees.persistence.stores.memory_key_value_store import InMemoryKeyValueStore
from creator_trees.persistence.tree_repository import TreeRepository

USER = "alice"


class CountingIdentifierGenerator(IdentifierGenerator):
    """Predictable ids: tree_1, tree_2, ... and slugs <title>-1, <title>-2, ..."""

    def __init__(self):
        self._ids = itertools.count(1)
        self._slugs = itertools.count(1)

    def new_tree_id(self) -> str:
        return f"tree_{next(self._ids)}"

    def new_slug(self, title: str) -> str:
        return f"{slugify_title(title)}-{next(self._slugs)}"


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def repo(store):
    return TreeRepository(store)


@pytest.fixture
def ids():
    return CountingIdentifierGenerator()


@pytest.fixture
def editor(repo, ids):
    return TreeEditor(repo=repo, ids=ids)


@pytest.fixture
def codec(repo, ids):
    return ExchangeCodec(repo=repo, ids=ids)


@pytest.fixture
def master():
    return build_master_index(
        [{"id": cid, "title": cid.upper()} for cid in ("a", "b", "c", "d", "x", "y")]
    )
