"""Exception taxonomy for creator trees.

Routine absence (unknown tree or node) is never raised; callers get ``None``
back. Only import, the one all-or-nothing operation, raises.
"""
from __future__ import annotations
from typing import Iterable, List


class CreatorTreeError(Exception):
    """Base class for every error raised by this package."""


class MalformedTreeData(CreatorTreeError, ValueError):
    """An import payload is not a well-formed tree object."""


class TreeValidationError(CreatorTreeError):
    """The integrity validator rejected a tree during import."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("Tree validation failed: " + "; ".join(self.errors))


class StorageError(CreatorTreeError):
    """Reading or writing the key-value store failed."""
