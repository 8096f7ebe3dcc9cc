"""Tree id and slug generation."""
from __future__ import annotations
import re
import secrets
import time
from abc import ABC, abstractmethod

from creator_trees.core.config import SLUG_MAX_LENGTH, SLUG_SUFFIX_LENGTH

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_BASE62 = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def slugify_title(title: str, max_len: int = 64) -> str:
    """Lowercase, collapse non-alphanumerics to '-', fall back to 'course'."""
    base = _NON_SLUG.sub("-", str(title or "").strip().lower()).strip("-")
    if not base:
        return "course"
    return base[:max_len]


def random_suffix(length: int = SLUG_SUFFIX_LENGTH) -> str:
    n = max(4, min(64, int(length or SLUG_SUFFIX_LENGTH)))
    return "".join(secrets.choice(_BASE62) for _ in range(n))


class IdentifierGenerator(ABC):

    @abstractmethod
    def new_tree_id(self) -> str:
        """Return an id unique within one user's tree collection."""
        ...

    @abstractmethod
    def new_slug(self, title: str) -> str:
        """Return a human-readable slug unique across the system."""
        ...


class RandomIdentifierGenerator(IdentifierGenerator):
    """Timestamp + random ids; slugify(title) + random base62 suffix slugs."""

    def __init__(self, suffix_length: int = SLUG_SUFFIX_LENGTH, max_length: int = SLUG_MAX_LENGTH):
        self._suffix_length = suffix_length
        self._max_length = max_length

    def new_tree_id(self) -> str:
        stamp = _to_base36(int(time.time() * 1000))
        rand = "".join(secrets.choice(_BASE36) for _ in range(6))
        return f"tree_{stamp}_{rand}"

    def new_slug(self, title: str) -> str:
        clean = slugify_title(title, max(1, self._max_length - (self._suffix_length + 1)))
        slug = f"{clean}-{random_suffix(self._suffix_length)}"
        return slug[: self._max_length]
