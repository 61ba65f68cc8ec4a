"""Shared SQL fragment helpers for the ORM layer."""

from __future__ import annotations

from collections.abc import Iterable


def quote(identifier: str) -> str:
    """Double-quote an identifier taken from trusted type/field metadata."""
    return f'"{identifier}"'


def to_csv(names: Iterable[str]) -> str:
    """Deduplicate, quote and comma-join *names*.

    Order follows first occurrence.  An empty input yields ``""``, which
    callers treat as "the entity type exposes no persistable fields".

    >>> to_csv(["Name", "Age", "Name"])
    '"Name","Age"'
    """
    return ",".join(quote(name) for name in dict.fromkeys(names))
