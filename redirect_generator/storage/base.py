"""
Base row-store interface for Redirect Generator.

Purpose:
    Define a small, stable contract over the CMS redirects table so the
    duplicate-resolution logic in `RedirectStore` never touches SQL and can be
    tested against the in-memory backend.

Filters:
    A filter is a mapping of field name to expected value. A tuple/list/set
    value means "any of these values" (used for `source_host IN ('*', host)`);
    every other value must match exactly. All entries are AND-ed.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.
"""

import contextlib
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Mapping, Optional

Row = Dict[str, Any]
Filter = Mapping[str, Any]

# CMS soft-delete and hide flags; rows with either set are invisible to every read
HIDDEN_FLAGS = ("deleted", "disabled")


class BaseStorage(ABC):
    """Abstract base class for redirect row stores."""

    @abstractmethod  # pragma: no cover
    def select(self, filters: Filter) -> List[Row]:
        """
        Return every row matching `filters`, ordered by ascending id.
        Soft-deleted or disabled rows are never returned.

        Returns:
            List[Row]: Possibly empty, fully materialised.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def select_all(self) -> List[Row]:
        """Return every stored row in the backend's natural order, except soft-deleted or disabled ones."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def insert(self, row: Mapping[str, Any]) -> Row:
        """
        Insert a new row; the backend generates `id`.

        Returns:
            Row: The stored row including its generated `id`.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def update(self, row_id: int, fields: Mapping[str, Any]) -> bool:
        """
        Update `fields` of the row with id `row_id`.

        Returns:
            bool: False if no such row exists.
        """
        raise NotImplementedError

    def select_one(self, filters: Filter) -> Optional[Row]:
        """First row (lowest id) matching `filters`, or None."""
        rows = self.select(filters)
        return rows[0] if rows else None

    @contextlib.contextmanager
    def transaction(self) -> Iterator["BaseStorage"]:
        """
        Scope in which a read followed by a write is not interleaved with
        other writers. Backends override this; the default is a no-op.
        """
        yield self


def matches(row: Mapping[str, Any], filters: Filter) -> bool:
    """True if `row` satisfies every entry of `filters`."""
    for field, expected in filters.items():
        value = row.get(field)
        if isinstance(expected, (tuple, list, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


def is_visible(row: Mapping[str, Any]) -> bool:
    """False for rows the CMS has soft-deleted or disabled."""
    return not any(row.get(flag) for flag in HIDDEN_FLAGS)
