"""
Storage module for Redirect Generator (in-memory implementation).

Responsibilities:
    - Hold redirect rows keyed by a generated integer id
    - Answer exact-match filter queries
    - Apply partial updates in place

Design:
    - This is an in-memory reference implementation that satisfies the BaseStorage contract.
    - It keeps unit/integration tests fast and deterministic, and backs `--dry-run`
      demos when no database is configured.
    - Rows are copied on the way in and on the way out so callers can never
      mutate stored state by accident.
"""

import contextlib
import threading
from typing import Any, Dict, Iterator, List, Mapping

from .base import BaseStorage, Filter, Row, is_visible, matches


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self.rows = {
                id: {"id": int, "source_host": str, "source_path": str, "target": str, ...}
            }
        """
        self.rows: Dict[int, Row] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def select(self, filters: Filter) -> List[Row]:
        with self._lock:
            return [dict(row) for row_id, row in sorted(self.rows.items()) if is_visible(row) and matches(row, filters)]

    def select_all(self) -> List[Row]:
        with self._lock:
            return [dict(row) for row in self.rows.values() if is_visible(row)]

    def insert(self, row: Mapping[str, Any]) -> Row:
        """
        Store a copy of `row` under a fresh id.

        Any `id` present in `row` is ignored; ids are generated here.
        """
        with self._lock:
            row_id = self._next_id
            self._next_id += 1
            stored = dict(row)
            stored["id"] = row_id
            self.rows[row_id] = stored
            return dict(stored)

    def update(self, row_id: int, fields: Mapping[str, Any]) -> bool:
        with self._lock:
            existing = self.rows.get(row_id)
            if existing is None:
                return False
            changes = {k: v for k, v in fields.items() if k != "id"}
            existing.update(changes)
            return True

    @contextlib.contextmanager
    def transaction(self) -> Iterator["Storage"]:
        with self._lock:
            yield self
