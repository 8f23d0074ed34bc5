"""
RedirectStore module for Redirect Generator.

Responsibilities:
    - Look up an existing redirect for a source URL (exact host or wildcard host)
    - Decide what to do when a new redirect collides with a stored one
    - Insert new rows and overwrite existing ones in place

Design notes:
    - Storage is an injected dependency (any BaseStorage); so is the clock,
      which keeps created/updated timestamps deterministic in tests.
    - Duplicate handling returns an Outcome for every branch. Overwriting is
      normal control flow, and a conflict is a rejected write reported to the
      caller, not an exception.
    - Dry runs take the same path as real runs and stop right before writing.
    - The lookup and the write run inside `storage.transaction()`.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from ..models.configuration import Configuration
from ..models.url_info import UrlInfo
from ..storage.base import BaseStorage
from .outcome import Outcome, OutcomeKind

log = logging.getLogger(__name__)

# creation_type value marking rows created by this tool
CUSTOM_CREATION_TYPE = 6332
WILDCARD_HOST = "*"

Clock = Callable[[], int]


def _system_clock() -> int:
    return int(time.time())


class RedirectStore:
    """
    Coordinates lookup and duplicate-resolution rules for redirects.
    """

    def __init__(self, storage: BaseStorage, clock: Optional[Clock] = None):
        """
        Args:
            storage (BaseStorage): Row store holding the redirects table.
            clock (Optional[Clock]): Returns the current Unix time in seconds.
        """
        self.storage = storage
        self.clock = clock or _system_clock

    # ---------------------------------------------------------------------
    # Lookup
    # ---------------------------------------------------------------------
    def find(self, source_url: str) -> Optional[Dict[str, Any]]:
        """
        Return the stored redirect matching `source_url`, or None.

        A row matches when its source_path equals the URL's path+query and its
        source_host is the wildcard or the URL's host. When several rows
        match, the one for the exact host wins over the wildcard; ties go to
        the lowest id.

        Raises:
            InvalidUrlError: If `source_url` cannot be parsed.
        """
        info = UrlInfo.parse(source_url)
        return self._find(info)

    def _find(self, info: UrlInfo) -> Optional[Dict[str, Any]]:
        hosts = (WILDCARD_HOST, info.host) if info.host else (WILDCARD_HOST,)
        rows = self.storage.select({"source_host": hosts, "source_path": info.path_with_query})
        if not rows:
            return None
        if len(rows) > 1:
            log.warning(
                "%d redirects match %s%s, picking the most specific one",
                len(rows), info.host or WILDCARD_HOST, info.path_with_query,
            )
        return min(rows, key=lambda r: (r.get("source_host") == WILDCARD_HOST, r.get("id")))

    def list_all(self) -> List[Dict[str, Any]]:
        """Every stored redirect, in storage order."""
        return list(self.storage.select_all())

    # ---------------------------------------------------------------------
    # Creation
    # ---------------------------------------------------------------------
    def add(self, source_url: str, target: str, config: Configuration, dry_run: bool = False) -> Outcome:
        """
        Add a redirect from `source_url` to `target`, resolving duplicates.

        Rules:
            - No matching redirect: insert one (CREATED, or WOULD_CREATE on dry run).
            - Match and config.overwrite_existing: update target, status code,
              flags and updated_at in place, keeping id and created_at
              (OVERWRITTEN, or WOULD_OVERWRITE on dry run).
            - Match with a different target: CONFLICT, nothing written.
            - Match with the same target: ALREADY_PRESENT, nothing written.

        Args:
            source_url (str): URL to redirect from (absolute or path only).
            target (str): Fully resolved link to redirect to.
            config (Configuration): Status code, overwrite policy and flags.
            dry_run (bool): If True, storage is never modified.

        Returns:
            Outcome: The branch taken, with the matching row (if any) and the
            stored row after a write.

        Raises:
            InvalidUrlError: If `source_url` cannot be parsed. Raised before
            storage is touched.
        """
        info = UrlInfo.parse(source_url)

        with self.storage.transaction():
            existing = self._find(info)

            if existing is None:
                if dry_run:
                    return Outcome(OutcomeKind.WOULD_CREATE, source_url, target)
                row = self._insert(info, target, config)
                log.info("Created redirect %s for %s -> %s", row.get("id"), source_url, target)
                return Outcome(OutcomeKind.CREATED, source_url, target, redirect=row)

            if config.overwrite_existing:
                if dry_run:
                    return Outcome(OutcomeKind.WOULD_OVERWRITE, source_url, target, existing=existing)
                row = self._overwrite(existing, target, config)
                log.info(
                    "Overwrote redirect %s for %s: %s -> %s",
                    existing.get("id"), source_url, existing.get("target"), target,
                )
                return Outcome(OutcomeKind.OVERWRITTEN, source_url, target, existing=existing, redirect=row)

            if existing.get("target") != target:
                log.info("Conflicting redirect %s for %s", existing.get("id"), source_url)
                return Outcome(OutcomeKind.CONFLICT, source_url, target, existing=existing)

            return Outcome(OutcomeKind.ALREADY_PRESENT, source_url, target, existing=existing)

    def _insert(self, info: UrlInfo, target: str, config: Configuration) -> Dict[str, Any]:
        now = self.clock()
        row = {
            "creation_type": CUSTOM_CREATION_TYPE,
            "created_at": now,
            "updated_at": now,
            **config.row_fields(),
            "source_host": info.host or WILDCARD_HOST,
            "source_path": info.path_with_query,
            "target": target,
        }
        return self.storage.insert(row)

    def _overwrite(self, existing: Dict[str, Any], target: str, config: Configuration) -> Dict[str, Any]:
        fields = {"updated_at": self.clock(), **config.row_fields(), "target": target}
        self.storage.update(existing["id"], fields)
        return {**existing, **fields}
