"""
Outcome of one `RedirectStore.add` call.

Every branch of the duplicate-resolution procedure ends in an Outcome; none
of them is an exception. Only `CONFLICT` represents a rejected write.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional


class OutcomeKind(str, enum.Enum):
    CREATED = "created"
    WOULD_CREATE = "would_create"
    OVERWRITTEN = "overwritten"
    WOULD_OVERWRITE = "would_overwrite"
    CONFLICT = "conflict"
    ALREADY_PRESENT = "already_present"


_DRY_RUN_KINDS = {OutcomeKind.WOULD_CREATE, OutcomeKind.WOULD_OVERWRITE}


@dataclass(frozen=True)
class Outcome:
    """
    Attributes:
        kind: Which terminal state the procedure reached.
        source: Source URL as given by the caller.
        target: New target link.
        existing: The matching row as it was before the call, if any.
        redirect: The row as stored after a write (CREATED/OVERWRITTEN only).
    """

    kind: OutcomeKind
    source: str
    target: str
    existing: Optional[Dict[str, Any]] = None
    redirect: Optional[Dict[str, Any]] = None

    @property
    def is_rejected(self) -> bool:
        return self.kind is OutcomeKind.CONFLICT

    @property
    def is_dry_run(self) -> bool:
        return self.kind in _DRY_RUN_KINDS

    @property
    def message(self) -> str:
        existing = self.existing or {}
        if self.kind is OutcomeKind.CREATED:
            return "Redirect has been added!"
        if self.kind is OutcomeKind.WOULD_CREATE:
            return "The following redirect would have been added:"
        if self.kind is OutcomeKind.OVERWRITTEN:
            return (
                f'Redirect has been overwritten! Redirect for "{self.source}" overwrites ID {existing.get("id")}.'
                f' Existing target was "{existing.get("target")}", new target is now "{self.target}".'
            )
        if self.kind is OutcomeKind.WOULD_OVERWRITE:
            return (
                f'Redirect for "{self.source}" would overwrite ID {existing.get("id")}.'
                f' Existing target is "{existing.get("target")}", new target would be "{self.target}".'
            )
        if self.kind is OutcomeKind.CONFLICT:
            return (
                f'Redirect for "{self.source}" exists already with ID {existing.get("id")}!'
                f' Existing target is "{existing.get("target")}", new target would be "{self.target}".'
            )
        return (
            f'Redirect for "{self.source}" exists already with ID {existing.get("id")},'
            " but has the same target as the new redirect."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.kind.value,
            "message": self.message,
            "source": self.source,
            "target": self.target,
            "dry_run": self.is_dry_run,
            "rejected": self.is_rejected,
            "existing": self.existing,
            "redirect": self.redirect,
        }
