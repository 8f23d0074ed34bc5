from .outcome import Outcome, OutcomeKind
from .redirect_store import CUSTOM_CREATION_TYPE, RedirectStore

__all__ = ["CUSTOM_CREATION_TYPE", "Outcome", "OutcomeKind", "RedirectStore"]
