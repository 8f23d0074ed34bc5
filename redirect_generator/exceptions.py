"""
Error taxonomy for Redirect Generator.

All user-facing failures derive from `RedirectGeneratorError`, which is a
`ValueError` so callers that only know about bad input keep working. Each
error carries a numeric `code` that the CLI prints next to the message.

Duplicate handling is NOT part of this module: the outcomes of the duplicate
resolution procedure (created, overwritten, conflict, already present) are
results returned by `RedirectStore.add`, see `manager/outcome.py`.
"""


class RedirectGeneratorError(ValueError):
    """Base class for fatal usage errors."""

    code: int = 1568487000

    def __init__(self, message: str, code: int = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class InvalidUrlError(RedirectGeneratorError):
    """Raised when a source URL cannot be parsed."""

    code = 1568487001


class InvalidStatusCodeError(RedirectGeneratorError):
    """Raised when a status code is outside the allowed set."""

    code = 1568487002


class UnresolvableTargetError(RedirectGeneratorError):
    """Raised when a target reference does not resolve to a page."""

    code = 1568487003
