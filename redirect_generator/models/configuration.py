"""
Configuration: options applied to one redirect creation.

A fresh Configuration is built per invocation (CLI run or HTTP request) and
discarded afterwards. It is immutable; use `Configuration.build` or the
constructor, both of which reject status codes outside the allowed set with
`InvalidStatusCodeError` before pydantic validation runs.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict

from ..exceptions import InvalidStatusCodeError

ALLOWED_STATUS_CODES = (301, 302, 303, 307)
DEFAULT_STATUS_CODE = 307


class Configuration(BaseModel):
    """Redirect creation options (status code, overwrite policy, row flags)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    overwrite_existing: bool = False
    target_status_code: int = DEFAULT_STATUS_CODE
    keep_query_parameters: bool = False
    is_regexp: bool = False
    force_https: bool = False
    disable_hitcount: bool = False
    respect_query_parameters: bool = False

    def __init__(self, **data: Any) -> None:
        status_code = data.get("target_status_code", DEFAULT_STATUS_CODE)
        if not self.status_code_is_allowed(status_code):
            raise InvalidStatusCodeError(
                f"Status code {status_code!r} is not allowed, use one of "
                + ", ".join(str(c) for c in ALLOWED_STATUS_CODES)
            )
        super().__init__(**data)

    @staticmethod
    def status_code_is_allowed(status_code: Any) -> bool:
        # bool is an int subclass; True must not sneak through as 1
        return (
            isinstance(status_code, int)
            and not isinstance(status_code, bool)
            and status_code in ALLOWED_STATUS_CODES
        )

    @classmethod
    def build(cls, status_code: int = DEFAULT_STATUS_CODE, overwrite_existing: bool = False, **flags: bool) -> "Configuration":
        """
        Build a Configuration from CLI/API style arguments.

        Args:
            status_code (int): Redirect status code, one of 301, 302, 303, 307.
            overwrite_existing (bool): Replace the target of a matching redirect.
            **flags: Any of keep_query_parameters, is_regexp, force_https,
                disable_hitcount, respect_query_parameters.

        Raises:
            InvalidStatusCodeError: If `status_code` is not allowed.
        """
        return cls(target_status_code=status_code, overwrite_existing=overwrite_existing, **flags)

    def row_fields(self) -> Dict[str, Any]:
        """Columns of a redirect row that come from this configuration."""
        return {
            "status_code": self.target_status_code,
            "keep_query_parameters": self.keep_query_parameters,
            "is_regexp": self.is_regexp,
            "force_https": self.force_https,
            "disable_hitcount": self.disable_hitcount,
            "respect_query_parameters": self.respect_query_parameters,
        }
