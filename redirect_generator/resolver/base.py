"""
Link resolver contract.

The CMS owns routing. The CLI only needs to turn whatever the operator typed
as target (page id, link, URL) into a canonical link plus the page id and
language it points at; that is what a LinkResolver provides.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel


class Language(BaseModel):
    """A site language as shown to the operator."""
    id: int
    code: str
    title: str


class ResolvedLink(BaseModel):
    """Result of resolving a target reference."""
    canonical_link: str
    page_id: int
    language: Language


class LinkResolver(ABC):
    @abstractmethod  # pragma: no cover
    def resolve(self, raw_target: str) -> ResolvedLink:
        """
        Resolve `raw_target` into a canonical link.

        Raises:
            UnresolvableTargetError: If the target does not point at a page.
        """
        raise NotImplementedError
