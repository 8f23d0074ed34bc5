from .base import Language, LinkResolver, ResolvedLink
from .site_resolver import Site, SiteLinkResolver

__all__ = ["Language", "LinkResolver", "ResolvedLink", "Site", "SiteLinkResolver"]
