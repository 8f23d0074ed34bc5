"""
SiteLinkResolver – resolve targets against a site map
=====================================================

Resolves operator-supplied targets to pages of one site described by a JSON
site map (see `REDIRECT_SITE_CONFIG`):

    {
      "base": "https://www.example.com",
      "languages": [
        {"id": 0, "code": "en", "title": "English", "base_path": "/"},
        {"id": 1, "code": "de", "title": "German", "base_path": "/de/"}
      ],
      "pages": [
        {"uid": 1, "slug": "/"},
        {"uid": 12, "slug": "/about", "translations": {"de": "/ueber-uns"}}
      ]
    }

Accepted target forms:
    - "12"                           page id, default language
    - "t3://page?uid=12&language=1"  page link, optional language id
    - "https://www.example.com/de/ueber-uns"  absolute URL on the site's host
    - "/de/ueber-uns"                site path

A query string on a URL or path target is carried over to the canonical
link unchanged; the fragment is dropped.

The default language is the one with id 0, or the first listed. For paths,
the language whose base_path is the longest prefix of the path wins.

Optionally the canonical link is checked for reachability with an HTTP HEAD
request (GET fallback when HEAD is refused), as a guard against typos that
happen to match a stale page.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

import requests
from pydantic import BaseModel, Field

from ..config import settings
from ..exceptions import UnresolvableTargetError
from .base import Language, LinkResolver, ResolvedLink

log = logging.getLogger(__name__)


class SiteLanguage(BaseModel):
    id: int
    code: str
    title: str
    base_path: str = "/"

    def prefix(self) -> str:
        return self.base_path.rstrip("/")


class SitePage(BaseModel):
    uid: int
    slug: str
    translations: Dict[str, str] = Field(default_factory=dict)

    def slug_for(self, language_code: str) -> str:
        return _normalize_slug(self.translations.get(language_code, self.slug))


class Site(BaseModel):
    base: str
    languages: List[SiteLanguage]
    pages: List[SitePage] = Field(default_factory=list)

    @property
    def host(self) -> str:
        return (urlsplit(self.base).hostname or "").lower()


def _normalize_slug(slug: str) -> str:
    return "/" + slug.strip("/")


class SiteLinkResolver(LinkResolver):
    """
    Resolve targets against a single site map.

    Args:
        site (Site): Parsed site map.
        check_reachable (bool): If True, the canonical link must answer 2xx/3xx.
        timeout (float): Seconds for the reachability request.
    """

    def __init__(self, site: Site, check_reachable: bool = False, timeout: Optional[float] = None):
        if not site.languages:
            raise ValueError("Site map must define at least one language")
        self.site = site
        self.check_reachable = check_reachable
        self.timeout = settings.HTTP_TIMEOUT if timeout is None else timeout

    @classmethod
    def from_file(cls, path, **kwargs) -> "SiteLinkResolver":
        """Load a site map JSON file. Raises OSError or pydantic.ValidationError."""
        site = Site.model_validate_json(Path(path).read_text(encoding="utf-8"))
        return cls(site, **kwargs)

    # ---------------------------------------------------------------------
    # Lookup helpers
    # ---------------------------------------------------------------------
    def _default_language(self) -> SiteLanguage:
        for language in self.site.languages:
            if language.id == 0:
                return language
        return self.site.languages[0]

    def _language_by_id(self, language_id: int) -> SiteLanguage:
        for language in self.site.languages:
            if language.id == language_id:
                return language
        raise UnresolvableTargetError(f"Language {language_id} does not exist on {self.site.base}")

    def _page_by_uid(self, uid: int) -> SitePage:
        for page in self.site.pages:
            if page.uid == uid:
                return page
        raise UnresolvableTargetError(f"Page {uid} does not exist on {self.site.base}")

    def _match_path(self, path: str) -> Tuple[SitePage, SiteLanguage]:
        path = _normalize_slug(path)
        candidates = []
        for language in self.site.languages:
            prefix = language.prefix()
            if path == prefix or path.startswith(prefix + "/") or not prefix:
                candidates.append(language)
        for language in sorted(candidates, key=lambda lang: len(lang.prefix()), reverse=True):
            slug = _normalize_slug(path[len(language.prefix()):])
            for page in self.site.pages:
                if page.slug_for(language.code) == slug:
                    return page, language
        raise UnresolvableTargetError(f'No page found for path "{path}" on {self.site.base}')

    def _link(self, page: SitePage, language: SiteLanguage) -> str:
        return self.site.base.rstrip("/") + language.prefix() + page.slug_for(language.code)

    # ---------------------------------------------------------------------
    # Reachability
    # ---------------------------------------------------------------------
    def _is_reachable(self, url: str) -> bool:
        """
        Best-effort link reachability check.
        Strategy:
            - Try HTTP HEAD (allow redirects). If 2xx or 3xx => reachable.
            - If HEAD is refused (403/405), try GET without reading the body.
        """
        try:
            resp = requests.head(url, allow_redirects=True, timeout=self.timeout)
            if resp.status_code not in (403, 405):
                return 200 <= resp.status_code < 400
            with requests.get(url, stream=True, allow_redirects=True, timeout=self.timeout) as resp:
                return 200 <= resp.status_code < 400
        except requests.RequestException as exc:
            log.info("Reachability check for %s failed: %s", url, exc)
            return False

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def resolve(self, raw_target: str) -> ResolvedLink:
        target = (raw_target or "").strip()
        if not target:
            raise UnresolvableTargetError("Target must not be empty")

        query = ""
        if target.isascii() and target.isdigit():
            page, language = self._page_by_uid(int(target)), self._default_language()
        elif target.startswith("t3://page"):
            page, language = self._resolve_page_link(target)
        else:
            parts = urlsplit(target)
            if parts.scheme and parts.scheme not in ("http", "https"):
                raise UnresolvableTargetError(f'Target "{target}" has unsupported scheme "{parts.scheme}"')
            if parts.netloc and (parts.hostname or "").lower() != self.site.host:
                raise UnresolvableTargetError(f'Target "{target}" is not on site {self.site.base}')
            page, language = self._match_path(parts.path or "/")
            query = parts.query

        link = self._link(page, language)
        if query:
            link = f"{link}?{query}"
        if self.check_reachable and not self._is_reachable(link):
            raise UnresolvableTargetError(f'Target link "{link}" is not reachable (HEAD/GET failed)')

        log.debug("Resolved %r to page %s (%s): %s", raw_target, page.uid, language.code, link)
        return ResolvedLink(
            canonical_link=link,
            page_id=page.uid,
            language=Language(id=language.id, code=language.code, title=language.title),
        )

    def _resolve_page_link(self, target: str) -> Tuple[SitePage, SiteLanguage]:
        query = parse_qs(urlsplit(target).query)
        try:
            uid = int(query["uid"][0])
        except (KeyError, ValueError):
            raise UnresolvableTargetError(f'Page link "{target}" needs a numeric uid')
        language = self._default_language()
        if "language" in query:
            try:
                language = self._language_by_id(int(query["language"][0]))
            except ValueError:
                raise UnresolvableTargetError(f'Page link "{target}" has a non-numeric language')
        return self._page_by_uid(uid), language
