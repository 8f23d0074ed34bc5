"""
UrlInfo: the (host, path+query) view of a raw source URL.

Redirect rows are keyed by `source_host` and `source_path`, so every source
URL is reduced to exactly those two pieces before lookup or insert.

Examples:
    >>> UrlInfo.parse("https://Example.com/old?page=2#top")
    UrlInfo(host='example.com', path_with_query='/old?page=2')
    >>> UrlInfo.parse("/old")
    UrlInfo(host='', path_with_query='/old')
"""

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from ..exceptions import InvalidUrlError

_FORBIDDEN = re.compile(r"[\s\x00-\x1f\x7f]")


@dataclass(frozen=True)
class UrlInfo:
    host: str
    path_with_query: str

    @classmethod
    def parse(cls, raw_url: str) -> "UrlInfo":
        """
        Split `raw_url` into host and path+query.

        Accepts absolute URLs, scheme-relative URLs (`//host/path`) and bare
        paths. The host is lower-cased and keeps an explicit port. The
        fragment is dropped since browsers never send it.

        Raises:
            InvalidUrlError: If the string is empty, contains whitespace or
                control characters, or is not parseable as a URL.
        """
        if not isinstance(raw_url, str) or not raw_url:
            raise InvalidUrlError("Source URL must be a non-empty string")
        if _FORBIDDEN.search(raw_url):
            raise InvalidUrlError(f'Source URL "{raw_url}" contains whitespace or control characters')

        try:
            parts = urlsplit(raw_url)
            # Accessing .port validates it (raises ValueError when out of range)
            parts.port
        except ValueError as exc:
            raise InvalidUrlError(f'Source URL "{raw_url}" could not be parsed: {exc}') from exc

        if parts.scheme and not parts.netloc:
            # "mailto:x" or "https:///path" – nothing we can key a redirect on
            raise InvalidUrlError(f'Source URL "{raw_url}" has a scheme but no host')

        host = (parts.hostname or "").lower()
        if ":" in host:
            # IPv6 literal
            host = f"[{host}]"
        if host and parts.port is not None:
            host = f"{host}:{parts.port}"

        path = parts.path
        if not path:
            if not host:
                raise InvalidUrlError(f'Source URL "{raw_url}" has neither host nor path')
            path = "/"
        elif not path.startswith("/"):
            path = "/" + path

        path_with_query = f"{path}?{parts.query}" if parts.query else path
        return cls(host=host, path_with_query=path_with_query)
