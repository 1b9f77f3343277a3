"""Branded string types for local paths, URLs and JSON documents.

A branded type cannot be replaced by its underlying ``str`` for the type
checker: a function expecting a ``PathString`` rejects a ``UrlString`` even
though both are plain strings at runtime.
"""

import re
from typing import NewType
from urllib.parse import urlsplit, urlunsplit

PathString = NewType("PathString", str)
UrlString = NewType("UrlString", str)
JSONString = NewType("JSONString", str)

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_FORBIDDEN_HOST_RE = re.compile(r"[\x00-\x20<>\\^|\x7f]")

# Schemes that always carry a host and a path
WEB_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})


def _build_url(value: str) -> str:
    if not _SCHEME_RE.match(value):
        raise ValueError(f"No URL scheme: {value!r}")

    parts = urlsplit(value)
    scheme = parts.scheme.lower()
    if len(scheme) == 1:
        raise ValueError(f"Drive letter, not a URL scheme: {value!r}")

    # Accessing port validates both the port and any bracketed IPv6 host
    parts.port  # noqa: B018

    netloc = parts.netloc
    if netloc:
        userinfo, sep, host = netloc.rpartition("@")
        if not host.startswith("[") and _FORBIDDEN_HOST_RE.search(host):
            raise ValueError(f"Invalid host: {value!r}")
        netloc = f"{userinfo}{sep}{host.lower()}"

    path = parts.path
    if scheme in WEB_SCHEMES:
        if not netloc:
            raise ValueError(f"Missing host: {value!r}")
        path = path or "/"

    if not netloc and path.startswith("//"):
        # An empty authority must survive, or the first path segment becomes the host
        url = f"{scheme}://{path}"
        if parts.query:
            url += f"?{parts.query}"
        if parts.fragment:
            url += f"#{parts.fragment}"
        return url.strip()

    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment)).strip()


def _normalize_url(value: str) -> str:
    """Normalize an absolute URL.

    The result normalizes to itself, strings that do not are not URLs.

    :param value: String to parse
    :returns: Normalized href
    :raises ValueError: If the string is not an absolute URL
    """
    url = _build_url(value.strip())
    if _build_url(url) != url:
        raise ValueError(f"Unstable URL: {value!r}")
    return url


def path_or_url_from_string(value: str) -> PathString | UrlString:
    """Classify a string as a URL or a local path.

    Strings that parse as an absolute URL are returned normalized as
    ``UrlString``, anything else is returned unchanged as ``PathString``.

    :param value: Raw location
    :returns: Branded location
    """
    try:
        return UrlString(_normalize_url(value.strip()))
    except ValueError:
        return PathString(value)


def is_url(value: str) -> bool:
    """Check whether a string resolves to a URL.

    :param value: Raw location
    :returns: True when the string parses as an absolute URL
    """
    try:
        _normalize_url(value.strip())
    except ValueError:
        return False
    return True


def location_scheme(value: str) -> str:
    """Scheme of a location.

    :param value: Raw location
    :returns: Lower-cased URL scheme, or an empty string for local paths
    """
    if not is_url(value):
        return ""
    return urlsplit(value.strip()).scheme.lower()
