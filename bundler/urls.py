"""Mapping between project paths and the canonical URLs used in the graph.

The dependency graph and the file store key exclusively on URLs. A URL is
the POSIX path of a file relative to the project root, percent-quoted, so
``/project/src/my view.html`` under root ``/project`` maps to
``src/my%20view.html``. Reference specifiers found in documents are resolved
in this URL space, never against the filesystem.
"""

from __future__ import annotations

import os
import posixpath
import re
from typing import Optional
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from .errors import OutOfRootError

_TEMPLATE_BINDING = re.compile(r"\{\{|\[\[")
_CSS_URL = re.compile(r"url\(\s*(['\"]?)([^'\")]+)\1\s*\)", re.IGNORECASE)
_CSS_IMPORT = re.compile(r"(@import\s+)(['\"])([^'\"]+)\2", re.IGNORECASE)


def _escapes_root(relative: str) -> bool:
    return relative in (".", "..") or relative.startswith("../")


def path_to_url(root: str, path: str) -> str:
    """Return the canonical URL for ``path``; relative paths are taken from ``root``."""
    root_path = os.path.abspath(root)
    full_path = os.path.normpath(os.path.join(root_path, path))
    try:
        relative = os.path.relpath(full_path, root_path)
    except ValueError as exc:
        raise OutOfRootError(root, path) from exc
    relative = relative.replace(os.sep, "/")
    if _escapes_root(relative):
        raise OutOfRootError(root, path)
    return quote(relative)


def url_to_path(root: str, url: str) -> str:
    """Return the filesystem path under ``root`` for a canonical URL."""
    root_path = os.path.abspath(root)
    relative = posixpath.normpath(unquote(url).lstrip("/"))
    if _escapes_root(relative):
        raise OutOfRootError(root, url)
    return os.path.join(root_path, *relative.split("/"))


def is_external(href: Optional[str]) -> bool:
    """Return True for specifiers that never name a project document."""
    if not href or not href.strip():
        return True
    href = href.strip()
    if href.startswith("#") or href.startswith("//"):
        return True
    if _TEMPLATE_BINDING.search(href):
        return True
    return bool(urlsplit(href).scheme)


def resolve_url(base_url: str, href: Optional[str]) -> Optional[str]:
    """Resolve ``href`` found in ``base_url`` to a canonical URL.

    Returns None for external specifiers and for targets outside the root.
    Query strings and fragments are not part of the canonical URL.
    """
    if is_external(href):
        return None
    path = unquote(urlsplit(href.strip()).path)
    if not path:
        return None
    if path.startswith("/"):
        joined = path.lstrip("/")
    else:
        joined = posixpath.join(posixpath.dirname(unquote(base_url)), path)
    normalized = posixpath.normpath(joined)
    if _escapes_root(normalized):
        return None
    return quote(normalized)


def relative_url(from_url: str, to_url: str) -> str:
    """Return the relative specifier that reaches ``to_url`` from ``from_url``."""
    start = posixpath.dirname(unquote(from_url)) or "."
    return quote(posixpath.relpath(unquote(to_url), start))


def rebase_href(href: str, from_url: str, to_url: str) -> str:
    """Rewrite ``href`` written in ``from_url`` so it works from ``to_url``."""
    if posixpath.dirname(from_url) == posixpath.dirname(to_url):
        return href
    if is_external(href):
        return href
    parts = urlsplit(href.strip())
    if parts.path.startswith("/"):
        return href
    target = resolve_url(from_url, href)
    if target is None:
        return href
    return urlunsplit(("", "", relative_url(to_url, target), parts.query, parts.fragment))


def rebase_css_urls(css: str, from_url: str, to_url: str) -> str:
    """Rebase ``url()`` and ``@import`` specifiers in a stylesheet."""
    if posixpath.dirname(from_url) == posixpath.dirname(to_url):
        return css

    def _replace_url(match: re.Match) -> str:
        quote_char, href = match.group(1), match.group(2)
        return f"url({quote_char}{rebase_href(href, from_url, to_url)}{quote_char})"

    def _replace_import(match: re.Match) -> str:
        prefix, quote_char, href = match.groups()
        return f"{prefix}{quote_char}{rebase_href(href, from_url, to_url)}{quote_char}"

    css = _CSS_URL.sub(_replace_url, css)
    return _CSS_IMPORT.sub(_replace_import, css)
