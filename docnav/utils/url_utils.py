"""URL helpers for relativizing published URLs."""

from __future__ import annotations

import posixpath
import re
from typing import Optional

URL_PATTERN = re.compile(r"^(?:[a-z][a-z0-9+.-]*://|mailto:|tel:|data:)", re.IGNORECASE)


def is_url(value: str) -> bool:
    """Whether value has a URL scheme (http:, mailto:, ...)."""
    return bool(URL_PATTERN.match(value))


def is_indexified(url: str) -> bool:
    return url.endswith("/")


def strip_hash(url: str, hash: Optional[str]) -> str:
    """Remove hash from the end of url, if present."""
    if hash and url.endswith(hash):
        return url[: -len(hash)]
    return url


def relativize(from_url: str, to_url: str, fragment: str = "") -> str:
    """Compute the shortest path from one root-relative URL to another.

    Args:
        from_url: Root-relative URL of the referencing page
        to_url: Root-relative URL of the target
        fragment: Fragment to append, including its leading ``#``

    Returns:
        Relative URL. A reference to the page itself is just the fragment
        (empty when there is none). A ``to_url`` that is not root-relative
        is returned unchanged (plus fragment).
    """
    if not to_url.startswith("/"):
        return to_url + fragment
    if to_url == from_url:
        return fragment

    from_dir = posixpath.dirname(from_url + ".")
    rel_path = posixpath.relpath(to_url, from_dir)
    if rel_path == ".":
        rel_path = ""

    if rel_path:
        if is_indexified(to_url):
            rel_path += "/"
        return rel_path + fragment
    if is_indexified(to_url):
        return "./" + fragment
    return "../" + posixpath.basename(to_url) + fragment
