"""Compute output paths and published URLs for catalog entries.

Output layout:

    <component>/<version>/<module>/[_images|_attachments/]<dirname>/<basename>

The ROOT module and a versionless version contribute no path segment, and
neither does the version ``master``. Pages are converted to ``.html``; how
the published URL spells that extension depends on the HTML URL extension
style:

- ``default``: ``/comp/1.0/the-page.html``
- ``drop``: ``/comp/1.0/the-page``
- ``indexify``: ``/comp/1.0/the-page/`` (output ``the-page/index.html``)

The latest version (and latest prerelease) of a component can publish
under a symbolic version segment such as ``current``. The latest version
segment strategy decides where:

- ``replace``: pages are published under the symbolic segment
- ``redirect:from``: pages keep the real version; the symbolic segment
  redirects to it
- ``redirect:to``: the real version redirects to the symbolic segment,
  which is where pages are published
"""

from __future__ import annotations

import posixpath

from docnav.resource_id import ROOT_MODULE, ResourceId

HTML_EXTENSION_STYLES = ("default", "drop", "indexify")

PUBLISHABLE_FAMILIES = ("page", "image", "attachment")

LATEST_VERSION_SEGMENT_STRATEGIES = ("replace", "redirect:from", "redirect:to")

UNSEGMENTED_VERSION = "master"

FAMILY_SEGMENTS = {
    "image": "_images",
    "attachment": "_attachments",
}


def compute_version_segment(
    version: str,
    mode: str | None = None,
    strategy: str | None = None,
    symbolic_segment: str | None = None,
) -> str | None:
    """Compute the URL segment a component version is published under.

    Args:
        version: The component version
        mode: None for published files, ``alias`` for the segment of the
            symbolic version alias, ``original`` for the real version
        strategy: Latest version segment strategy, or None if disabled
        symbolic_segment: Symbolic segment for this version (only set for the
            latest version or latest prerelease of a component)

    Returns:
        The segment ("" for none), or None when no symbolic version alias
        applies.
    """
    if mode == "original":
        return "" if version == UNSEGMENTED_VERSION else version
    if version == UNSEGMENTED_VERSION:
        if mode != "alias":
            return ""
        if strategy == "redirect:to":
            return None
    if strategy == "redirect:to" or strategy == ("redirect:from" if mode == "alias" else "replace"):
        return version if symbolic_segment is None else symbolic_segment
    return version


def _join(*segments: str) -> str:
    return "/".join(segment for segment in segments if segment)


def _module_root(resource_id: ResourceId, version_segment: str | None = None) -> str:
    module = "" if resource_id.module == ROOT_MODULE else (resource_id.module or "")
    if version_segment is None:
        version_segment = compute_version_segment(resource_id.version or "") or ""
    return _join(resource_id.component or "", version_segment, module)


def is_hidden(relative: str) -> bool:
    """Whether any segment of a relative path starts with an underscore."""
    return any(segment.startswith("_") for segment in relative.split("/"))


def is_publishable_family(family: str) -> bool:
    return family in PUBLISHABLE_FAMILIES


def compute_out_path(
    resource_id: ResourceId,
    html_extension_style: str = "default",
    family: str | None = None,
    version_segment: str | None = None,
) -> str:
    """Compute the output path of a resource, relative to the site root.

    Args:
        resource_id: Coordinates of the resource
        html_extension_style: One of HTML_EXTENSION_STYLES
        family: Family to lay the file out as (defaults to the ID's family)
        version_segment: URL segment of the version (defaults to the
            segment computed without a latest version segment strategy)

    Returns:
        Output path without a leading slash.
    """
    family = family or resource_id.family
    relative = resource_id.relative
    basename = posixpath.basename(relative)
    stem, ext = posixpath.splitext(basename)
    indexify_segment = ""

    if family == "page":
        if style_indexifies(html_extension_style) and stem != "index":
            basename = "index.html"
            indexify_segment = stem
        elif ext == ".adoc":
            basename = stem + ".html"

    dirname = _join(
        _module_root(resource_id, version_segment),
        FAMILY_SEGMENTS.get(family, ""),
        posixpath.dirname(relative),
        indexify_segment,
    )
    return _join(dirname, basename)


def style_indexifies(html_extension_style: str) -> bool:
    return html_extension_style == "indexify"


def compute_published_url(
    resource_id: ResourceId,
    html_extension_style: str = "default",
    family: str | None = None,
    version_segment: str | None = None,
) -> str:
    """Compute the root-relative URL a resource is published at.

    Navigation files are not published; they get the URL of their module
    root so that references inside them can be resolved.
    """
    family = family or resource_id.family
    if family == "nav":
        url = "/" + _module_root(resource_id, version_segment)
        if not url.endswith("/"):
            url += "/"
        return url.replace(" ", "%20")

    out_path = compute_out_path(resource_id, html_extension_style, family, version_segment)
    if family == "page":
        dirname, basename = posixpath.split(out_path)
        if basename == "index.html" and html_extension_style != "default":
            basename = ""
        elif html_extension_style == "drop" and basename.endswith(".html"):
            basename = basename[: -len(".html")]
        out_path = _join(dirname, basename) + ("/" if not basename and dirname else "")
    return ("/" + out_path).replace(" ", "%20")
