"""Convert cross references, image targets and includes into link targets.

Each converter resolves a reference against the content catalog in the
context of the referencing entry. Broken references never raise: the
problem is reported to the Diagnostics collaborator and an unresolved
result is returned for the caller to render.
"""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from docnav.content_catalog import Catalog, CatalogEntry
from docnav.diagnostics import Diagnostics
from docnav.errors import ParseError
from docnav.resource_id import split_fragment
from docnav.utils.url_utils import is_url, relativize as relativize_url

logger = logging.getLogger(__name__)

INCLUDE_FAMILIES = ("attachment", "example", "image", "page", "partial")

# An include target that contains any of these is a resource ID, not a path
RESOURCE_ID_MARKER = re.compile(r"[$:@]")


@dataclass
class ReferenceResult:
    """Outcome of converting a reference."""

    content: Optional[str]
    target: str
    internal: bool = False
    unresolved: bool = False
    entry: Optional[CatalogEntry] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"content": self.content, "target": self.target}
        if self.internal:
            result["internal"] = True
        if self.unresolved:
            result["unresolved"] = True
        return result


def _unresolved(id_spec: str, fragment: str, content: Optional[str]) -> ReferenceResult:
    return ReferenceResult(
        content=content or id_spec + fragment,
        target=f"#{id_spec}{fragment}",
        unresolved=True,
    )


def convert_reference(
    spec: str,
    content: Optional[str],
    current_page: CatalogEntry,
    catalog: Catalog,
    relativize: bool = True,
    default_family: str = "page",
    permitted_families: Optional[Iterable[str]] = None,
    kind: str = "xref",
    diagnostics: Optional[Diagnostics] = None,
) -> ReferenceResult:
    """Convert a reference spec into a link target and link text.

    Args:
        spec: Resource ID spec, optionally with ``#fragment``
        content: Explicit link text, if the author supplied one
        current_page: Entry that contains the reference
        catalog: Catalog to resolve against
        relativize: Produce a URL relative to current_page (otherwise the
            root-relative published URL)
        default_family: Family assumed when the spec names none
        permitted_families: Families the spec may reference
        kind: Reference kind used in diagnostic messages
        diagnostics: Receives invalid syntax and not found reports

    Returns:
        ReferenceResult; ``unresolved`` is set when the target is missing.
    """
    id_spec, fragment = split_fragment(spec)
    if not id_spec:
        return ReferenceResult(content=content, target=fragment, internal=True)

    try:
        target = catalog.resolve_resource(
            id_spec, current_page.resource_id, default_family, permitted_families
        )
    except ParseError:
        if diagnostics is not None:
            diagnostics.invalid_syntax(kind, spec, current_page.location)
        return _unresolved(id_spec, fragment, content)

    if target is not None and target.is_alias:
        target = catalog.follow_alias(target)
    if target is None or not target.is_publishable:
        if diagnostics is not None:
            diagnostics.not_found(kind, spec, current_page.location)
        return _unresolved(id_spec, fragment, content)

    if relativize:
        url = relativize_url(current_page.published_url or "/", target.published_url, fragment)
        if url == fragment:
            return ReferenceResult(content=content, target=url, internal=True, entry=target)
    else:
        url = target.published_url + fragment

    if not content:
        if fragment:
            content = id_spec + fragment
        elif current_page.family == "nav":
            content = target.navtitle or id_spec
        else:
            content = target.xreftext or id_spec
    return ReferenceResult(content=content, target=url, entry=target)


def convert_page_ref(
    spec: str,
    content: Optional[str],
    current_page: CatalogEntry,
    catalog: Catalog,
    relativize: bool = True,
    diagnostics: Optional[Diagnostics] = None,
) -> ReferenceResult:
    """Convert the target of a page cross reference (xref)."""
    return convert_reference(
        spec,
        content,
        current_page,
        catalog,
        relativize=relativize,
        default_family="page",
        permitted_families=["page"],
        kind="xref",
        diagnostics=diagnostics,
    )


def convert_image_ref(
    spec: str,
    current_page: CatalogEntry,
    catalog: Catalog,
) -> Optional[str]:
    """Resolve the target of an image macro.

    Returns:
        URL of the image relative to current_page, or None when the target
        is a URL, a data URI, not a valid image ID, or not in the catalog.
        On None the caller keeps the target as written.
    """
    if is_url(spec) or spec.startswith("data:"):
        return None
    try:
        image = catalog.resolve_resource(spec, current_page.resource_id, "image", ["image"])
    except ParseError:
        logger.debug(f"Image target is not a resource ID: {spec}")
        return None
    if image is None or not image.is_publishable:
        logger.debug(f"Image target not found in catalog: {spec} | file: {current_page.location}")
        return None
    return relativize_url(current_page.published_url or "/", image.published_url)


def convert_image_xref(
    xref: str,
    current_page: CatalogEntry,
    catalog: Catalog,
    relativize: bool = True,
    diagnostics: Optional[Diagnostics] = None,
) -> ReferenceResult:
    """Convert the link target of an image (its ``xref`` attribute).

    A target that is not a page ID (``#anchor`` or a bare ID without
    ``.adoc``) links to an anchor in the current page.
    """
    if xref.startswith("#"):
        return ReferenceResult(content=None, target=xref, internal=True)
    id_spec = split_fragment(xref)[0]
    if not id_spec.endswith(".adoc"):
        return ReferenceResult(content=None, target=f"#{xref}", internal=True)
    return convert_page_ref(xref, None, current_page, catalog, relativize, diagnostics)


def convert_include_ref(
    target: str,
    current_file: CatalogEntry,
    catalog: Catalog,
    diagnostics: Optional[Diagnostics] = None,
) -> ReferenceResult:
    """Resolve the target of an include directive.

    Resource ID targets default to the family of the including file. Any
    other target is a path relative to the including file's directory.

    Returns:
        ReferenceResult whose ``target`` is the included file's path and
        whose ``content`` is its contents. An unresolved include carries a
        placeholder line as content.
    """
    if RESOURCE_ID_MARKER.search(target):
        try:
            resolved = catalog.resolve_resource(
                target, current_file.resource_id, current_file.family, INCLUDE_FAMILIES
            )
        except ParseError:
            if diagnostics is not None:
                diagnostics.invalid_syntax("include", target, current_file.location)
            resolved = None
        else:
            if resolved is not None and resolved.is_alias:
                resolved = catalog.follow_alias(resolved)
            if resolved is None and diagnostics is not None:
                diagnostics.not_found("include", target, current_file.location)
    else:
        path = posixpath.normpath(posixpath.join(current_file.dirname, target))
        resolved = catalog.resolve_by_path(current_file.component or "", current_file.version or "", path)
        if resolved is None and diagnostics is not None:
            diagnostics.not_found("include", target, current_file.location)

    if resolved is None:
        return ReferenceResult(
            content=f"Unresolved include directive in {current_file.location} - include::{target}[]",
            target=target,
            unresolved=True,
        )
    return ReferenceResult(
        content=resolved.contents or "",
        target=resolved.path or resolved.location,
        entry=resolved,
    )
