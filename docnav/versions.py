"""Find a page in the other versions of its component.

A page can be renamed between versions; page aliases record the old name.
Newer versions are searched by following aliases forward from the page's
coordinates. Older versions are searched through the primary alias of the
page being tracked, i.e. the name it had before it was renamed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from docnav.content_catalog import Catalog, CatalogEntry, Component, ComponentVersion
from docnav.diagnostics import Diagnostics
from docnav.resource_id import ResourceId

logger = logging.getLogger(__name__)


@dataclass
class PageVersion:
    """The page (or its stand-in) in one version of its component."""

    version: str
    title: str
    display_version: str
    url: str
    prerelease: bool | str | None = None
    latest: bool = False
    missing: bool = False

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "version": self.version,
            "title": self.title,
            "display_version": self.display_version,
            "url": self.url,
        }
        if self.prerelease:
            result["prerelease"] = self.prerelease
        if self.latest:
            result["latest"] = True
        if self.missing:
            result["missing"] = True
        return result


def _anomaly(diagnostics: Optional[Diagnostics], message: str, entry: CatalogEntry) -> None:
    if diagnostics is not None:
        diagnostics.traversal_anomaly(message, file=entry.location)
    else:
        logger.warning(f"{message} | file: {entry.location}")


def _follow_in_component(
    alias: CatalogEntry,
    component: Component,
    catalog: Catalog,
    diagnostics: Optional[Diagnostics],
) -> Optional[CatalogEntry]:
    """Follow an alias, returning its target only if it stays in the component."""
    target = catalog.follow_alias(alias)
    if target is None:
        _anomaly(diagnostics, f"Page alias chain is broken or cyclic: {alias.location}", alias)
        return None
    if target.component != component.name:
        _anomaly(
            diagnostics,
            f"Page alias leaves component {component.name}: {alias.location} -> {target.location}",
            alias,
        )
        return None
    return target


def _trace_newer(
    entry: CatalogEntry,
    component: Component,
    newer: list[ComponentVersion],
    catalog: Catalog,
    found: dict[str, str],
    diagnostics: Optional[Diagnostics],
) -> None:
    module, relative = entry.module, entry.relative
    for component_version in newer:
        page_id = ResourceId(component.name, component_version.version, module, "page", relative)
        page = catalog.resolve_by_id(page_id)
        if page is None:
            continue
        if page.is_alias:
            page = _follow_in_component(page, component, catalog, diagnostics)
            if page is None:
                break
            module, relative = page.module, page.relative
        if page.is_publishable:
            found[component_version.version] = page.published_url


def _primary_alias(
    tracked: CatalogEntry, component: Component, version: str, catalog: Catalog
) -> Optional[CatalogEntry]:
    aliases = [alias for alias in catalog.find_aliases_of(tracked.resource_id) if alias.component == component.name]
    for alias in aliases:
        if alias.version == version:
            return alias
    return aliases[0] if aliases else None


def _trace_older(
    entry: CatalogEntry,
    component: Component,
    older: list[ComponentVersion],
    catalog: Catalog,
    found: dict[str, str],
    diagnostics: Optional[Diagnostics],
) -> None:
    tracked = entry
    for component_version in older:
        version = component_version.version
        page_id = ResourceId(component.name, version, tracked.module, "page", tracked.relative)
        page = catalog.resolve_by_id(page_id)
        if page is None or page.is_alias:
            primary = _primary_alias(tracked, component, version, catalog)
            if primary is None:
                continue
            page = catalog.resolve_by_id(page_id.replace(module=primary.module, relative=primary.relative))
            if page is None:
                continue
        if page.is_alias:
            page = _follow_in_component(page, component, catalog, diagnostics)
            if page is None:
                break
        tracked = page
        if page.is_publishable:
            found[version] = page.published_url


def get_page_versions(
    entry: CatalogEntry,
    catalog: Catalog,
    diagnostics: Optional[Diagnostics] = None,
) -> Optional[list[PageVersion]]:
    """Locate a page in every version of its component.

    Args:
        entry: The page
        catalog: Catalog holding the page's component
        diagnostics: Receives alias traversal anomalies

    Returns:
        One PageVersion per component version, newest first, or None when
        the component has fewer than two versions. A version in which the
        page cannot be found is marked missing and links to the landing
        page of that version.
    """
    component = catalog.get_component(entry.component or "")
    if component is None or len(component.versions) < 2:
        return None
    index = next(
        (i for i, component_version in enumerate(component.versions) if component_version.version == entry.version),
        None,
    )
    if index is None:
        return None

    found: dict[str, str] = {}
    if entry.published_url is not None:
        found[entry.version] = entry.published_url
    _trace_newer(entry, component, list(reversed(component.versions[:index])), catalog, found, diagnostics)
    _trace_older(entry, component, component.versions[index + 1 :], catalog, found, diagnostics)

    latest = component.latest
    page_versions = []
    for component_version in component.versions:
        url = found.get(component_version.version)
        page_versions.append(
            PageVersion(
                version=component_version.version,
                title=component_version.title,
                display_version=component_version.display_version,
                prerelease=component_version.prerelease,
                url=url if url is not None else (component_version.url or ""),
                latest=component_version is latest,
                missing=url is None,
            )
        )
    return page_versions


def select_canonical_url(
    versions: Optional[list[PageVersion]],
    component_version: Optional[ComponentVersion],
    page_url: str,
    site_url: Optional[str],
) -> Optional[str]:
    """Absolute URL of the preferred version of a page.

    The preferred version is the first version at or after the latest one
    in which the page exists. There is no canonical URL when that version
    is a prerelease or the site URL is not absolute.
    """
    if not site_url or site_url.startswith("/"):
        return None
    if not versions:
        if component_version is not None and component_version.is_prerelease:
            return None
        return site_url + page_url

    reached_latest = False
    for page_version in versions:
        reached_latest = reached_latest or page_version.latest
        if reached_latest and not page_version.missing:
            if page_version.prerelease:
                return None
            if page_version.url.startswith("/"):
                return site_url + page_version.url
            return page_version.url
    return None
