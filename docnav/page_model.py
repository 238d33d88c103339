"""Build the site and page models handed to page templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlparse

from docnav.config import DocnavConfig
from docnav.content_catalog import CatalogEntry, Component, ContentCatalog
from docnav.diagnostics import Diagnostics
from docnav.navigation import NavigationCatalog, NavigationNode, build_nav_context
from docnav.versions import PageVersion, get_page_versions, select_canonical_url


@dataclass
class SiteModel:
    """Site-wide values shared by every page."""

    title: Optional[str] = None
    url: Optional[str] = None
    path: str = ""
    home_url: Optional[str] = None
    components: dict[str, Component] = field(default_factory=dict)
    default_layout: str = "default"

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "path": self.path,
            "home_url": self.home_url,
            "components": list(self.components),
        }


@dataclass
class PageModel:
    """Everything a template needs to render one page."""

    title: Optional[str] = None
    url: Optional[str] = None
    component: Optional[Component] = None
    version: Optional[str] = None
    display_version: Optional[str] = None
    module: Optional[str] = None
    relative_src_path: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    layout: str = "default"
    description: Optional[str] = None
    keywords: Optional[str] = None
    role: Optional[str] = None
    home: bool = False
    navigation: list[NavigationNode] = field(default_factory=list)
    breadcrumbs: list[NavigationNode] = field(default_factory=list)
    parent: Optional[NavigationNode] = None
    previous: Optional[NavigationNode] = None
    next: Optional[NavigationNode] = None
    versions: Optional[list[PageVersion]] = None
    canonical_url: Optional[str] = None

    @property
    def latest(self) -> Optional[PageVersion]:
        if not self.versions:
            return None
        return next((page_version for page_version in self.versions if page_version.latest), None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the model for JSON output (navigation trees omitted)."""

        def node(value: Optional[NavigationNode]) -> Optional[dict[str, Any]]:
            return value.to_dict(include_items=False) if value is not None else None

        latest = self.latest
        return {
            "title": self.title,
            "url": self.url,
            "component": self.component.name if self.component else None,
            "version": self.version,
            "display_version": self.display_version,
            "module": self.module,
            "relative_src_path": self.relative_src_path,
            "attributes": self.attributes,
            "layout": self.layout,
            "description": self.description,
            "keywords": self.keywords,
            "role": self.role,
            "home": self.home,
            "breadcrumbs": [crumb.to_dict(include_items=False) for crumb in self.breadcrumbs],
            "parent": node(self.parent),
            "previous": node(self.previous),
            "next": node(self.next),
            "versions": [v.to_dict() for v in self.versions] if self.versions else None,
            "latest": latest.to_dict() if latest else None,
            "canonical_url": self.canonical_url,
        }


def normalize_site_url(site_url: Optional[str]) -> tuple[Optional[str], str]:
    """Drop a trailing slash from the site URL and derive the site path.

    Returns:
        (url, path); the path is empty when the site is served from the root.
    """
    if not site_url:
        return None, ""
    if site_url == "/":
        return "/", ""
    url = site_url.rstrip("/")
    path = url if url.startswith("/") else urlparse(url).path
    return url, "" if path == "/" else path


def build_site_model(config: DocnavConfig, catalog: ContentCatalog) -> SiteModel:
    url, path = normalize_site_url(config.site.url)
    start_page = catalog.get_site_start_page()
    return SiteModel(
        title=config.site.title,
        url=url,
        path=path,
        home_url=start_page.published_url if start_page else None,
        components={component.name: component for component in catalog.get_components_sorted_by_title()},
        default_layout=config.ui.default_layout,
    )


def build_page_model(
    site: SiteModel,
    entry: CatalogEntry,
    catalog: ContentCatalog,
    navigation_catalog: Optional[NavigationCatalog] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> PageModel:
    """Build the model for a page.

    The model is computed from the catalog on every call.

    Args:
        site: Site model
        entry: The page being rendered
        catalog: Content catalog
        navigation_catalog: Navigation trees per component version
        diagnostics: Receives version traversal anomalies

    Returns:
        PageModel for the page.
    """
    attributes = entry.attributes
    title = entry.doctitle
    model = PageModel(
        title=title,
        url=entry.published_url,
        version=entry.version,
        module=entry.module,
        relative_src_path=entry.relative,
        attributes={name[len("page-"):]: value for name, value in attributes.items() if name.startswith("page-")},
        layout=attributes.get("page-layout") or site.default_layout,
        description=attributes.get("description"),
        keywords=attributes.get("keywords"),
        role=attributes.get("docrole"),
        home=entry.published_url is not None and entry.published_url == site.home_url,
    )

    component = catalog.get_component(entry.component or "")
    component_version = catalog.get_component_version(entry.component or "", entry.version)
    if component is None or component_version is None:
        return model
    model.component = component
    model.display_version = component_version.display_version

    if navigation_catalog is not None:
        trees = navigation_catalog.get_navigation(component.name, component_version.version)
        model.navigation = trees
        nav_context = build_nav_context(entry.published_url or "", title, trees, component_version)
        model.breadcrumbs = nav_context.breadcrumbs
        model.parent = nav_context.parent
        model.previous = nav_context.previous
        model.next = nav_context.next

    model.versions = get_page_versions(entry, catalog, diagnostics)
    model.canonical_url = select_canonical_url(
        model.versions, component_version, entry.published_url or "", site.url
    )
    return model
