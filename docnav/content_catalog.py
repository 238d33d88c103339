"""In-memory content catalog of components, versions and files.

Files are indexed by their resource ID coordinates:

    component -> version -> module -> family -> relative

Alias entries (family ``alias``) point at their target through ``rel``, a
ResourceId key rather than an object reference, so alias chains are
followed explicitly and with a hop bound.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Optional, Protocol

from docnav.errors import CatalogError, ParseError
from docnav.resource_id import (
    ROOT_MODULE,
    ResourceId,
    parse_resource_id,
    resource_id_to_string,
)
from docnav.utils.pub_utils import (
    HTML_EXTENSION_STYLES,
    LATEST_VERSION_SEGMENT_STRATEGIES,
    compute_published_url,
    compute_version_segment,
    is_hidden,
    is_publishable_family,
)

logger = logging.getLogger(__name__)

START_PAGE_ID = ResourceId(
    component="ROOT", version="", module=ROOT_MODULE, family="page", relative="index.adoc"
)
START_ALIAS_ID = START_PAGE_ID.replace(family="alias")


@dataclass
class CatalogEntry:
    """A file in the content catalog."""

    resource_id: ResourceId
    contents: Optional[str] = None
    path: Optional[str] = None
    published_url: Optional[str] = None
    # None lets the catalog decide when the entry is added
    publishable: Optional[bool] = None
    rel: Optional[ResourceId] = None
    title: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def component(self) -> Optional[str]:
        return self.resource_id.component

    @property
    def version(self) -> Optional[str]:
        return self.resource_id.version

    @property
    def module(self) -> Optional[str]:
        return self.resource_id.module

    @property
    def family(self) -> str:
        return self.resource_id.family

    @property
    def relative(self) -> str:
        return self.resource_id.relative

    @property
    def is_alias(self) -> bool:
        return self.family == "alias"

    @property
    def is_publishable(self) -> bool:
        return bool(self.publishable) and self.published_url is not None

    @property
    def dirname(self) -> str:
        return posixpath.dirname(self.path) if self.path else ""

    @property
    def doctitle(self) -> Optional[str]:
        return self.title or self.attributes.get("doctitle")

    @property
    def xreftext(self) -> Optional[str]:
        return self.attributes.get("xreftext") or self.doctitle

    @property
    def navtitle(self) -> Optional[str]:
        return self.attributes.get("navtitle") or self.doctitle

    @property
    def location(self) -> str:
        """Where the entry came from, for messages."""
        return self.path or resource_id_to_string(self.resource_id)


@dataclass
class ComponentVersion:
    """A released version of a component."""

    name: str
    version: str
    title: str
    display_version: str
    prerelease: bool | str | None = None
    url: Optional[str] = None
    start_page: Optional[ResourceId] = None

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)


@dataclass
class Component:
    """A documentation component and its versions, newest first."""

    name: str
    versions: list[ComponentVersion] = field(default_factory=list)

    @property
    def latest(self) -> Optional[ComponentVersion]:
        for component_version in self.versions:
            if not component_version.is_prerelease:
                return component_version
        return self.versions[0] if self.versions else None

    @property
    def title(self) -> Optional[str]:
        latest = self.latest
        return latest.title if latest else None

    @property
    def url(self) -> Optional[str]:
        latest = self.latest
        return latest.url if latest else None


class Catalog(Protocol):
    """Lookup operations the converters and model builders depend on."""

    def resolve_by_id(self, resource_id: ResourceId) -> Optional[CatalogEntry]: ...

    def resolve_by_path(self, component: str, version: str, path: str) -> Optional[CatalogEntry]: ...

    def resolve_resource(
        self,
        spec: str,
        context: Optional[ResourceId] = None,
        default_family: Optional[str] = None,
        permitted_families: Optional[Iterable[str]] = None,
    ) -> Optional[CatalogEntry]: ...

    def follow_alias(self, entry: CatalogEntry, limit: Optional[int] = None) -> Optional[CatalogEntry]: ...

    def get_component(self, name: str) -> Optional[Component]: ...

    def get_component_version(self, name: str, version: str) -> Optional[ComponentVersion]: ...

    def find_aliases_of(self, resource_id: ResourceId) -> list[CatalogEntry]: ...


def display_version_for(version: str, prerelease: bool | str | None) -> str:
    """Display version of a component version.

    A prerelease string extends the version; it is appended directly when
    it starts with ``-`` or ``.``, otherwise after a space.
    """
    display = version or "default"
    if isinstance(prerelease, str) and prerelease:
        separator = "" if prerelease[0] in "-." else " "
        display = f"{display}{separator}{prerelease}"
    return display


class ContentCatalog:
    """Catalog of components, component versions and their files."""

    def __init__(
        self,
        html_extension_style: str = "default",
        latest_version_segment: Optional[str] = None,
        latest_prerelease_version_segment: Optional[str] = None,
        latest_version_segment_strategy: Optional[str] = None,
    ):
        if html_extension_style not in HTML_EXTENSION_STYLES:
            raise CatalogError(f"Unknown HTML URL extension style: {html_extension_style}")
        self.html_extension_style = html_extension_style
        self.latest_version_segment = latest_version_segment
        self.latest_prerelease_version_segment = latest_prerelease_version_segment
        if latest_version_segment is None and latest_prerelease_version_segment is None:
            strategy = None
        else:
            strategy = latest_version_segment_strategy or "replace"
            if strategy not in LATEST_VERSION_SEGMENT_STRATEGIES:
                raise CatalogError(f"Unknown latest version segment strategy: {strategy}")
            if strategy == "redirect:from":
                # an empty symbolic segment cannot be redirected from
                self.latest_version_segment = latest_version_segment or None
                self.latest_prerelease_version_segment = latest_prerelease_version_segment or None
                if self.latest_version_segment is None and self.latest_prerelease_version_segment is None:
                    strategy = None
        self.latest_version_segment_strategy = strategy
        self._components: dict[str, Component] = {}
        self._files: dict[str, dict[str, dict[str, dict[str, dict[str, CatalogEntry]]]]] = {}
        self._entries: list[CatalogEntry] = []
        self._by_path: dict[tuple[str, str, str], CatalogEntry] = {}
        self._aliases_by_target: dict[tuple, list[CatalogEntry]] = {}

    # --- components ---

    def register_component_version(
        self,
        name: str,
        version: str,
        title: Optional[str] = None,
        display_version: Optional[str] = None,
        prerelease: bool | str | None = None,
    ) -> ComponentVersion:
        """Register a component version.

        Versions are appended in the order they are registered; the caller
        registers them newest first.

        Raises:
            CatalogError: If the component version is already registered.
        """
        component = self._components.get(name)
        if component is None:
            component = self._components[name] = Component(name=name)
        elif any(cv.version == version for cv in component.versions):
            raise CatalogError(
                f"Duplicate version detected for component {name}: {version}",
                error_type="duplicate_version",
            )
        component_version = ComponentVersion(
            name=name,
            version=version,
            title=title or name,
            display_version=display_version or display_version_for(version, prerelease),
            prerelease=prerelease,
        )
        component.versions.append(component_version)
        return component_version

    def register_component_version_start_page(
        self, name: str, version: str, start_page_spec: Optional[str] = None
    ) -> Optional[ComponentVersion]:
        """Resolve the start page of a component version and set its URL.

        A start page other than ``index.adoc`` gets an ``index.adoc`` alias
        unless an index page exists. Without a usable start page the URL is
        the one the index page would have.
        """
        component_version = self.get_component_version(name, version)
        if component_version is None:
            return None
        index_id = ResourceId(name, version, ROOT_MODULE, "page", "index.adoc")
        start_page = None
        if start_page_spec:
            try:
                start_page = self.resolve_page(start_page_spec, index_id)
            except ParseError:
                logger.warning(
                    f"Start page specified for {version}@{name} has invalid syntax: {start_page_spec}"
                )
            if start_page is not None and start_page.is_alias:
                start_page = self.follow_alias(start_page)
            if start_page is not None and (start_page.component, start_page.version) == (name, version):
                if (start_page.module, start_page.relative) != (ROOT_MODULE, "index.adoc") and (
                    self.get_by_id(index_id) is None and self.get_by_id(index_id.replace(family="alias")) is None
                ):
                    self._add_alias(index_id.replace(family="alias"), start_page)
            else:
                if start_page is None:
                    logger.warning(f"Start page specified for {version}@{name} not found: {start_page_spec}")
                else:
                    logger.warning(
                        f"Start page specified for {version}@{name} is outside that version: {start_page_spec}"
                    )
                start_page = self.get_by_id(index_id)
        else:
            start_page = self.get_by_id(index_id)

        if start_page is not None and start_page.published_url:
            component_version.url = start_page.published_url
            component_version.start_page = start_page.resource_id
        else:
            component_version.url = self._published_url(index_id)
            component_version.start_page = index_id
        return component_version

    def get_component(self, name: str) -> Optional[Component]:
        return self._components.get(name)

    def get_component_version(self, name: str, version: Optional[str]) -> Optional[ComponentVersion]:
        component = self._components.get(name)
        if component is None:
            return None
        if version is None:
            return component.latest
        for component_version in component.versions:
            if component_version.version == version:
                return component_version
        return None

    def get_components(self) -> list[Component]:
        return list(self._components.values())

    def get_components_sorted_by_title(self) -> list[Component]:
        return sorted(self._components.values(), key=lambda c: (c.title or "").lower())

    def compute_version_segment(self, name: str, version: str, mode: Optional[str] = None) -> Optional[str]:
        """URL segment for a version of a component under the catalog's URL settings."""
        symbolic_segment = None
        component = self._components.get(name)
        component_version = self.get_component_version(name, version) if component else None
        if component is not None and component_version is not None:
            if component_version is component.latest:
                symbolic_segment = self.latest_version_segment
            elif component_version.is_prerelease and component_version is component.versions[0]:
                symbolic_segment = self.latest_prerelease_version_segment
        return compute_version_segment(version, mode, self.latest_version_segment_strategy, symbolic_segment)

    def _published_url(self, resource_id: ResourceId, family: Optional[str] = None) -> str:
        version_segment = self.compute_version_segment(resource_id.component or "", resource_id.version or "")
        return compute_published_url(resource_id, self.html_extension_style, family, version_segment or "")

    # --- files ---

    def add_file(self, entry: CatalogEntry) -> CatalogEntry:
        """Add a file to the catalog.

        Pages, images and attachments get a published URL unless a segment
        of their relative path starts with ``_``. Alias entries get the URL
        of the page they stand in for, but are not publishable themselves.

        Raises:
            CatalogError: If a file with the same coordinates exists.
        """
        resource_id = entry.resource_id
        if resource_id.fragment:
            entry.resource_id = resource_id = resource_id.replace(fragment="")
        family_files = (
            self._files.setdefault(resource_id.component or "", {})
            .setdefault(resource_id.version or "", {})
            .setdefault(resource_id.module or "", {})
            .setdefault(resource_id.family, {})
        )
        if resource_id.relative in family_files:
            raise CatalogError(
                f"Duplicate {resource_id.family}: {resource_id_to_string(resource_id, shorthand=True)}",
                file=entry.path,
                error_type="duplicate_file",
            )

        if entry.published_url is None:
            if is_publishable_family(resource_id.family) and not is_hidden(resource_id.relative):
                entry.published_url = self._published_url(resource_id)
                if entry.publishable is None:
                    entry.publishable = True
            elif resource_id.family == "alias":
                entry.published_url = self._published_url(resource_id, family="page")
            elif resource_id.family == "nav":
                entry.published_url = self._published_url(resource_id)
        elif entry.publishable is None:
            entry.publishable = not entry.is_alias
        if entry.publishable is None or entry.is_alias:
            entry.publishable = False

        family_files[resource_id.relative] = entry
        self._entries.append(entry)
        if entry.path:
            self._by_path[(resource_id.component or "", resource_id.version or "", entry.path)] = entry
        if entry.rel is not None:
            self._aliases_by_target.setdefault(entry.rel.key(), []).append(entry)
        return entry

    def register_page_alias(self, spec: str, target: CatalogEntry) -> Optional[CatalogEntry]:
        """Register an alias that redirects to a page.

        Args:
            spec: Resource ID spec of the alias, relative to the target page
            target: The page the alias points to

        Returns:
            The alias entry, or None if the spec is not a valid page ID.

        Raises:
            CatalogError: If the alias references the target itself, an
                existing page, or an existing alias.
        """
        try:
            alias_id = parse_resource_id(spec, target.resource_id, "page", ["page"])
        except ParseError:
            logger.warning(f"Page alias has invalid syntax: {spec} | file: {target.location}")
            return None
        alias_id = alias_id.replace(fragment="")
        if alias_id.version is None:
            component = self.get_component(alias_id.component or "")
            latest = component.latest if component else None
            alias_id = alias_id.replace(version=latest.version if latest else "")

        existing_page = self.get_by_id(alias_id)
        if existing_page is not None:
            shorthand = resource_id_to_string(alias_id, shorthand=True)
            if existing_page is target:
                raise CatalogError(
                    f"Page cannot define alias that references itself: {shorthand}", file=target.path
                )
            raise CatalogError(
                f"Page alias cannot reference an existing page: {shorthand}", file=target.path
            )
        alias_id = alias_id.replace(family="alias")
        existing_alias = self.get_by_id(alias_id)
        if existing_alias is not None:
            raise CatalogError(
                f"Duplicate alias: {resource_id_to_string(alias_id, shorthand=True)}",
                file=target.path,
            )
        return self._add_alias(alias_id, target)

    def _add_alias(self, alias_id: ResourceId, target: CatalogEntry) -> CatalogEntry:
        return self.add_file(CatalogEntry(resource_id=alias_id, rel=target.resource_id))

    def register_site_start_page(self, start_page_spec: str) -> Optional[CatalogEntry]:
        """Point the site start page alias at a page of some component."""
        try:
            start_page = self.resolve_page(start_page_spec)
        except ParseError:
            logger.warning(f"Start page specified for site has invalid syntax: {start_page_spec}")
            return None
        if start_page is not None and start_page.is_alias:
            start_page = self.follow_alias(start_page)
        if start_page is None:
            if ":" in start_page_spec:
                logger.warning(f"Start page specified for site not found: {start_page_spec}")
            else:
                logger.warning(f"Missing component name in start page for site: {start_page_spec}")
            return None
        return self._add_alias(START_ALIAS_ID, start_page)

    def get_site_start_page(self) -> Optional[CatalogEntry]:
        page = self.get_by_id(START_PAGE_ID)
        if page is not None:
            return page
        alias = self.get_by_id(START_ALIAS_ID)
        return self.follow_alias(alias) if alias is not None else None

    # --- lookup ---

    def get_by_id(self, resource_id: ResourceId) -> Optional[CatalogEntry]:
        """Look up an entry by its exact coordinates."""
        return (
            self._files.get(resource_id.component or "", {})
            .get(resource_id.version or "", {})
            .get(resource_id.module or "", {})
            .get(resource_id.family, {})
            .get(resource_id.relative)
        )

    def resolve_by_id(self, resource_id: ResourceId) -> Optional[CatalogEntry]:
        """Look up an entry, filling in the latest version when none is given.

        A page that does not exist resolves to the alias entry at the same
        coordinates, if any. The alias is returned as is.
        """
        if resource_id.component is None:
            return None
        if resource_id.version is None:
            latest = self.get_component_version(resource_id.component, None)
            if latest is None:
                return None
            resource_id = resource_id.replace(version=latest.version)
        entry = self.get_by_id(resource_id)
        if entry is None and resource_id.family == "page":
            entry = self.get_by_id(resource_id.replace(family="alias"))
        return entry

    def resolve_by_path(self, component: str, version: str, path: str) -> Optional[CatalogEntry]:
        return self._by_path.get((component or "", version or "", path))

    def resolve_resource(
        self,
        spec: str,
        context: Optional[ResourceId] = None,
        default_family: Optional[str] = None,
        permitted_families: Optional[Iterable[str]] = None,
    ) -> Optional[CatalogEntry]:
        """Parse a resource ID spec and look it up.

        Raises:
            ParseError: If the spec is not a valid resource ID.
        """
        resource_id = parse_resource_id(spec, context, default_family, permitted_families)
        return self.resolve_by_id(resource_id)

    def resolve_page(self, spec: str, context: Optional[ResourceId] = None) -> Optional[CatalogEntry]:
        return self.resolve_resource(spec, context, "page", ["page"])

    def follow_alias(self, entry: CatalogEntry, limit: Optional[int] = None) -> Optional[CatalogEntry]:
        """Follow alias entries until a non-alias entry is reached.

        Cycles are detected by remembering the aliases visited, so an
        acyclic chain is never longer than the number of aliases in the
        catalog.

        Args:
            entry: Entry to start from (returned as is if not an alias)
            limit: Maximum number of hops (default: number of alias entries
                in the catalog)

        Returns:
            The target entry, or None if the chain is dangling, cyclic or
            longer than the limit.
        """
        if limit is None:
            limit = sum(len(aliases) for aliases in self._aliases_by_target.values())
        seen: set[tuple] = set()
        current: Optional[CatalogEntry] = entry
        hops = 0
        while current is not None and current.is_alias:
            key = current.resource_id.key()
            if current.rel is None or key in seen or hops >= limit:
                logger.debug(f"Alias chain could not be followed: {current.location}")
                return None
            seen.add(key)
            current = self.get_by_id(current.rel)
            hops += 1
        return current

    def find_aliases_of(self, resource_id: ResourceId) -> list[CatalogEntry]:
        """Alias entries that point at resource_id, in registration order."""
        return list(self._aliases_by_target.get(resource_id.replace(fragment="").key(), []))

    def find_by(self, **criteria: Any) -> list[CatalogEntry]:
        """Entries whose resource ID coordinates match all criteria.

        Example:
            catalog.find_by(component="the-component", family="page")
        """
        return [
            entry
            for entry in self._entries
            if all(getattr(entry.resource_id, name) == value for name, value in criteria.items())
        ]

    def get_pages(self, predicate: Optional[Callable[[CatalogEntry], bool]] = None) -> list[CatalogEntry]:
        pages = [entry for entry in self._entries if entry.family == "page"]
        if predicate is not None:
            pages = [page for page in pages if predicate(page)]
        return pages

    def get_all(self) -> list[CatalogEntry]:
        return list(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)
