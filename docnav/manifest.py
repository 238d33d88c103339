"""Load a corpus manifest into a content catalog and navigation catalog.

A manifest is a YAML file describing components, their versions, files and
navigation trees:

    components:
      - name: the-component
        versions:
          - version: "2.0"
            title: The Component
            prerelease: null
            start_page: index.adoc
            files:
              - relative: index.adoc        # module ROOT, family page by default
                title: Start Here
                aliases: [home.adoc]
                xrefs: [the-page.adoc, "other::page.adoc#section"]
              - module: ROOT
                family: partial
                relative: note.adoc
                contents: NOTE text
            nav:
              - content: The Component
                items:
                  - xref: the-page.adoc
                  - content: Upstream
                    url: https://example.org
    site_start_page: the-component::index.adoc
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from docnav.config import DocnavConfig, get_default_config
from docnav.content_catalog import CatalogEntry, ContentCatalog
from docnav.converter import convert_reference
from docnav.diagnostics import Diagnostics
from docnav.errors import ManifestError
from docnav.navigation import NavigationCatalog, NavigationNode
from docnav.resource_id import ROOT_MODULE, ResourceId, split_fragment
from docnav.utils.url_utils import is_url

logger = logging.getLogger(__name__)

FAMILY_DIRS = {
    "page": "pages",
    "partial": "partials",
    "example": "examples",
    "image": "images",
    "attachment": "attachments",
}

FILE_FAMILIES = tuple(FAMILY_DIRS)


@dataclass
class PendingReference:
    """A cross reference a page makes, to be checked."""

    page: CatalogEntry
    spec: str
    content: Optional[str] = None


@dataclass
class Corpus:
    """Everything loaded from a manifest."""

    catalog: ContentCatalog
    navigation: NavigationCatalog
    pending_refs: list[PendingReference] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


def default_path(module: str, family: str, relative: str) -> str:
    """Source path of a file laid out in the standard module structure."""
    return f"modules/{module}/{FAMILY_DIRS[family]}/{relative}"


def _require(data: dict[str, Any], key: str, where: str, manifest_file: str) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise ManifestError(
            f"Missing required key '{key}' in {where}",
            file=manifest_file,
            error_type="manifest_invalid",
        )
    return value


def _as_list(value: Any, where: str, manifest_file: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ManifestError(f"{where} must be a list", file=manifest_file, error_type="manifest_invalid")
    return value


def _add_files(
    catalog: ContentCatalog,
    name: str,
    version: str,
    files: list[dict[str, Any]],
    manifest_file: str,
) -> list[tuple[CatalogEntry, dict[str, Any]]]:
    added = []
    for file_dict in files:
        where = f"files of {version or '_'}@{name}"
        if not isinstance(file_dict, dict):
            raise ManifestError(f"Entries in {where} must be mappings", file=manifest_file)
        relative = str(_require(file_dict, "relative", where, manifest_file))
        module = file_dict.get("module", ROOT_MODULE)
        family = file_dict.get("family", "page")
        if family not in FILE_FAMILIES:
            raise ManifestError(
                f"Unknown family '{family}' for {relative} in {where}",
                file=manifest_file,
                error_type="manifest_invalid",
            )
        attributes = dict(file_dict.get("attributes") or {})
        entry = catalog.add_file(
            CatalogEntry(
                resource_id=ResourceId(name, version, module, family, relative),
                contents=file_dict.get("contents"),
                path=file_dict.get("path") or default_path(module, family, relative),
                title=file_dict.get("title"),
                attributes=attributes,
            )
        )
        added.append((entry, file_dict))
    return added


def _build_nav_items(
    items: list[dict[str, Any]],
    nav_entry: CatalogEntry,
    catalog: ContentCatalog,
    diagnostics: Diagnostics,
    manifest_file: str,
) -> list[NavigationNode]:
    nodes = []
    for item in items:
        if not isinstance(item, dict):
            raise ManifestError("Navigation items must be mappings", file=manifest_file)
        nodes.append(_build_nav_node(item, nav_entry, catalog, diagnostics, manifest_file))
    return nodes


def _build_nav_node(
    item: dict[str, Any],
    nav_entry: CatalogEntry,
    catalog: ContentCatalog,
    diagnostics: Diagnostics,
    manifest_file: str,
) -> NavigationNode:
    node = NavigationNode(content=item.get("content"))
    if item.get("xref"):
        spec = str(item["xref"])
        result = convert_reference(
            spec,
            node.content,
            nav_entry,
            catalog,
            relativize=False,
            diagnostics=diagnostics,
        )
        node.content = result.content
        node.url = result.target
        if result.unresolved or result.internal:
            node.url_type = "fragment"
        else:
            node.url_type = "internal"
            fragment = split_fragment(spec)[1]
            if fragment:
                node.hash = fragment
    elif item.get("url"):
        url = str(item["url"])
        node.url = url
        if url.startswith("#"):
            node.url_type = "fragment"
            node.hash = url
        elif is_url(url):
            node.url_type = "external"
        else:
            node.url_type = "internal"
            fragment = split_fragment(url)[1]
            if fragment:
                node.hash = fragment
    node.items = _build_nav_items(
        _as_list(item.get("items"), "Navigation items", manifest_file),
        nav_entry,
        catalog,
        diagnostics,
        manifest_file,
    )
    return node


def _add_navigation(
    catalog: ContentCatalog,
    navigation: NavigationCatalog,
    name: str,
    version: str,
    trees: list[dict[str, Any]],
    diagnostics: Diagnostics,
    manifest_file: str,
) -> None:
    nodes = []
    for order, tree in enumerate(trees):
        if not isinstance(tree, dict):
            raise ManifestError("Navigation trees must be mappings", file=manifest_file)
        module = tree.get("module", ROOT_MODULE)
        relative = tree.get("relative") or ("nav.adoc" if order == 0 else f"nav-{order}.adoc")
        nav_entry = catalog.add_file(
            CatalogEntry(
                resource_id=ResourceId(name, version, module, "nav", relative),
                path=tree.get("path") or f"modules/{module}/{relative}",
            )
        )
        node = _build_nav_node(tree, nav_entry, catalog, diagnostics, manifest_file)
        node.root = True
        node.order = order
        nodes.append(node)
    navigation.add_navigation(name, version, nodes)


def build_corpus(
    data: dict[str, Any],
    config: Optional[DocnavConfig] = None,
    manifest_file: str = "<manifest>",
    diagnostics: Optional[Diagnostics] = None,
) -> Corpus:
    """Build catalogs from parsed manifest data.

    Files are added first, then aliases, start pages and finally navigation,
    so that every reference sees the complete catalog.

    Raises:
        ManifestError: If the manifest structure is invalid.
        CatalogError: If files or aliases conflict.
    """
    config = config or get_default_config()
    if diagnostics is None:
        diagnostics = Diagnostics()
    catalog = ContentCatalog(
        config.urls.html_extension_style,
        latest_version_segment=config.urls.latest_version_segment,
        latest_prerelease_version_segment=config.urls.latest_prerelease_version_segment,
        latest_version_segment_strategy=config.urls.latest_version_segment_strategy,
    )
    navigation = NavigationCatalog()
    corpus = Corpus(catalog=catalog, navigation=navigation, diagnostics=diagnostics)

    versions = []
    for component_dict in _as_list(data.get("components"), "'components'", manifest_file):
        if not isinstance(component_dict, dict):
            raise ManifestError("Components must be mappings", file=manifest_file)
        name = str(_require(component_dict, "name", "component", manifest_file))
        for version_dict in _as_list(component_dict.get("versions"), f"versions of {name}", manifest_file):
            if not isinstance(version_dict, dict) or "version" not in version_dict:
                raise ManifestError(
                    f"Missing required key 'version' in versions of {name}",
                    file=manifest_file,
                    error_type="manifest_invalid",
                )
            version = "" if version_dict["version"] in (None, "_", "~") else str(version_dict["version"])
            catalog.register_component_version(
                name,
                version,
                title=version_dict.get("title"),
                display_version=version_dict.get("display_version"),
                prerelease=version_dict.get("prerelease"),
            )
            versions.append((name, version, version_dict))

    added = []
    for name, version, version_dict in versions:
        files = _as_list(version_dict.get("files"), f"files of {version or '_'}@{name}", manifest_file)
        added.extend(_add_files(catalog, name, version, files, manifest_file))

    for entry, file_dict in added:
        for alias_spec in _as_list(file_dict.get("aliases"), f"aliases of {entry.location}", manifest_file):
            catalog.register_page_alias(str(alias_spec), entry)

    for name, version, version_dict in versions:
        catalog.register_component_version_start_page(name, version, version_dict.get("start_page"))

    site_start_page = data.get("site_start_page") or config.site.start_page
    if site_start_page:
        catalog.register_site_start_page(str(site_start_page))

    for name, version, version_dict in versions:
        trees = _as_list(version_dict.get("nav"), f"nav of {version or '_'}@{name}", manifest_file)
        if trees:
            _add_navigation(catalog, navigation, name, version, trees, diagnostics, manifest_file)

    for entry, file_dict in added:
        for xref in _as_list(file_dict.get("xrefs"), f"xrefs of {entry.location}", manifest_file):
            if isinstance(xref, dict):
                corpus.pending_refs.append(
                    PendingReference(page=entry, spec=str(xref.get("spec", "")), content=xref.get("content"))
                )
            else:
                corpus.pending_refs.append(PendingReference(page=entry, spec=str(xref)))

    logger.debug(f"Loaded {len(catalog.get_all())} files in {len(versions)} component versions")
    return corpus


def load_manifest(
    manifest_path: Path | str,
    config: Optional[DocnavConfig] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> Corpus:
    """Load a corpus manifest from a YAML file.

    Args:
        manifest_path: Path to the manifest
        config: docnav configuration (defaults if None)
        diagnostics: Receives navigation reference diagnostics

    Returns:
        Corpus with the populated catalogs.

    Raises:
        ManifestError: If the file is missing, not valid YAML, or not a
            valid manifest.
    """
    manifest_path = Path(manifest_path)
    manifest_file = str(manifest_path)
    if not manifest_path.exists():
        raise ManifestError(
            f"Manifest not found: {manifest_file}",
            file=manifest_file,
            error_type="file_missing",
        )
    try:
        data = yaml.safe_load(manifest_path.read_text())
    except yaml.YAMLError as e:
        raise ManifestError(
            f"Invalid YAML: {e}",
            file=manifest_file,
            error_type="manifest_invalid",
        )
    if not isinstance(data, dict):
        raise ManifestError(
            "Top-level manifest must be a mapping",
            file=manifest_file,
            error_type="manifest_invalid",
        )
    return build_corpus(data, config, manifest_file, diagnostics)
