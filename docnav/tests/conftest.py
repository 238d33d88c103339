"""Shared fixtures for docnav tests."""

import pytest
import yaml

from docnav.content_catalog import CatalogEntry, ContentCatalog
from docnav.diagnostics import Diagnostics
from docnav.resource_id import ResourceId


@pytest.fixture
def catalog():
    """An empty content catalog with the default URL extension style."""
    return ContentCatalog()


@pytest.fixture
def diagnostics():
    return Diagnostics()


@pytest.fixture
def add_file(catalog):
    """Factory that adds a file to the catalog fixture."""

    def _add_file(
        relative,
        component="the-component",
        version="1.0",
        module="ROOT",
        family="page",
        **kwargs,
    ):
        if "path" not in kwargs and family in ("page", "partial", "image"):
            kwargs["path"] = f"modules/{module}/{family}s/{relative}"
        return catalog.add_file(
            CatalogEntry(resource_id=ResourceId(component, version, module, family, relative), **kwargs)
        )

    return _add_file


@pytest.fixture
def sample_catalog(catalog, add_file):
    """Catalog with two components and a mix of families.

    the-component 1.0:
        ROOT: index.adoc, the-page.adoc, _hidden.adoc, partial note.adoc,
              image logo.png
        module-a: the-topic/page-a.adoc
    the-other-component 2.0:
        ROOT: index.adoc
    """
    catalog.register_component_version("the-component", "1.0", title="The Component")
    catalog.register_component_version("the-other-component", "2.0", title="The Other Component")
    add_file("index.adoc", title="Start Here")
    add_file(
        "the-page.adoc",
        title="The Page",
        attributes={"xreftext": "the page", "navtitle": "Page"},
    )
    add_file("_hidden.adoc", title="Hidden")
    add_file("note.adoc", family="partial", contents="NOTE: Remember this.")
    add_file("logo.png", family="image")
    add_file("the-topic/page-a.adoc", module="module-a", title="Page A")
    add_file("index.adoc", component="the-other-component", version="2.0", title="Other Start")
    return catalog


@pytest.fixture
def sample_manifest_data():
    """Manifest with a two-version component, aliases, navigation and xrefs."""
    return {
        "site_start_page": "the-component::index.adoc",
        "components": [
            {
                "name": "the-component",
                "versions": [
                    {
                        "version": "2.0",
                        "title": "The Component",
                        "files": [
                            {
                                "relative": "index.adoc",
                                "title": "Start Here",
                                "xrefs": ["the-page.adoc", "no-such-page.adoc"],
                            },
                            {
                                "relative": "the-page.adoc",
                                "title": "The Page",
                                "aliases": ["old-page.adoc"],
                                "attributes": {
                                    "page-layout": "wide",
                                    "page-edit-url": "https://example.org/edit",
                                    "description": "All about the page",
                                },
                            },
                            {
                                "family": "partial",
                                "relative": "note.adoc",
                                "contents": "A note.",
                            },
                        ],
                        "nav": [
                            {
                                "content": "The Component",
                                "items": [
                                    {"xref": "index.adoc"},
                                    {"xref": "the-page.adoc", "content": "The Page"},
                                    {"content": "Upstream", "url": "https://example.org"},
                                    {"xref": "missing.adoc"},
                                ],
                            }
                        ],
                    },
                    {
                        "version": "1.0",
                        "title": "The Component",
                        "files": [
                            {"relative": "index.adoc", "title": "Start Here"},
                            {"relative": "the-page.adoc", "title": "The Page"},
                        ],
                    },
                ],
            }
        ],
    }


@pytest.fixture
def sample_project(tmp_path, sample_manifest_data):
    """Project directory with docnav.yml and a manifest."""
    (tmp_path / "docnav-manifest.yml").write_text(yaml.dump(sample_manifest_data))
    (tmp_path / "docnav.yml").write_text(yaml.dump({
        "version": "1.0",
        "site": {"title": "Docs", "url": "https://docs.example.org/"},
        "manifest": "docnav-manifest.yml",
    }))
    return tmp_path
