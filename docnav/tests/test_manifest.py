"""Tests for corpus manifest loading."""

import pytest
import yaml

from docnav.config import DocnavConfig, UrlSettings
from docnav.diagnostics import NOT_FOUND
from docnav.errors import CatalogError, ManifestError
from docnav.manifest import build_corpus, default_path, load_manifest
from docnav.resource_id import ResourceId


class TestLoadManifest:
    """Tests for load_manifest."""

    def test_loads_catalog(self, sample_project):
        corpus = load_manifest(sample_project / "docnav-manifest.yml")
        catalog = corpus.catalog
        component = catalog.get_component("the-component")
        assert [cv.version for cv in component.versions] == ["2.0", "1.0"]
        page = catalog.resolve_page("2.0@the-component::the-page.adoc")
        assert page.title == "The Page"
        assert page.path == "modules/ROOT/pages/the-page.adoc"
        partial = catalog.resolve_resource("2.0@the-component::partial$note.adoc")
        assert partial.contents == "A note."

    def test_registers_aliases(self, sample_project):
        corpus = load_manifest(sample_project / "docnav-manifest.yml")
        alias = corpus.catalog.resolve_page("2.0@the-component::old-page.adoc")
        assert alias.is_alias
        assert corpus.catalog.follow_alias(alias).relative == "the-page.adoc"

    def test_start_pages(self, sample_project):
        corpus = load_manifest(sample_project / "docnav-manifest.yml")
        assert corpus.catalog.get_component_version("the-component", "1.0").url == "/the-component/1.0/index.html"
        assert corpus.catalog.get_site_start_page().published_url == "/the-component/2.0/index.html"

    def test_builds_navigation(self, sample_project):
        corpus = load_manifest(sample_project / "docnav-manifest.yml")
        [tree] = corpus.navigation.get_navigation("the-component", "2.0")
        assert tree.root
        assert tree.content == "The Component"
        start, the_page, upstream, missing = tree.items
        assert (start.content, start.url, start.url_type) == ("Start Here", "/the-component/2.0/index.html", "internal")
        assert the_page.content == "The Page"
        assert upstream.url_type == "external"
        assert (missing.url, missing.url_type) == ("#missing.adoc", "fragment")
        assert corpus.diagnostics.by_code(NOT_FOUND)[0].message == "target of xref not found: missing.adoc"
        assert corpus.navigation.get_navigation("the-component", "1.0") == []

    def test_navigation_xref_with_fragment(self, sample_manifest_data):
        version = sample_manifest_data["components"][0]["versions"][0]
        version["nav"] = [{"items": [{"xref": "the-page.adoc#details"}]}]
        corpus = build_corpus(sample_manifest_data)
        [item] = corpus.navigation.get_navigation("the-component", "2.0")[0].items
        assert item.url == "/the-component/2.0/the-page.html#details"
        assert item.hash == "#details"
        assert item.url_without_hash == "/the-component/2.0/the-page.html"

    def test_pending_refs(self, sample_project):
        corpus = load_manifest(sample_project / "docnav-manifest.yml")
        assert [ref.spec for ref in corpus.pending_refs] == ["the-page.adoc", "no-such-page.adoc"]
        assert corpus.pending_refs[0].page.relative == "index.adoc"

    def test_extension_style_from_config(self, sample_manifest_data):
        config = DocnavConfig(urls=UrlSettings(html_extension_style="indexify"))
        corpus = build_corpus(sample_manifest_data, config)
        page = corpus.catalog.get_by_id(ResourceId("the-component", "2.0", "ROOT", "page", "the-page.adoc"))
        assert page.published_url == "/the-component/2.0/the-page/"

    def test_latest_version_segment_from_config(self, sample_manifest_data):
        config = DocnavConfig(urls=UrlSettings(latest_version_segment="current"))
        corpus = build_corpus(sample_manifest_data, config)
        page = corpus.catalog.resolve_page("the-component::the-page.adoc")
        assert page.published_url == "/the-component/current/the-page.html"
        assert corpus.catalog.get_component_version("the-component", "1.0").url == "/the-component/1.0/index.html"
        [tree] = corpus.navigation.get_navigation("the-component", "2.0")
        assert tree.items[1].url == "/the-component/current/the-page.html"

    def test_versionless_component(self):
        corpus = build_corpus({
            "components": [{"name": "guide", "versions": [{"version": "~", "files": [{"relative": "index.adoc"}]}]}],
        })
        assert corpus.catalog.resolve_page("guide::index.adoc").published_url == "/guide/index.html"

    def test_default_path(self):
        assert default_path("module-a", "image", "logo.png") == "modules/module-a/images/logo.png"


class TestManifestErrors:
    """Tests for invalid manifests."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestError) as exc_info:
            load_manifest(tmp_path / "nope.yml")
        assert exc_info.value.error_type == "file_missing"

    def test_invalid_yaml(self, tmp_path):
        manifest = tmp_path / "manifest.yml"
        manifest.write_text("{ invalid yaml: [")
        with pytest.raises(ManifestError) as exc_info:
            load_manifest(manifest)
        assert exc_info.value.error_type == "manifest_invalid"

    def test_top_level_must_be_mapping(self, tmp_path):
        manifest = tmp_path / "manifest.yml"
        manifest.write_text("- a\n")
        with pytest.raises(ManifestError):
            load_manifest(manifest)

    def test_component_without_name(self):
        with pytest.raises(ManifestError) as exc_info:
            build_corpus({"components": [{"versions": []}]})
        assert "'name'" in exc_info.value.message

    def test_file_without_relative(self):
        with pytest.raises(ManifestError):
            build_corpus({"components": [{"name": "c", "versions": [{"version": "1.0", "files": [{"title": "X"}]}]}]})

    def test_unknown_family(self):
        with pytest.raises(ManifestError) as exc_info:
            build_corpus({
                "components": [
                    {"name": "c", "versions": [{"version": "1.0", "files": [{"relative": "x", "family": "nope"}]}]}
                ]
            })
        assert "Unknown family" in exc_info.value.message

    def test_duplicate_file(self, tmp_path):
        manifest = tmp_path / "manifest.yml"
        manifest.write_text(yaml.dump({
            "components": [
                {"name": "c", "versions": [{"version": "1.0", "files": [{"relative": "a.adoc"}, {"relative": "a.adoc"}]}]}
            ]
        }))
        with pytest.raises(CatalogError):
            load_manifest(manifest)

    def test_alias_over_existing_page(self):
        with pytest.raises(CatalogError):
            build_corpus({
                "components": [
                    {
                        "name": "c",
                        "versions": [{
                            "version": "1.0",
                            "files": [{"relative": "a.adoc", "aliases": ["b.adoc"]}, {"relative": "b.adoc"}],
                        }],
                    }
                ]
            })
