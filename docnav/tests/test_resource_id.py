"""Tests for resource ID parsing and formatting."""

import pytest

from docnav.errors import ParseError
from docnav.resource_id import (
    ResourceId,
    parse_resource_id,
    resource_id_to_string,
    split_fragment,
)


@pytest.fixture
def context():
    return ResourceId("the-component", "1.0", "module-a", "page", "the-topic/index.adoc")


class TestParseResourceId:
    """Tests for parse_resource_id."""

    def test_relative_only_takes_coordinates_from_context(self, context):
        """A bare relative path inherits component, version and module."""
        resource_id = parse_resource_id("the-topic/the-page.adoc", context, "page")
        assert resource_id == ResourceId("the-component", "1.0", "module-a", "page", "the-topic/the-page.adoc")

    def test_version_only(self, context):
        """version@ changes only the version."""
        resource_id = parse_resource_id("2.0@the-page.adoc", context, "page")
        assert resource_id.version == "2.0"
        assert resource_id.component == "the-component"
        assert resource_id.module == "module-a"

    def test_module_only(self, context):
        """module: changes only the module."""
        resource_id = parse_resource_id("module-b:the-page.adoc", context, "page")
        assert resource_id.component == "the-component"
        assert resource_id.version == "1.0"
        assert resource_id.module == "module-b"

    def test_component_defaults_module_to_root_and_version_to_latest(self, context):
        """component:: resets the module to ROOT and leaves the version unset."""
        resource_id = parse_resource_id("the-other-component::the-page.adoc", context, "page")
        assert resource_id.component == "the-other-component"
        assert resource_id.module == "ROOT"
        assert resource_id.version is None

    def test_component_and_module(self, context):
        resource_id = parse_resource_id("the-other-component:module-b:the-page.adoc", context, "page")
        assert resource_id.component == "the-other-component"
        assert resource_id.module == "module-b"
        assert resource_id.version is None

    def test_fully_qualified(self, context):
        resource_id = parse_resource_id("4.5.6@component-b:module-b:the-page.adoc", context, "page")
        assert resource_id == ResourceId("component-b", "4.5.6", "module-b", "page", "the-page.adoc")

    def test_module_defaults_to_root_without_context(self):
        """Module is ROOT when neither the spec nor a context names one."""
        resource_id = parse_resource_id("the-page.adoc", None, "page")
        assert resource_id.module == "ROOT"
        assert resource_id.component is None

    def test_underscore_version_is_versionless(self, context):
        resource_id = parse_resource_id("_@the-other-component::index.adoc", context, "page")
        assert resource_id.version == ""

    def test_family_overrides_default(self, context):
        """family$ takes precedence over the default family."""
        resource_id = parse_resource_id("partial$the-partial.adoc", context, "page")
        assert resource_id.family == "partial"
        assert resource_id.relative == "the-partial.adoc"

    def test_family_with_module(self, context):
        resource_id = parse_resource_id("module-b:image$logo.png", context)
        assert resource_id.module == "module-b"
        assert resource_id.family == "image"

    def test_missing_family_without_default_raises(self, context):
        with pytest.raises(ParseError):
            parse_resource_id("the-page.adoc", context)

    def test_family_not_permitted_raises(self, context):
        with pytest.raises(ParseError) as exc_info:
            parse_resource_id("image$logo.png", context, "page", ["page"])
        assert "not permitted" in exc_info.value.message

    def test_double_at_keeps_at_in_relative(self, context):
        """Only the first @ separates the version."""
        resource_id = parse_resource_id("1.0@@foo.adoc", context, "page")
        assert resource_id.version == "1.0"
        assert resource_id.relative == "@foo.adoc"

    def test_leading_at_is_part_of_relative(self, context):
        resource_id = parse_resource_id("@foo.adoc", context, "page")
        assert resource_id.version == "1.0"
        assert resource_id.relative == "@foo.adoc"

    def test_fragment_is_split_off(self, context):
        resource_id = parse_resource_id("the-page.adoc#install", context, "page")
        assert resource_id.relative == "the-page.adoc"
        assert resource_id.fragment == "#install"

    @pytest.mark.parametrize(
        "spec",
        ["", "   ", "the-component::", "partial$", "module-a:partial$$", ":$foo", "module-a:"],
    )
    def test_invalid_syntax_raises(self, context, spec):
        """Specs that do not match the resource ID syntax are rejected."""
        with pytest.raises(ParseError):
            parse_resource_id(spec, context, "page")

    def test_parse_error_is_value_error_with_json(self, context):
        with pytest.raises(ValueError) as exc_info:
            parse_resource_id("the-component::", context, "page")
        error = exc_info.value
        assert error.to_json()["error"] == "invalid_syntax"
        assert error.to_json()["spec"] == "the-component::"
        assert error.reason == error.message


class TestResourceIdToString:
    """Tests for resource_id_to_string."""

    def test_fully_qualified_form(self):
        resource_id = ResourceId("the-component", "1.0", "module-a", "page", "the-topic/the-page.adoc")
        assert resource_id_to_string(resource_id) == "1.0@the-component:module-a:page$the-topic/the-page.adoc"

    def test_versionless_uses_underscore(self):
        resource_id = ResourceId("the-component", "", "ROOT", "page", "index.adoc")
        assert resource_id_to_string(resource_id) == "_@the-component:ROOT:page$index.adoc"

    def test_shorthand_drops_root_module_and_page_family(self):
        resource_id = ResourceId("the-component", "1.0", "ROOT", "page", "index.adoc")
        assert resource_id_to_string(resource_id, shorthand=True) == "1.0@the-component::index.adoc"

    @pytest.mark.parametrize(
        "resource_id",
        [
            ResourceId("the-component", "1.0", "ROOT", "page", "index.adoc"),
            ResourceId("the-component", "", "module-a", "partial", "the-topic/note.adoc"),
            ResourceId("other", "2.0", "module-b", "image", "logo.png", "#frag"),
        ],
    )
    def test_round_trip_is_independent_of_context(self, context, resource_id):
        """A fully qualified spec parses back to the same ID in any context."""
        spec = resource_id_to_string(resource_id)
        assert parse_resource_id(spec, context) == resource_id
        assert parse_resource_id(spec, None) == resource_id


class TestSplitFragment:
    """Tests for split_fragment."""

    def test_no_fragment(self):
        assert split_fragment("the-page.adoc") == ("the-page.adoc", "")

    def test_splits_at_first_hash(self):
        assert split_fragment("the-page.adoc#a#b") == ("the-page.adoc", "#a#b")

    def test_fragment_only(self):
        assert split_fragment("#section") == ("", "#section")
