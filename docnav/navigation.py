"""Navigation trees and the position of a page within them.

A component version has a list of navigation trees. The trees are read in
order, depth first, as one continuous reading sequence: a page's previous
and next links are the nearest internal links before and after its entry
in that sequence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from docnav.content_catalog import ComponentVersion
from docnav.utils.url_utils import strip_hash


@dataclass(eq=False)
class NavigationNode:
    """An entry in a navigation tree.

    Nodes compare by identity: two entries with the same text and URL are
    still distinct positions in the tree.
    """

    content: Optional[str] = None
    url: Optional[str] = None
    url_type: Optional[str] = None  # "internal", "external", "fragment"
    hash: Optional[str] = None
    items: list[NavigationNode] = field(default_factory=list)
    root: bool = False
    order: Optional[int] = None
    discrete: bool = False

    @property
    def url_without_hash(self) -> Optional[str]:
        if self.url is None:
            return None
        return strip_hash(self.url, self.hash)

    @property
    def is_link(self) -> bool:
        """Whether this node links to a page of the site."""
        return self.url_type == "internal" and self.url is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NavigationNode":
        return cls(
            content=data.get("content"),
            url=data.get("url"),
            url_type=data.get("url_type", data.get("urlType")),
            hash=data.get("hash"),
            items=[cls.from_dict(item) for item in data.get("items") or []],
            root=bool(data.get("root", False)),
            order=data.get("order"),
            discrete=bool(data.get("discrete", False)),
        )

    def to_dict(self, include_items: bool = True) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name in ("content", "url", "url_type", "hash", "order"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.root:
            result["root"] = True
        if self.discrete:
            result["discrete"] = True
        if include_items and self.items:
            result["items"] = [item.to_dict() for item in self.items]
        return result


class NavigationCatalog:
    """Navigation trees for each component version."""

    def __init__(self):
        self._trees: dict[tuple[str, str], list[NavigationNode]] = {}

    def add_navigation(self, component: str, version: str, trees: list) -> list[NavigationNode]:
        nodes = [tree if isinstance(tree, NavigationNode) else NavigationNode.from_dict(tree) for tree in trees]
        for order, node in enumerate(nodes):
            node.root = True
            if node.order is None:
                node.order = order
        self._trees.setdefault((component, version), []).extend(nodes)
        return nodes

    def get_navigation(self, component: str, version: str) -> list[NavigationNode]:
        return self._trees.get((component, version), [])


@dataclass
class NavLocation:
    """Where a page sits in the reading order of a navigation forest."""

    current: Optional[NavigationNode] = None
    ancestors: list[NavigationNode] = field(default_factory=list)
    previous: Optional[NavigationNode] = None
    next: Optional[NavigationNode] = None


@dataclass
class NavContext:
    """Navigation links shown on a page."""

    breadcrumbs: list[NavigationNode] = field(default_factory=list)
    parent: Optional[NavigationNode] = None
    previous: Optional[NavigationNode] = None
    next: Optional[NavigationNode] = None


def walk(
    nodes: list[NavigationNode], ancestors: tuple[NavigationNode, ...] = ()
) -> Iterator[tuple[NavigationNode, tuple[NavigationNode, ...]]]:
    """Yield (node, ancestors) pairs in reading order (depth first, pre-order)."""
    for node in nodes:
        yield node, ancestors
        if node.items:
            yield from walk(node.items, ancestors + (node,))


def find_nav_location(url: str, trees: list[NavigationNode]) -> NavLocation:
    """Find the first entry for url and its neighbors in reading order.

    Entries are matched on their URL without the hash. Only internal links
    count as neighbors. A previous candidate is not replaced by a hashed
    entry to the same page, and next skips entries to the current page.
    """
    location = NavLocation()
    previous: Optional[NavigationNode] = None
    for node, ancestors in walk(trees):
        if not node.is_link:
            continue
        node_url = node.url_without_hash
        if location.current is None:
            if node_url == url:
                location.current = node
                location.ancestors = list(ancestors)
                location.previous = previous
            elif not (node.hash and previous is not None and previous.url_without_hash == node_url):
                previous = node
        elif node_url != url:
            location.next = node
            break
    return location


def build_nav_context(
    page_url: str,
    title: Optional[str],
    trees: list[NavigationNode],
    component_version: Optional[ComponentVersion] = None,
) -> NavContext:
    """Compute breadcrumbs, parent, previous and next for a page.

    Args:
        page_url: Published URL of the page
        title: Page title, used for the breadcrumb of an unlisted page
        trees: Navigation trees of the page's component version
        component_version: The page's component version

    Returns:
        NavContext (empty when the component version has no navigation).
    """
    context = NavContext()
    if not trees:
        return context
    landing_url = component_version.url if component_version else None
    location = find_nav_location(page_url, trees)

    if location.current is None:
        if title:
            context.breadcrumbs = [
                NavigationNode(content=title, url=page_url, url_type="internal", discrete=True)
            ]
        if landing_url is not None and page_url == landing_url:
            context.next = next(
                (node for node, _ in walk(trees) if node.is_link and node.url_without_hash != page_url),
                None,
            )
        return context

    titled_ancestors = [node for node in location.ancestors if node.content is not None]
    context.breadcrumbs = titled_ancestors + [location.current]
    context.parent = next((node for node in reversed(titled_ancestors) if node.is_link), None)
    context.previous = location.previous
    context.next = location.next
    if context.previous is None and landing_url is not None and page_url != landing_url:
        context.previous = NavigationNode(
            content=component_version.title,
            url=landing_url,
            url_type="internal",
            discrete=True,
        )
    return context
