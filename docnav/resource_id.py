"""Parse and format resource ID specs.

A resource ID spec addresses a file in the content catalog:

    [<version>@][<component>:[<module>:]|<component>::|<module>:][<family>$]<relative>[#<fragment>]

Coordinates that are not given in the spec are filled from a context ID
(usually the ID of the referencing document).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace as dataclass_replace
from typing import Iterable, Optional

from docnav.errors import ParseError

ROOT_MODULE = "ROOT"

# Spelling of the versionless version in a spec
VERSIONLESS = "_"

RESOURCE_ID_PATTERN = re.compile(
    r"^(?:(?P<version>[^@:$\s]+)@)?"
    r"(?:(?:(?P<component>[^@:$\s]+):)?(?P<module>[^@:$\s]*):)?"
    r"(?:(?P<family>[^@:$\s]+)\$)?"
    r"(?P<relative>[^:$\s][^:$]*)$"
)


@dataclass(frozen=True)
class ResourceId:
    """Coordinates of a resource in the content catalog.

    ``version`` is None when a spec names a component but no version; the
    catalog substitutes the latest version of that component at lookup.
    An empty ``version`` is a versionless component version.
    """

    component: Optional[str]
    version: Optional[str]
    module: Optional[str]
    family: str
    relative: str
    fragment: str = ""

    def key(self) -> tuple:
        """Lookup key (coordinates without the fragment)."""
        return (self.component, self.version, self.module, self.family, self.relative)

    def replace(self, **changes) -> "ResourceId":
        return dataclass_replace(self, **changes)

    def __str__(self) -> str:
        return resource_id_to_string(self)


def split_fragment(spec: str) -> tuple[str, str]:
    """Split a spec at the first ``#``; the fragment keeps its ``#``."""
    hash_idx = spec.find("#")
    if hash_idx < 0:
        return spec, ""
    return spec[:hash_idx], spec[hash_idx:]


def parse_resource_id(
    spec: str,
    context: Optional[ResourceId] = None,
    default_family: Optional[str] = None,
    permitted_families: Optional[Iterable[str]] = None,
) -> ResourceId:
    """Parse a resource ID spec into a ResourceId.

    Args:
        spec: Resource ID spec, optionally followed by ``#fragment``
        context: ID used to fill in omitted component, version and module
        default_family: Family used when the spec has no ``family$`` segment
        permitted_families: Families the spec may reference (any if None)

    Returns:
        The parsed ResourceId.

    Raises:
        ParseError: If the spec does not match the resource ID syntax, names
            no family and no default is given, or names a family that is
            not permitted.
    """
    id_spec, fragment = split_fragment(spec)
    match = RESOURCE_ID_PATTERN.match(id_spec)
    if not match:
        raise ParseError(f"Invalid resource ID syntax: {spec}", spec=spec)

    version = match.group("version")
    component = match.group("component")
    module = match.group("module")
    family = match.group("family")
    relative = match.group("relative")

    if family:
        if permitted_families is not None and family not in permitted_families:
            raise ParseError(f"Resource ID references family that is not permitted: {family}", spec=spec)
    elif default_family:
        family = default_family
    else:
        raise ParseError(f"Resource ID does not specify a family: {spec}", spec=spec)

    if component:
        # version stays None (latest) when the spec names a component without one
        module = module or ROOT_MODULE
    else:
        if context is not None:
            component = context.component
            if version is None:
                version = context.version
            if module is None:
                module = context.module
        module = module or ROOT_MODULE

    if version == VERSIONLESS:
        version = ""

    return ResourceId(
        component=component,
        version=version,
        module=module,
        family=family,
        relative=relative,
        fragment=fragment,
    )


def resource_id_to_string(resource_id: ResourceId, shorthand: bool = False) -> str:
    """Format a ResourceId as a spec.

    The full form names every coordinate so it parses back to the same ID
    without any context. The shorthand form drops the ROOT module and the
    page/alias family, for use in messages.
    """
    parts = []
    if resource_id.version is not None:
        parts.append(f"{resource_id.version or VERSIONLESS}@")
    if resource_id.component is not None:
        module = resource_id.module or ""
        if shorthand and module == ROOT_MODULE:
            module = ""
        parts.append(f"{resource_id.component}:{module}:")
    elif resource_id.module:
        parts.append(f"{resource_id.module}:")
    if not (shorthand and resource_id.family in ("page", "alias")):
        parts.append(f"{resource_id.family}$")
    parts.append(resource_id.relative)
    parts.append(resource_id.fragment)
    return "".join(parts)
