"""Error classes shared across docnav modules.

Every error carries a machine-readable ``error_type`` and can be serialized
with ``to_json()`` so the CLI can report it on stderr.
"""

from __future__ import annotations

from typing import Any, Optional


class DocnavError(Exception):
    """Base error for docnav.

    Attributes:
        message: Human-readable error description.
        file: Path to the file that caused the error.
        line: Line number where the error was detected.
        error_type: Machine-readable error category.
    """

    default_error_type = "docnav_error"

    def __init__(
        self,
        message: str,
        file: Optional[str] = None,
        line: Optional[int] = None,
        error_type: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.file = file
        self.line = line
        self.error_type = error_type or self.default_error_type

    def to_json(self) -> dict[str, Any]:
        """Serialize error to JSON format for machine parsing."""
        result: dict[str, Any] = {
            "error": self.error_type,
            "message": self.message,
        }
        if self.file:
            result["file"] = self.file
        if self.line:
            result["line"] = self.line
        return result

    def __str__(self) -> str:
        parts = [self.message]
        if self.file:
            parts.append(f"file: {self.file}")
        if self.line:
            parts.append(f"line: {self.line}")
        return " | ".join(parts)


class ParseError(DocnavError, ValueError):
    """A resource ID spec does not match the resource ID syntax."""

    default_error_type = "invalid_syntax"

    def __init__(self, message: str, spec: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.spec = spec
        self.reason = message

    def to_json(self) -> dict[str, Any]:
        result = super().to_json()
        if self.spec is not None:
            result["spec"] = self.spec
        return result


class CatalogError(DocnavError):
    """Content catalog cannot accept an entry (duplicate, bad alias)."""

    default_error_type = "catalog_invalid"


class ConfigError(DocnavError):
    """Error in docnav configuration."""

    default_error_type = "config_invalid"


class ManifestError(DocnavError):
    """Error in a corpus manifest."""

    default_error_type = "manifest_invalid"
