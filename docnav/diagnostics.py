"""Collect diagnostics reported while resolving references.

Resolution never raises for broken references. Instead, problems are
recorded on a Diagnostics object that the caller passes in, and each record
is forwarded to a logger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional

INVALID_SYNTAX = "invalid_syntax"
NOT_FOUND = "not_found"
TRAVERSAL_ANOMALY = "traversal_anomaly"

LOG_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
}


@dataclass
class Diagnostic:
    """A single reported problem."""

    level: str
    code: str
    message: str
    spec: Optional[str] = None
    file: Optional[str] = None

    def to_json(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "level": self.level,
            "code": self.code,
            "message": self.message,
        }
        if self.spec is not None:
            result["spec"] = self.spec
        if self.file:
            result["file"] = self.file
        return result


class Diagnostics:
    """Records diagnostics and forwards them to a logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("docnav")
        self.records: list[Diagnostic] = []

    def report(
        self,
        level: str,
        code: str,
        message: str,
        spec: Optional[str] = None,
        file: Optional[str] = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(level=level, code=code, message=message, spec=spec, file=file)
        self.records.append(diagnostic)
        log_message = f"{message} | file: {file}" if file else message
        self.logger.log(LOG_LEVELS.get(level, logging.WARNING), log_message)
        return diagnostic

    def invalid_syntax(self, kind: str, spec: str, file: Optional[str] = None) -> Diagnostic:
        return self.report("error", INVALID_SYNTAX, f"invalid syntax in target of {kind}: {spec}", spec, file)

    def not_found(self, kind: str, spec: str, file: Optional[str] = None) -> Diagnostic:
        return self.report("error", NOT_FOUND, f"target of {kind} not found: {spec}", spec, file)

    def traversal_anomaly(
        self, message: str, spec: Optional[str] = None, file: Optional[str] = None
    ) -> Diagnostic:
        return self.report("warning", TRAVERSAL_ANOMALY, message, spec, file)

    def by_code(self, code: str) -> list[Diagnostic]:
        return [record for record in self.records if record.code == code]

    @property
    def has_errors(self) -> bool:
        return any(record.level == "error" for record in self.records)

    @property
    def count(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.records)

    def to_json(self) -> list[dict[str, Any]]:
        return [record.to_json() for record in self.records]
