"""Check that the cross references listed in a corpus resolve."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TypedDict

from docnav.converter import convert_page_ref
from docnav.manifest import Corpus


class CheckResult(TypedDict):
    """Result of checking a single reference."""

    ref: str
    target: str
    status: str  # "RESOLVED" or "UNRESOLVED"


class CheckReport(TypedDict):
    """Full check report."""

    checked: str
    total_checked: int
    resolved: int
    unresolved: int
    pages: dict[str, list[CheckResult]]


def check_references(corpus: Corpus) -> CheckReport:
    """Resolve every pending reference of a corpus.

    Unresolved references are also reported to ``corpus.diagnostics``.

    Args:
        corpus: Corpus loaded from a manifest

    Returns:
        Check report grouped by referencing page.
    """
    report_pages: dict[str, list[CheckResult]] = {}
    resolved_count = 0
    unresolved_count = 0

    for pending in corpus.pending_refs:
        result = convert_page_ref(
            pending.spec,
            pending.content,
            pending.page,
            corpus.catalog,
            diagnostics=corpus.diagnostics,
        )
        if result.unresolved:
            status = "UNRESOLVED"
            unresolved_count += 1
        else:
            status = "RESOLVED"
            resolved_count += 1
        report_pages.setdefault(pending.page.location, []).append({
            "ref": pending.spec,
            "target": result.target,
            "status": status,
        })

    return {
        "checked": datetime.now(timezone.utc).isoformat(),
        "total_checked": resolved_count + unresolved_count,
        "resolved": resolved_count,
        "unresolved": unresolved_count,
        "pages": report_pages,
    }


def print_report(report: CheckReport) -> None:
    """Print check report to stdout."""
    print("\n=== Reference Check Report ===")
    print(f"Checked: {report['checked']}")
    print(f"Total references: {report['total_checked']}")
    print(f"Resolved: {report['resolved']}")
    print(f"Unresolved: {report['unresolved']}")

    if report["unresolved"] > 0:
        print("\n--- Unresolved References ---")
        for page_path, results in report["pages"].items():
            unresolved = [r for r in results if r["status"] == "UNRESOLVED"]
            if unresolved:
                print(f"\n{page_path}:")
                for r in unresolved:
                    print(f"  - {r['ref']}")
