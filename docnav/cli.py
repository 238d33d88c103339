"""Command-line interface for docnav."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from enum import IntEnum
from pathlib import Path
from typing import Optional

from docnav.checker import check_references, print_report
from docnav.config import DEFAULT_CONFIG_PATH, DocnavConfig, load_config
from docnav.content_catalog import CatalogEntry
from docnav.converter import convert_reference
from docnav.errors import ConfigError, DocnavError, ManifestError
from docnav.manifest import Corpus, load_manifest
from docnav.page_model import build_page_model, build_site_model


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1
    FILE_SYSTEM_ERROR = 2
    PARTIAL_SUCCESS = 3


def _configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _get_config(config_path: Optional[str]) -> DocnavConfig:
    """Load config from path or use defaults.

    Search order:
    1. Explicit --config path
    2. docnav.yml in the current directory
    3. Built-in defaults
    """
    if config_path:
        if not Path(config_path).exists():
            raise ConfigError(
                f"Config file not found: {config_path}",
                file=config_path,
                error_type="file_missing",
            )
        return load_config(config_path)
    return load_config(Path.cwd() / DEFAULT_CONFIG_PATH)


def _load_corpus(args: argparse.Namespace) -> tuple[DocnavConfig, Corpus]:
    config = _get_config(args.config)
    manifest_path = args.manifest or config.manifest
    return config, load_manifest(manifest_path, config)


def _report_error(error: DocnavError) -> int:
    print(json.dumps(error.to_json()), file=sys.stderr)
    if isinstance(error, ConfigError):
        return ExitCode.CONFIG_ERROR
    if error.error_type == "file_missing":
        return ExitCode.FILE_SYSTEM_ERROR
    return ExitCode.CONFIG_ERROR


def _find_page(corpus: Corpus, page_spec: str) -> CatalogEntry:
    """Look up the page a command operates on.

    Raises:
        ParseError: If page_spec is not a valid page ID.
        ManifestError: If no such page is in the catalog.
    """
    page = corpus.catalog.resolve_page(page_spec)
    if page is not None and page.is_alias:
        page = corpus.catalog.follow_alias(page)
    if page is None:
        raise ManifestError(f"Page not found: {page_spec}", error_type="page_not_found")
    return page


def cmd_resolve(args: argparse.Namespace) -> int:
    """Resolve a reference from a page and print the result as JSON."""
    try:
        _config, corpus = _load_corpus(args)
        page = _find_page(corpus, args.from_page)
    except DocnavError as e:
        return _report_error(e)

    result = convert_reference(
        args.spec,
        args.content,
        page,
        corpus.catalog,
        relativize=not args.absolute,
        default_family=args.family,
        diagnostics=corpus.diagnostics,
    )
    print(json.dumps(result.to_dict(), indent=2))
    if result.unresolved:
        return ExitCode.PARTIAL_SUCCESS
    return ExitCode.SUCCESS


def cmd_model(args: argparse.Namespace) -> int:
    """Build the page model of a page and print it as JSON."""
    try:
        config, corpus = _load_corpus(args)
        page = _find_page(corpus, args.page)
    except DocnavError as e:
        return _report_error(e)

    site = build_site_model(config, corpus.catalog)
    model = build_page_model(site, page, corpus.catalog, corpus.navigation, corpus.diagnostics)
    print(json.dumps({"site": site.to_dict(), "page": model.to_dict()}, indent=2))
    return ExitCode.SUCCESS


def cmd_check(args: argparse.Namespace) -> int:
    """Check every cross reference listed in the manifest."""
    try:
        _config, corpus = _load_corpus(args)
    except DocnavError as e:
        return _report_error(e)

    print("Checking references...")
    report = check_references(corpus)
    print_report(report)

    if getattr(args, "json", False):
        print(json.dumps(corpus.diagnostics.to_json(), indent=2))

    if report["unresolved"] > 0:
        return ExitCode.PARTIAL_SUCCESS
    return ExitCode.SUCCESS


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add --config and --manifest arguments to a parser."""
    parser.add_argument(
        "--config",
        "-c",
        help=f"Path to config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--manifest",
        "-m",
        help="Path to corpus manifest (default: from config)",
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="docnav",
        description="Resolve documentation references and build page navigation models",
    )
    parser.add_argument("--verbose", "-v", action="count", default=0, help="Increase log verbosity")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only log errors")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # resolve command
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve a reference from a page",
    )
    _add_common_args(resolve_parser)
    resolve_parser.add_argument("spec", help="Resource ID spec, e.g. 2.0@comp:mod:page.adoc#section")
    resolve_parser.add_argument(
        "--from",
        dest="from_page",
        required=True,
        help="Fully qualified ID of the referencing page",
    )
    resolve_parser.add_argument("--family", default="page", help="Default family (default: page)")
    resolve_parser.add_argument("--content", help="Explicit link text")
    resolve_parser.add_argument(
        "--absolute",
        action="store_true",
        help="Print the root-relative published URL instead of a relative one",
    )

    # model command
    model_parser = subparsers.add_parser(
        "model",
        help="Print the page model of a page",
    )
    _add_common_args(model_parser)
    model_parser.add_argument("page", help="Fully qualified page ID, e.g. 2.0@comp::index.adoc")

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Check cross references listed in the manifest",
    )
    _add_common_args(check_parser)
    check_parser.add_argument("--json", action="store_true", help="Also print diagnostics as JSON")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    commands = {
        "resolve": cmd_resolve,
        "model": cmd_model,
        "check": cmd_check,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
