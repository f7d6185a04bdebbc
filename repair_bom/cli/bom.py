"""Command line for the BOM catalog and consumption checks."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from ..database import ensure_schema, new_session, reset_engine
from ..domain.bom_validation import CatalogUnavailableError
from ..logging_setup import configure_logging
from ..services import import_bom_catalog, seed_sample_bom, validate_bom_components


def _cmd_import(args: argparse.Namespace) -> int:
    path = Path(args.file).expanduser()
    if not path.is_file():
        print(f"error: File not found: {args.file}", file=sys.stderr)
        return 1
    data = path.read_bytes()
    with new_session() as session:
        report = import_bom_catalog(data, session)
    print(
        f"Imported {report.inserted} BOM entries from {args.file} "
        f"({report.skipped} already present)"
    )
    for err in report.errors:
        print(f"  {err}", file=sys.stderr)
    return 1 if report.errors and report.total == 0 else 0


def _cmd_seed(args: argparse.Namespace) -> int:
    with new_session() as session:
        added = seed_sample_bom(session)
    print(f"Sample BOM data ready ({added} new entries)")
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    with new_session() as session:
        result = validate_bom_components(session, args.text, args.part_code)
    if result.formatted_components:
        print(result.formatted_components)
    if not result.is_valid:
        print(result.error_message, file=sys.stderr)
        return 2
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repair-bom",
        description="Manage the BOM catalog and check component consumption.",
    )
    parser.add_argument("--db", help="SQLAlchemy database URL (overrides settings.toml).")
    parser.add_argument("--log-level", help="Logging level, e.g. DEBUG.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_import = sub.add_parser("import", help="Import a CSV, JSON or XLSX BOM catalog.")
    p_import.add_argument("file", help="Path to the BOM file.")
    p_import.set_defaults(func=_cmd_import)

    p_seed = sub.add_parser("seed-sample", help="Insert the sample BOM catalog.")
    p_seed.set_defaults(func=_cmd_seed)

    p_validate = sub.add_parser("validate", help="Validate a component-change text.")
    p_validate.add_argument("text", help='Components, e.g. "971040@R1/C12".')
    p_validate.add_argument("--part-code", help="Part code of the board under repair.")
    p_validate.set_defaults(func=_cmd_validate)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    if args.db:
        reset_engine(args.db)
    try:
        ensure_schema()
        return args.func(args)
    except CatalogUnavailableError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
