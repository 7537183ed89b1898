"""Command line entry point.

Reads TypeSpecs from YAML (or JSON) files and writes one module per type.

A spec file holds a single mapping, a list of mappings, or a mapping with a
``types`` list.
"""
import argparse
import sys
from pathlib import Path
from typing import Any

import yaml

from hardtype.core.config import PrerequisitePolicy, get_settings
from hardtype.core.errors import DiagnosticSet
from hardtype.core.logging import configure_logging, get_logger
from hardtype.generator import generate_all

log = get_logger(__name__)

C_RESET = "\033[0m"
C_RED = "\033[91m"
C_GREEN = "\033[92m"
C_YELLOW = "\033[93m"
C_DIM = "\033[2m"


def read_specs(path: Path) -> list[dict[str, Any]]:
    """Load the raw spec mappings of one file."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return []
    if isinstance(data, dict) and "types" in data:
        data = data["types"]
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return data
    raise ValueError(f"{path}: expected a mapping or a list of mappings")


def print_diagnostics(diagnostics: DiagnosticSet) -> None:
    for d in diagnostics:
        print(f"{C_RED}✗ {d}{C_RESET}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="hardtype",
        description="Generate smart type modules from TypeSpec files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hardtype types.yaml -o src/app/types          # write modules
  hardtype types.yaml -o src/app/types --check  # fail if modules are stale
  hardtype types.yaml --policy auto             # add missing prerequisites
        """,
    )
    parser.add_argument("files", nargs="+", type=Path, help="TypeSpec files (YAML or JSON)")
    parser.add_argument("-o", "--out", type=Path, default=Path("."), help="Output directory (default: .)")
    parser.add_argument("--check", action="store_true", help="Only verify that written modules are up to date")
    parser.add_argument(
        "--policy",
        choices=[p.value for p in PrerequisitePolicy],
        help="Prerequisite policy (default: HARDTYPE_PREREQUISITE_POLICY)",
    )
    parser.add_argument("--no-header", action="store_true", help="Omit the generated-file header comment")

    args = parser.parse_args(argv)

    settings = get_settings()
    overrides: dict[str, Any] = {}
    if args.policy:
        overrides["PREREQUISITE_POLICY"] = PrerequisitePolicy(args.policy)
    if args.no_header:
        overrides["EMIT_HEADER"] = False
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    raw: list[dict[str, Any]] = []
    for path in args.files:
        try:
            raw += read_specs(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            print(f"{C_RED}✗ {e}{C_RESET}", file=sys.stderr)
            return 2

    result = generate_all(raw, settings=settings)
    if result.is_err():
        print_diagnostics(result.unwrap_err())
        return 1

    stale = 0
    for artifact in result.unwrap():
        target = args.out / artifact.filename
        if args.check:
            current = target.read_text(encoding="utf-8") if target.exists() else None
            if current != artifact.source:
                stale += 1
                print(f"{C_YELLOW}⚠ {target} is out of date{C_RESET}")
            continue
        written = artifact.write_to(args.out)
        print(f"{C_GREEN}✓{C_RESET} {artifact.type_name} {C_DIM}→ {written}{C_RESET}")

    if stale:
        log.warning("stale_modules", count=stale)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
