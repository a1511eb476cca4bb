#!/usr/bin/env python3
"""
Check @contract decorated functions in Python files.

Usage:
    nullpact myfile.py
    nullpact myfile.py --check-contracts
    nullpact myfile.py other.py --check-contracts --json reports/
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from nullpact.core.config import CheckerConfig
from nullpact.verify import check_file


def _json_path(target: str, file_path: str, multiple: bool) -> str:
    if not multiple:
        return target
    return os.path.join(target, f"{Path(file_path).stem}.nullpact.json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nullpact",
        description="Check @contract decorated functions in Python files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Validate contract annotations only
    nullpact examples/contract_functions.py

    # Also check function bodies against "!null -> !null" style contracts
    nullpact examples/contract_functions.py --check-contracts

    # Treat @ensures_non_null(...) as a contract decorator too
    nullpact src/module.py --contract-annotation ensures_non_null

    # Settings from the environment
    export NULLPACT_CHECK_CONTRACTS=1
    nullpact examples/contract_functions.py --verbose
        """
    )

    parser.add_argument("files", nargs="+", help="Python file(s) to check")
    parser.add_argument("--check-contracts", action="store_true", default=None,
                        help="Check function bodies against their contracts "
                             "(or set NULLPACT_CHECK_CONTRACTS)")
    parser.add_argument("--contract-annotation", action="append", default=None, metavar="NAME",
                        help="Additional decorator name treated as a contract (repeatable)")
    parser.add_argument("--json", dest="json_output", metavar="PATH",
                        help="Write a JSON report (a directory when checking several files)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    # Check files exist
    missing = [f for f in args.files if not Path(f).exists()]
    if missing:
        for f in missing:
            print(f"❌ Error: File not found: {f}")
        return 2

    config = CheckerConfig.from_env().with_overrides(
        check_contracts=args.check_contracts,
        contract_annotations=args.contract_annotation
    )

    multiple = len(args.files) > 1
    failed = 0
    for file_path in args.files:
        json_output = _json_path(args.json_output, file_path, multiple) if args.json_output else None
        try:
            summary = check_file(file_path, config, verbose=args.verbose, json_output=json_output)
        except SyntaxError as e:
            print(f"❌ Error: Could not parse {file_path}: {e}")
            failed += 1
            continue

        summary.print_summary()
        failed += summary.failed

    # Exit with appropriate code
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
