# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for histver.

Example:
    Update the default table (./versions.csv):
        ```bash
        $ histver
        ```

    Use another table and a config file:
        ```bash
        $ histver --file docs/versions.csv --config histver.yaml
        ```

    Enable verbose output:
        ```bash
        $ histver --verbose
        ```

Exit Codes:

- 0: Success (including runs where some releases failed)
- 1: Fatal error (configuration, table read/write, release listing)

Note:
    The CLI uses argparse for command parsing. Verbose mode shows full
    tracebacks on errors for debugging. Debug mode implies verbose mode.

"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

from histver import __version__
from histver.config import load_config
from histver.core import sync_versions
from histver.exceptions import (
    ConfigError,
    HistverError,
    NetworkError,
    TableError,
)
from histver.logging import get_logger, set_global_logger


def cmd_sync(args: argparse.Namespace) -> int:
    """Handler for the sync run.

    Args:
        args: Parsed command-line arguments containing the table path,
            optional config path and verbosity flags.

    Returns:
        Exit code (0 for success, 1 for fatal failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    table_path = Path(args.file)

    try:
        settings = load_config(Path(args.config) if args.config else None)
        print(f"Updating versions table: {table_path.resolve()}")
        print(f"Repository: {settings.repo}")
        print()
        result = sync_versions(table_path, settings)
    except (ConfigError, NetworkError, TableError) as err:
        print(f"Error: {err}")
        if args.verbose or args.debug:
            import traceback

            traceback.print_exc()
        return 1
    except HistverError as err:
        # Catch any other histver errors we might have missed
        print(f"Error: {err}")
        if args.verbose or args.debug:
            import traceback

            traceback.print_exc()
        return 1

    print("=" * 70)
    print("SYNC RESULTS")
    print("=" * 70)
    print(f"Table:           {result.table_path}")
    print(f"Rows:            {result.total_rows}")
    print(f"Added:           {len(result.added)}")
    print(f"Already known:   {len(result.skipped)}")
    print(f"Failed:          {len(result.failed)}")
    print("=" * 70)

    if result.added:
        print()
        for record in result.added:
            print(f"  [+] {record.version}  {record.runtime or '-'}  {record.date}")

    if result.failed:
        print()
        print(f"Failures ({len(result.failed)}, retried on next run):")
        for failure in result.failed:
            print(f"  [X] {failure.tag_name}: {failure.error}")

    print()
    print("[SUCCESS] Versions table updated!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="histver",
        description=(
            "Maintain a table of release versions, the runtime that built "
            "them and their release dates."
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"histver {__version__}",
    )
    parser.add_argument(
        "--file",
        default="versions.csv",
        help="Path to versions CSV file (default: versions.csv)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML file overriding the built-in settings",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    parser.set_defaults(func=cmd_sync)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the histver CLI.

    This function is registered as the 'histver' console script in
    pyproject.toml.
    """
    args = build_parser().parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
