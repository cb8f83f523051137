#!/usr/bin/env python3
"""rectify - run configured external formatters over files.

Usage:
    # Format files in place using the pipeline configured for their language
    python -m rectify src/app.php resources/js/app.js

    # Print the formatted text instead of writing it
    python -m rectify --stdout src/app.php

    # Report files that would change
    python -m rectify --check src/*.php

    # Show which tools are known and where they resolve
    python -m rectify --list-tools
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .controller import FormatController, FormatStatus, notify_outcome, read_document
from .errors import ConfigError, RectifyError
from .reporting import ERROR, ConsoleReporter
from .resolver import search_path_dirs

EXIT_OK = 0
EXIT_NO_SUCCESS = 1
EXIT_USAGE = 2
EXIT_UNREADABLE = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rectify",
        description="Run configured external formatters over files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration (.rectify.json in the project root or home directory):
  {"formatters": {"php": {"formatters": ["pint", "phpcbf"], "stop_after_first": true}}}

Exit codes:
  0  formatted or already formatted
  1  no formatter succeeded (or --check found changes)
  2  usage or configuration error
  3  formatted result could not be written or read back
        """,
    )
    parser.add_argument("files", nargs="*", metavar="FILE", help="Files to format")
    parser.add_argument(
        "--language", "-l",
        help="Language identifier to use instead of guessing from the extension",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the formatted text of a single file instead of writing it",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report files that would change without writing them",
    )
    parser.add_argument(
        "--config", "-c",
        metavar="PATH",
        help="Configuration file (default: search project root, then home)",
    )
    parser.add_argument(
        "--project-root",
        metavar="DIR",
        help="Project root (default: nearest directory with a project marker)",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Kill a formatter that runs longer than this",
    )
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="List known formatters and where their executables resolve",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show formatter commands, exit statuses and output",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser


def list_tools(controller: FormatController, console: Console) -> int:
    root = controller.project_root or os.getcwd()
    table = Table(title="Formatters")
    table.add_column("Identifier", style="bold")
    table.add_column("Executable")
    table.add_column("Mode")
    table.add_column("Resolved path")
    for entry in controller.registry.describe(search_path_dirs(), root):
        table.add_row(
            entry["identifier"],
            entry["executable"],
            entry["input_mode"],
            entry["path"] or "[dim]not found[/dim]",
        )
    console.print(table)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    load_dotenv(args.env_file)

    controller = FormatController(
        project_root=args.project_root,
        config_path=args.config,
        timeout=args.timeout,
        debug=args.debug,
    )
    console = Console()
    reporter = ConsoleReporter(debug=args.debug)

    if args.list_tools:
        return list_tools(controller, console)

    if not args.files:
        parser.error("no files given")
    if args.stdout and len(args.files) != 1:
        parser.error("--stdout takes exactly one file")

    exit_code = EXIT_OK
    for path in args.files:
        try:
            outcome = controller.format_file(
                path,
                language_id=args.language,
                write=not (args.check or args.stdout),
            )
            echo = outcome.text
            if args.stdout and echo is None and outcome.status is not FormatStatus.NO_SUCCESS:
                # Unformatted files are echoed unchanged
                echo = read_document(path)
        except ConfigError as e:
            reporter.notice(str(e), level=ERROR)
            return EXIT_USAGE
        except (RectifyError, OSError) as e:
            reporter.notice(f"{path}: {e}", level=ERROR)
            exit_code = max(exit_code, EXIT_UNREADABLE)
            continue

        notify_outcome(reporter, path, outcome)
        if outcome.status is FormatStatus.NO_SUCCESS:
            exit_code = max(exit_code, EXIT_NO_SUCCESS)
        elif args.stdout:
            sys.stdout.write(echo)
        elif args.check and outcome.changed:
            console.print(f"would reformat {escape(path)}")
            exit_code = max(exit_code, EXIT_NO_SUCCESS)
        elif outcome.changed:
            console.print(f"reformatted {escape(path)} [dim]({outcome.formatter})[/dim]")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
