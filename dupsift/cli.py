#!/usr/bin/env python3
"""
Command-line interface for dupsift.
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import DEFAULT_PREFIX_BYTES, DetectorConfig, default_worker_count
from .detector import find_duplicates
from .errors import DupsiftError
from .formatter import format_json_output, format_output, summarize
from .scanner import read_paths, scan_directory


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Find duplicate files by screening file prefixes and confirming full contents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        help="Directory path to scan for duplicates",
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="Read file paths from standard input, one per line",
    )
    parser.add_argument(
        "-b", "--bytes",
        type=_positive_int,
        default=DEFAULT_PREFIX_BYTES,
        help=f"Compare the first N bytes of each file (default: {DEFAULT_PREFIX_BYTES})",
    )
    parser.add_argument(
        "-w", "--workers",
        type=_positive_int,
        default=default_worker_count(),
        help="Number of workers for full-content hashing (default: 2x CPU count)",
    )
    parser.add_argument(
        "--scan-workers",
        type=_positive_int,
        default=1,
        help="Number of threads reading file prefixes (default: 1)",
    )
    parser.add_argument(
        "-s", "--summary-only",
        action="store_true",
        help="Output only the final summary statistics",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Skip unreadable files instead of stopping the run",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)

    # Validate conflicting flags
    if args.verbose and args.quiet:
        print("Error: Cannot use both --verbose and --quiet flags", file=sys.stderr)
        sys.exit(1)

    if args.stdin == (args.path is not None):
        print("Error: Exactly one of PATH or --stdin must be given", file=sys.stderr)
        sys.exit(1)

    # Setup logging based on verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(message)s')
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR, format='%(message)s')
    else:
        logging.basicConfig(level=logging.INFO, format='%(message)s')

    json_output = args.output == "json"
    config = DetectorConfig(
        prefix_bytes=args.bytes,
        workers=args.workers,
        summary_only=args.summary_only or args.quiet,
        fail_fast=not args.keep_going,
        scan_workers=args.scan_workers,
        quiet=args.quiet or json_output,
    )

    if args.stdin:
        if not args.quiet and not json_output:
            print("Reading paths from standard input")
        paths = list(read_paths(sys.stdin))
    else:
        # Validate input path
        if not args.path.exists():
            print(f"Error: Path '{args.path}' does not exist", file=sys.stderr)
            sys.exit(1)

        if not args.path.is_dir():
            print(f"Error: Path '{args.path}' is not a directory", file=sys.stderr)
            sys.exit(1)

        paths = scan_directory(str(args.path), quiet=config.quiet)

    logging.getLogger(__name__).debug(
        "Comparing %d files (%d prefix bytes, %d workers)", len(paths), config.prefix_bytes, config.workers
    )

    try:
        result = find_duplicates(paths, config, reporter=None if json_output else print, report_final=False)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except DupsiftError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if json_output:
        print(format_json_output(result))
    else:
        if not args.summary_only:
            print(format_output(result))
            print()
        # Final checkpoint comes after the listing
        print(summarize(result.duplicates))

    # Show final warning summary from hashing (unless quiet or json)
    if not args.quiet and not json_output:
        total_warnings = sum(result.warning_counts.values())
        if total_warnings > 0:
            print("\nProcessing warnings summary:", file=sys.stderr)
            for warning_type, count in result.warning_counts.items():
                if count > 0:
                    warning_name = warning_type.replace('_', ' ').title()
                    print(f"  • {warning_name}: {count} files", file=sys.stderr)


if __name__ == "__main__":
    main()
