#!/usr/bin/env python3
"""
flaclink CLI

Hardlinks new FLAC albums from a downloads folder into a music library,
remembering every album it has seen so nothing is linked twice.

Usage:
    flaclink <source dir> <target dir>
    flaclink --list

The album registry lives in ~/.flaclink/albums.db.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from .errors import FlaclinkError, UsageError

logger = logging.getLogger("flaclink")

LOG_FORMAT = "%(asctime)s %(message)s"
DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


def setup_logging(verbose: bool = False) -> None:
    """Log to stderr, with timestamps"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stderr
    )


def cmd_sync(args):
    """Backfill the registry from the library, then link new albums."""
    from .orchestrator import create_orchestrator

    source, target = (Path(os.path.normpath(p)) for p in args.paths)
    orchestrator = create_orchestrator()
    summary = orchestrator.run(source, target)

    print(f"\n=== flaclink Results ===")
    print(f"Regular files skipped: {summary.skipped_files}")
    print(f"New albums linked: {summary.linked}")
    print(f"Already in DB or duplicate: {summary.duplicates}")


def cmd_list(args):
    """Print every album in the registry."""
    from .orchestrator import create_orchestrator

    orchestrator = create_orchestrator()

    def show(name, contents):
        print(f"Album dir: {name}, Contents: {contents}")

    count = orchestrator.list_albums(show)
    print(f"\n{count} albums in DB.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='flaclink',
        description='Hardlink new FLAC albums into a music library',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('paths', nargs='*', metavar='dir',
                        help='Source (downloads) dir, then target (library) dir')
    parser.add_argument('--list', action='store_true', help='List albums in the registry and exit')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log every album and link')
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.list:
        func = cmd_list
    elif len(args.paths) == 2:
        func = cmd_sync
    else:
        parser.print_usage(sys.stderr)
        print("flaclink: error: expected <source dir> <target dir>", file=sys.stderr)
        return UsageError.exit_code

    try:
        func(args)
        return 0
    except KeyboardInterrupt:
        print("\nOperation cancelled.")
        return 130
    except FlaclinkError as e:
        logger.error("Error: %s", e)
        return e.exit_code
    except Exception as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == '__main__':
    sys.exit(main())
