"""
vd - videodoc narration CLI.

Every command prints a JSON result on stdout; progress goes to stderr.
Exit status is 0 on success, 1 when the command reports an error and 2 on
usage errors.
"""

import argparse
import json
import logging
import os
import sys

from vd_commands import narration, captions

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> int:
    """Configure root logging from --verbose or VD_LOG_LEVEL."""
    if verbose:
        level = logging.DEBUG
    else:
        level_name = os.environ.get("VD_LOG_LEVEL", "WARNING").upper()
        level = getattr(logging, level_name, logging.WARNING)
        if not isinstance(level, int):
            level = logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger().setLevel(level)
    return level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vd", description="Videodoc narration tools")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    narration.register(subparsers)
    captions.register(subparsers)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return 2

    result = args.func(args)
    print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
