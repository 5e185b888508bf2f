"""Command line entry point offering the debug bech32-convert command."""

from __future__ import annotations

import argparse
import sys

from gaiafee.bech32 import Bech32Error, convert_bech32_prefix

_CONVERT_DESCRIPTION = """Convert any bech32 string to the cosmos prefix

Example:
    gaiad debug bech32-convert akash1a6zlyvpnksx8wr6wz8wemur2xe8zyh0ytz6d88

    gaiad debug bech32-convert stride1673f0t8p893rqyqe420mgwwz92ac4qv6synvx2 --prefix osmo
"""


class _UsageError(Exception):
    """Bad command line usage."""


class _CommandError(Exception):
    """A command failed."""


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise _UsageError(message)


def _run_bech32_convert(args: argparse.Namespace) -> None:
    try:
        converted = convert_bech32_prefix(args.address, args.prefix)
    except Bech32Error as exc:
        raise _CommandError(f"convertation failed: {exc}") from exc
    # Command output goes to the error stream, as the original tool does.
    print(converted, file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the command line."""
    parser = _Parser(prog="gaiad", description="Stargate Cosmos Hub App")
    commands = parser.add_subparsers(dest="command", required=True)
    debug = commands.add_parser(
        "debug", help="Tool for helping with debugging your application"
    )
    debug_commands = debug.add_subparsers(dest="debug_command", required=True)
    convert = debug_commands.add_parser(
        "bech32-convert",
        help="Convert any bech32 string to the cosmos prefix",
        description=_CONVERT_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    convert.add_argument("address")
    convert.add_argument(
        "-p", "--prefix", default="cosmos", help="Bech32 Prefix to encode to"
    )
    convert.set_defaults(handler=_run_bech32_convert)
    return parser


def main(argv=None) -> int:
    """Run the command line and return the process exit code."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        args.handler(args)
    except (_UsageError, _CommandError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())