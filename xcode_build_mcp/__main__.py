#!/usr/bin/env python3
"""Command line entry point - configure settings and serve MCP over stdio"""

import argparse
import logging
import os
import sys

from xcode_build_mcp import __version__, config, security
from xcode_build_mcp.exceptions import InvalidParameterError


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Xcode Build Output MCP Server")
    parser.add_argument("--version", action="version", version=f"xcode-build-mcp {__version__}")
    parser.add_argument("--allowed", action="append", help="Add an allowed folder path for result bundles (can be used multiple times)")
    parser.add_argument("--no-build-warnings", action="store_true", help="Exclude warnings from build output")
    parser.add_argument("--always-include-build-warnings", action="store_true", help="Always include warnings in build output")
    parser.add_argument("--xcresult-timeout", type=float, help="Seconds to wait for an .xcresult bundle to be written")
    parser.add_argument("--debug", action="store_true", help="Log parser decisions to stderr")
    return parser


def configure_logging(debug: bool):
    # stdout carries the MCP protocol, so logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv=None):
    args = build_arg_parser().parse_args(argv)

    configure_logging(args.debug or bool(os.environ.get("XCODE_MCP_DEBUG")))

    # Handle build warning settings
    if args.no_build_warnings and args.always_include_build_warnings:
        print("Error: Cannot use both --no-build-warnings and --always-include-build-warnings", file=sys.stderr)
        sys.exit(1)
    elif args.no_build_warnings:
        config.set_build_warnings_enabled(False, forced=True)
        print("Build warnings forcibly disabled", file=sys.stderr)
    elif args.always_include_build_warnings:
        config.set_build_warnings_enabled(True, forced=True)
        print("Build warnings forcibly enabled", file=sys.stderr)

    try:
        config.load_from_environment()
    except InvalidParameterError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    if args.xcresult_timeout is not None:
        if args.xcresult_timeout < 0:
            print("Error: --xcresult-timeout must be >= 0", file=sys.stderr)
            sys.exit(1)
        config.XCRESULT_WAIT_TIMEOUT = args.xcresult_timeout

    # Initialize allowed folders from environment and command line
    security.set_allowed_folders(security.get_allowed_folders(args.allowed))

    if not security.ALLOWED_FOLDERS:
        error_msg = """
========================================================================
ERROR: Xcode Build Output MCP Server cannot start - No valid allowed folders!
========================================================================

Result bundles can only be read from allowed folders. Either:

1. Set the XCODEMCP_ALLOWED_FOLDERS environment variable:
   export XCODEMCP_ALLOWED_FOLDERS="/path/to/folder1:/path/to/folder2"

2. Use the --allowed command line option:
   xcode-build-mcp --allowed /path/to/folder1 --allowed /path/to/folder2

3. Ensure your $HOME directory exists and is accessible

All specified folders must be absolute, existing directories without '..'
components.
========================================================================
"""
        print(error_msg, file=sys.stderr)
        sys.exit(1)

    print(f"Total allowed folders: {security.ALLOWED_FOLDERS}", file=sys.stderr)

    # Registers the tools on the shared server
    from xcode_build_mcp import tools  # noqa: F401
    from xcode_build_mcp.server import mcp

    mcp.run()


if __name__ == "__main__":
    main()
