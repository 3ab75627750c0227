#!/usr/bin/env python3
"""The shared FastMCP server instance"""

from mcp.server.fastmcp import FastMCP

mcp = FastMCP("Xcode Build Output MCP Server",
    instructions="""
        This server interprets the output of Apple platform builds and test
        runs. It does not run builds itself: run `xcodebuild`, `swift build`
        or `swift test` as usual, capture stdout and stderr together, and pass
        that text to one of the tools below.

        Call `parse_build_output` with the output of a build (preferably piped
        through xcbeautify) to get its errors and warnings with file, line and
        column, with duplicates removed.

        Call `classify_build_failure` when a build failed before producing any
        diagnostics (unknown scheme, code signing, provisioning, missing
        package, bad destination, ...) to get a categorized explanation and a
        suggested fix.

        Call `parse_test_results` with the output of a test run, and the
        .xcresult bundle path if one was requested with -resultBundlePath, to
        get pass/fail counts and the failing tests.

        Available tools:
        - parse_build_output: Errors and warnings from build output
        - classify_build_failure: Categorized cause of a failed build command
        - parse_test_results: Pass/fail counts and failing tests of a test run
    """
)
