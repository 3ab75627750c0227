#!/usr/bin/env python3
"""parse_test_results tool - Pass/fail counts and failing tests of a test run"""

import functools
from typing import Optional

from xcode_build_mcp import config
from xcode_build_mcp.server import mcp
from xcode_build_mcp.exceptions import InvalidParameterError
from xcode_build_mcp.security import validate_result_bundle_path
from xcode_build_mcp.utils.formatting import format_test_result
from xcode_build_mcp.utils.xcresult import TestResultParser, locate_result_bundle, run_xcresulttool


@mcp.tool()
def parse_test_results(output: str,
                       result_bundle_path: Optional[str] = None) -> str:
    """
    Summarize a finished `xcodebuild test` or `swift test` run.

    The .xcresult bundle is read first when available (waiting briefly for
    xcodebuild to finish writing it); otherwise the console output is parsed.

    Args:
        output: Combined stdout and stderr of the test run.
        result_bundle_path: Path passed to -resultBundlePath, if any. A path
            echoed in the output takes precedence.

    Returns:
        Pass/fail counts and up to 10 failing tests with their failure reasons.
    """
    if output is None or (not output.strip() and not result_bundle_path):
        raise InvalidParameterError("output cannot be empty")

    # Access check covers both the given path and one echoed in the output
    bundle_path = locate_result_bundle(result_bundle_path, output)
    if bundle_path:
        bundle_path = validate_result_bundle_path(bundle_path)

    parser = TestResultParser(
        run=functools.partial(run_xcresulttool, timeout=config.XCRESULTTOOL_TIMEOUT),
        wait_timeout=config.XCRESULT_WAIT_TIMEOUT,
        poll_interval=config.XCRESULT_POLL_INTERVAL,
        settle_delay=config.XCRESULT_SETTLE_DELAY,
    )
    result = parser.parse(output, bundle_path)
    return format_test_result(result, bundle_path)
