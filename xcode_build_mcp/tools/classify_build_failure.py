#!/usr/bin/env python3
"""classify_build_failure tool - Categorized cause of a failed build command"""

from xcode_build_mcp import config
from xcode_build_mcp.server import mcp
from xcode_build_mcp.exceptions import InvalidParameterError
from xcode_build_mcp.utils.build_errors import BuildErrorClassifier
from xcode_build_mcp.utils.formatting import format_build_error, format_unclassified_failure


@mcp.tool()
def classify_build_failure(output: str) -> str:
    """
    Explain why an xcodebuild or swift build command failed.

    Use this when the command exited non-zero, especially when it failed
    before producing compiler diagnostics (unknown scheme, code signing,
    provisioning, unresolved packages, unavailable destination or SDK).

    Args:
        output: Raw combined stdout and stderr of the failed command
            (not passed through xcbeautify).

    Returns:
        The failure category with details and a suggested fix, or the last
        lines of output when the failure could not be classified.
    """
    if not output or not output.strip():
        raise InvalidParameterError("output cannot be empty")

    error = BuildErrorClassifier(config.CLASSIFIER_PRIORITY).classify(output)
    if error is None:
        return format_unclassified_failure(output)
    return format_build_error(error)
