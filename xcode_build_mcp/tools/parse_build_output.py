#!/usr/bin/env python3
"""parse_build_output tool - Errors and warnings from build output"""

from typing import Optional

from xcode_build_mcp import config
from xcode_build_mcp.server import mcp
from xcode_build_mcp.exceptions import InvalidParameterError
from xcode_build_mcp.utils.build_output import BuildOutputParser, RawCompilerOutputParser
from xcode_build_mcp.utils.formatting import format_build_summary


@mcp.tool()
def parse_build_output(output: str,
                       include_warnings: Optional[bool] = None,
                       beautified: bool = True) -> str:
    """
    Extract the errors and warnings from the output of a build.

    Args:
        output: Combined stdout and stderr of `xcodebuild ... 2>&1 | xcbeautify`,
            `swift build`, or a plain `xcodebuild` run.
        include_warnings: Include warnings in the report. If not provided, uses global setting.
        beautified: True if the output went through xcbeautify (❌/⚠️ markers),
            False for raw compiler output (file:line:column: error: message).

    Returns:
        A status line followed by the first errors and warnings, each with
        file:line:column when known. An empty report does not mean the build
        succeeded; check the command's exit code.
    """
    if include_warnings is not None and not isinstance(include_warnings, bool):
        raise InvalidParameterError("include_warnings must be a boolean value")
    if not output or not output.strip():
        raise InvalidParameterError("output cannot be empty")

    if beautified:
        parser = BuildOutputParser(config.ERROR_MARKERS, config.WARNING_MARKERS)
    else:
        parser = RawCompilerOutputParser()

    parsed = parser.parse(output)
    return format_build_summary(parsed, config.should_include_warnings(include_warnings))
