#!/usr/bin/env python3
"""Build output parsing - beautified (xcbeautify) and raw compiler output"""

import logging
import re
from typing import Optional, Sequence

from xcode_build_mcp.utils.issues import (
    DEFAULT_ERROR_MARKERS,
    DEFAULT_WARNING_MARKERS,
    Issue,
    IssueCollection,
    IssueLineParser,
    ParsedOutput,
    Severity,
    strip_ansi,
)

logger = logging.getLogger(__name__)

# xcbeautify banner:
#   ----- xcbeautify -----
#   Version: 2.11.0
#   ----------------------
SEPARATOR_PATTERN = re.compile(r"^[-=]{3,}$")
BANNER_PATTERN = re.compile(r"^(?:-+\s*)?xcbeautify\b", re.IGNORECASE)
VERSION_PATTERN = re.compile(r"^Version:\s*\S*$")

# /path/to/File.swift:10:5: error: message
RAW_DIAGNOSTIC_PATTERN = re.compile(r"^([^:]+):(\d+):(\d+):\s+(error|warning|note):\s+(.+)$")
RAW_BARE_PATTERN = re.compile(r"^(error|warning):\s+(.+)$")


def _require_text(output) -> str:
    if not isinstance(output, str):
        raise TypeError(f"Build output must be a string, got {type(output).__name__}")
    return output


def is_noise_line(line: str) -> bool:
    """True for banner/version lines that never carry diagnostics"""
    text = strip_ansi(line).strip()
    return bool(
        SEPARATOR_PATTERN.match(text)
        or BANNER_PATTERN.match(text)
        or VERSION_PATTERN.match(text)
    )


class BuildOutputParser:
    """
    Parses the combined output of a beautified build into a ParsedOutput.

    Lines without a severity marker that follow an issue (source excerpts,
    caret pointers) are consumed as its context and never reported.
    """

    def __init__(self,
                 error_markers: Sequence[str] = DEFAULT_ERROR_MARKERS,
                 warning_markers: Sequence[str] = DEFAULT_WARNING_MARKERS):
        self.line_parser = IssueLineParser(error_markers, warning_markers)

    def parse(self, output: str) -> ParsedOutput:
        output = _require_text(output)
        issues = IssueCollection()
        last_issue: Optional[Issue] = None
        context_lines = 0
        duplicates = 0

        for line in output.splitlines():
            if not line.strip() or is_noise_line(line):
                continue

            severity = self.line_parser.detect_severity(line)
            if severity is None:
                if last_issue is not None:
                    context_lines += 1
                continue

            issue = self.line_parser.parse(line, severity)
            if issue is None:
                continue
            if not issues.add(issue):
                duplicates += 1
            last_issue = issue

        result = ParsedOutput(issues.to_list())
        logger.debug(
            "Parsed build output: %d error(s), %d warning(s), %d duplicate(s), %d context line(s)",
            len(result.errors), len(result.warnings), duplicates, context_lines,
        )
        return result


class RawCompilerOutputParser:
    """
    Parses non-beautified compiler output (swift build, plain xcodebuild).

    Notes are attached to the preceding diagnostic by the compiler and are
    not reported on their own.
    """

    def parse(self, output: str) -> ParsedOutput:
        output = _require_text(output)
        issues = IssueCollection()

        for line in output.splitlines():
            text = strip_ansi(line).strip()
            if not text:
                continue

            match = RAW_DIAGNOSTIC_PATTERN.match(text)
            if match:
                file_path, line_str, column_str, kind, message = match.groups()
                if kind == "note":
                    continue
                try:
                    issues.add(Issue(Severity(kind), message.strip(), file_path,
                                     int(line_str, 10), int(column_str, 10)))
                    continue
                except ValueError:
                    pass

            match = RAW_BARE_PATTERN.match(text)
            if match:
                kind, message = match.groups()
                issues.add(Issue(Severity(kind), message.strip()))

        result = ParsedOutput(issues.to_list())
        logger.debug("Parsed raw compiler output: %d error(s), %d warning(s)",
                     len(result.errors), len(result.warnings))
        return result
