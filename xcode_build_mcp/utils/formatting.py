#!/usr/bin/env python3
"""User-facing text for parsed build issues, build errors and test results"""

from typing import List, Optional

from xcode_build_mcp.utils.build_errors import BuildError
from xcode_build_mcp.utils.issues import Issue, ParsedOutput
from xcode_build_mcp.utils.test_output import TestRunResult

MAX_ERRORS_SHOWN = 5
MAX_WARNINGS_SHOWN = 3
MAX_FAILING_TESTS_SHOWN = 10


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def _issue_block(header: str, issues: List[Issue], limit: int, noun: str) -> List[str]:
    lines = [f"{header} ({len(issues)}):"]
    lines.extend(f"  • {issue}" for issue in issues[:limit])
    if len(issues) > limit:
        lines.append(f"  ... and {len(issues) - limit} more {noun}")
    return lines


def format_build_issues(parsed: ParsedOutput, include_warnings: bool = True) -> str:
    """
    Format errors (and optionally warnings) from a parsed build.

    Returns an empty string when there is nothing to show.
    """
    errors = parsed.errors
    warnings = parsed.warnings if include_warnings else []

    sections = []
    if errors:
        sections.append("\n".join(_issue_block("❌ Errors", errors, MAX_ERRORS_SHOWN, "errors")))
    if warnings:
        sections.append("\n".join(_issue_block("⚠️ Warnings", warnings, MAX_WARNINGS_SHOWN, "warnings")))
    return "\n\n".join(sections)


def format_build_summary(parsed: ParsedOutput, include_warnings: bool = True) -> str:
    """One status line followed by the issue listing"""
    errors = len(parsed.errors)
    warnings = len(parsed.warnings) if include_warnings else 0

    if errors:
        status = f"Build output contains {_plural(errors, 'error')}"
        if warnings:
            status += f" and {_plural(warnings, 'warning')}"
        status += "."
    elif warnings:
        status = f"Build output contains {_plural(warnings, 'warning')}."
    elif include_warnings:
        return "Build output contains no errors or warnings."
    else:
        return "Build output contains no errors."

    details = format_build_issues(parsed, include_warnings)
    return f"{status}\n\n{details}" if details else status


def format_build_error(error: BuildError) -> str:
    lines = ["❌ Build failed", "", f"📍 {error.title}"]
    if error.details:
        lines.extend(f"   {line}" for line in error.details.splitlines())
    if error.suggestion:
        lines.append(f"   💡 {error.suggestion}")
    return "\n".join(lines)


def format_unclassified_failure(output: str, tail_lines: int = 20) -> str:
    """Fallback for failures no detector recognised: the tail of the output"""
    lines = [line for line in output.splitlines() if line.strip()]
    tail = lines[-tail_lines:]
    if not tail:
        return "❌ Build failed (no output)"
    return "❌ Build failed\n\nLast output lines:\n" + "\n".join(tail)


def format_test_result(result: TestRunResult, bundle_path: Optional[str] = None) -> str:
    lines = []
    if result.success:
        lines.append(f"✅ All tests passed ({result.passed} passed)")
    elif result.total == 0:
        lines.append("❌ Tests failed (no test counts could be determined)")
    else:
        lines.append(f"❌ {result.failed} of {result.total} tests failed ({result.passed} passed)")

    if result.failing_tests:
        lines.append("")
        lines.append("Failing tests:")
        for failing in result.failing_tests[:MAX_FAILING_TESTS_SHOWN]:
            lines.append(f"  ✖ {failing.identifier}: {failing.reason}")
        remaining = len(result.failing_tests) - MAX_FAILING_TESTS_SHOWN
        if remaining > 0:
            lines.append(f"  ... and {remaining} more failures")

    if bundle_path:
        lines.append("")
        lines.append(f"Result bundle: {bundle_path}")
    return "\n".join(lines)
