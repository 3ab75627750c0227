#!/usr/bin/env python3
"""xcresult bundle utilities and tiered test result parsing"""

import json
import logging
import os
import re
import subprocess
import time
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from xcode_build_mcp.exceptions import XcresultQueryError
from xcode_build_mcp.utils.test_output import (
    NO_DETAILS_REASON,
    FailingTest,
    TestOutputParser,
    TestRunResult,
)

logger = logging.getLogger(__name__)

# Present once xcodebuild has finished writing the bundle
READY_MARKER_FILE = "Info.plist"

DEFAULT_WAIT_TIMEOUT = 10.0
DEFAULT_POLL_INTERVAL = 0.2
DEFAULT_SETTLE_DELAY = 0.3
DEFAULT_QUERY_TIMEOUT = 60

TEST_SESSION_RESULTS_PATTERN = re.compile(r"Test session results.*?\n\s*(.+\.xcresult)")
WRITING_RESULT_BUNDLE_PATTERN = re.compile(r"Writing result bundle at path:\s*(.+\.xcresult)")

# Failures a parsing tier absorbs before handing over to the next one
TIER_ERRORS = (XcresultQueryError, ValueError, KeyError, TypeError, AttributeError)

XcresultRunner = Callable[[Sequence[str]], str]


def run_xcresulttool(args: Sequence[str], timeout: float = DEFAULT_QUERY_TIMEOUT) -> str:
    """
    Run `xcrun xcresulttool` with the given arguments and return its stdout.

    Raises:
        XcresultQueryError: If the tool is missing, times out, or exits non-zero
    """
    command = ['xcrun', 'xcresulttool', *args]
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=timeout
        )
    except subprocess.TimeoutExpired:
        raise XcresultQueryError(f"Timeout running {' '.join(command)}")
    except OSError as e:
        raise XcresultQueryError(f"Could not run xcresulttool: {e}")

    if result.returncode != 0:
        raise XcresultQueryError(
            f"xcresulttool exited with {result.returncode}: {result.stderr.strip()}",
            code=result.returncode
        )
    return result.stdout


def locate_result_bundle(default_path: Optional[str], output: str) -> Optional[str]:
    """
    Resolve the result bundle path, preferring one echoed by xcodebuild.

    Args:
        default_path: Path the caller asked xcodebuild to write to, if any
        output: Console output of the test run

    Returns:
        The bundle path to use, or None if neither source has one
    """
    match = TEST_SESSION_RESULTS_PATTERN.search(output)
    if match:
        path = match.group(1).strip()
        logger.debug("Found xcresult path in test session results: %s", path)
        return path

    match = WRITING_RESULT_BUNDLE_PATTERN.search(output)
    if match:
        path = match.group(1).strip()
        logger.debug("Found xcresult path in result bundle message: %s", path)
        return path

    return default_path


def is_result_bundle_ready(path: str) -> bool:
    return os.path.isdir(path) and os.path.exists(os.path.join(path, READY_MARKER_FILE))


def wait_for_result_bundle(path: str,
                           timeout: float = DEFAULT_WAIT_TIMEOUT,
                           interval: float = DEFAULT_POLL_INTERVAL,
                           settle_delay: float = DEFAULT_SETTLE_DELAY,
                           sleep: Callable[[float], None] = time.sleep,
                           clock: Callable[[], float] = time.monotonic) -> bool:
    """
    Wait for an xcresult bundle to be fully written.

    Returns:
        True once the bundle and its marker file exist, False if the
        timeout expires first
    """
    end_time = clock() + timeout

    while not is_result_bundle_ready(path):
        if clock() >= end_time:
            logger.debug("xcresult bundle not ready after %.1fs: %s", timeout, path)
            return False
        sleep(interval)

    # Give xcresulttool a moment before reading
    if settle_delay > 0:
        sleep(settle_delay)
    return True


class _Tally(NamedTuple):
    passed: int = 0
    failed: int = 0
    failing: Tuple[FailingTest, ...] = ()

    def merge(self, other: "_Tally") -> "_Tally":
        return _Tally(self.passed + other.passed,
                      self.failed + other.failed,
                      self.failing + other.failing)


def _children(node: dict) -> List[dict]:
    children = node.get('children')
    if not isinstance(children, list):
        return []
    return [child for child in children if isinstance(child, dict)]


def _failure_message(children: List[dict]) -> Optional[str]:
    for child in children:
        if child.get('nodeType') == 'Failure Message':
            return child.get('details') or child.get('name') or None
    return None


def _tally_test_case(node: dict, parent_name: str) -> _Tally:
    children = _children(node)
    identifier = node.get('nodeIdentifier') or node.get('name') or parent_name
    reason = _failure_message(children) or NO_DETAILS_REASON
    arguments = [child for child in children if child.get('nodeType') == 'Arguments']

    if not arguments:
        if node.get('result') == 'Passed':
            return _Tally(passed=1)
        if node.get('result') == 'Failed':
            return _Tally(failed=1, failing=(FailingTest(identifier, reason),))
        return _Tally()

    # Each argument variation is a separate test case
    tally = _Tally()
    for argument in arguments:
        if argument.get('result') == 'Passed':
            tally = tally.merge(_Tally(passed=1))
        elif argument.get('result') == 'Failed':
            label = argument.get('name')
            failing = FailingTest(
                f"{identifier} ({label})" if label else identifier,
                _failure_message(_children(argument)) or reason
            )
            tally = tally.merge(_Tally(failed=1, failing=(failing,)))
    return tally


def tally_test_nodes(node, parent_name: str = "") -> _Tally:
    """Count test cases under a modern `test-results tests` node"""
    if not isinstance(node, dict):
        return _Tally()
    if node.get('nodeType') == 'Test Case':
        return _tally_test_case(node, parent_name)

    name = node.get('name') or parent_name
    tally = _Tally()
    for child in _children(node):
        tally = tally.merge(tally_test_nodes(child, name))
    return tally


class ModernXcresultParser:
    """xcresulttool `get test-results` (Xcode 16+)"""

    def __init__(self, run: XcresultRunner = run_xcresulttool):
        self.run = run

    def parse(self, path: str) -> TestRunResult:
        summary = json.loads(self.run(['get', 'test-results', 'summary', '--path', path]))
        if not isinstance(summary, dict):
            raise ValueError("Unexpected test-results summary format")
        logger.debug("xcresult summary: %s passed, %s failed",
                     summary.get('passedTests'), summary.get('failedTests'))

        try:
            details = json.loads(self.run(['get', 'test-results', 'tests', '--path', path]))
            nodes = details['testNodes']
            if not isinstance(nodes, list):
                raise TypeError("testNodes is not a list")
        except TIER_ERRORS as e:
            logger.debug("Could not extract failing test details, using summary counts: %s", e)
            return TestRunResult.from_counts(int(summary.get('passedTests') or 0),
                                             int(summary.get('failedTests') or 0))

        tally = _Tally()
        for node in nodes:
            tally = tally.merge(tally_test_nodes(node))
        return TestRunResult.from_counts(tally.passed, tally.failed, tally.failing)


def tally_legacy_tests(tests) -> _Tally:
    """Count tests in a legacy test report, recursing through subtests"""
    tally = _Tally()
    if not isinstance(tests, list):
        return tally

    for test in tests:
        if not isinstance(test, dict):
            continue
        if test.get('subtests'):
            tally = tally.merge(tally_legacy_tests(test['subtests']))
        elif test.get('testStatus') == 'Success':
            tally = tally.merge(_Tally(passed=1))
        elif test.get('testStatus') in ('Failure', 'Expected Failure'):
            failing: Tuple[FailingTest, ...] = ()
            if test.get('identifier'):
                reason = test.get('failureMessage') or test.get('message') or NO_DETAILS_REASON
                failing = (FailingTest(test['identifier'], reason),)
            tally = tally.merge(_Tally(failed=1, failing=failing))
    return tally


class LegacyXcresultParser:
    """xcresulttool `--legacy` test report (before Xcode 16)"""

    def __init__(self, run: XcresultRunner = run_xcresulttool):
        self.run = run

    def parse(self, path: str) -> TestRunResult:
        report = json.loads(self.run(['get', 'test-report', '--legacy', '--format', 'json', '--path', path]))
        if not isinstance(report, dict):
            raise ValueError("Unexpected legacy test report format")
        tally = tally_legacy_tests(report.get('tests'))
        return TestRunResult.from_counts(tally.passed, tally.failed, tally.failing)


class TestResultParser:
    """
    Produces a TestRunResult for a finished test run.

    Tiers are tried once each, in order: modern xcresult, legacy xcresult,
    then the console text. Every failure along the way falls through to the
    next tier instead of raising.
    """

    def __init__(self,
                 run: XcresultRunner = run_xcresulttool,
                 wait_timeout: float = DEFAULT_WAIT_TIMEOUT,
                 poll_interval: float = DEFAULT_POLL_INTERVAL,
                 settle_delay: float = DEFAULT_SETTLE_DELAY,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.tiers = [ModernXcresultParser(run), LegacyXcresultParser(run)]
        self.text_parser = TestOutputParser()
        self.wait_timeout = wait_timeout
        self.poll_interval = poll_interval
        self.settle_delay = settle_delay
        self.sleep = sleep
        self.clock = clock

    def parse(self, output: str, result_bundle_path: Optional[str] = None) -> TestRunResult:
        if not isinstance(output, str):
            raise TypeError(f"Test output must be a string, got {type(output).__name__}")

        path = locate_result_bundle(result_bundle_path, output)
        if not path:
            logger.debug("No xcresult bundle for this run, parsing console output")
            return self.text_parser.parse(output)

        ready = wait_for_result_bundle(path, self.wait_timeout, self.poll_interval,
                                       self.settle_delay, self.sleep, self.clock)
        if not ready:
            logger.warning("xcresult bundle not ready, using fallback parsing: %s", path)
            return self.text_parser.parse(output)

        for tier in self.tiers:
            try:
                result = tier.parse(path)
                logger.debug("Parsed %s with %s", path, type(tier).__name__)
                return result
            except TIER_ERRORS as e:
                logger.debug("%s failed: %s", type(tier).__name__, e)

        logger.warning("Could not read xcresult bundle, parsing console output: %s", path)
        return self.text_parser.parse(output)
