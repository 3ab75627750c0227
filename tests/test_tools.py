"""
Tests for the MCP tool functions, called directly.
"""

import pytest

from tests.fixtures import XCTEST_OUTPUT
from xcode_build_mcp import config, security
from xcode_build_mcp.exceptions import AccessDeniedError, InvalidParameterError
from xcode_build_mcp.tools.classify_build_failure import classify_build_failure
from xcode_build_mcp.tools.parse_build_output import parse_build_output
from xcode_build_mcp.tools.parse_test_results import parse_test_results

BUILD_OUTPUT = """----- xcbeautify -----
Version: 2.11.0
----------------------
❌ /Users/t/App.swift:10:5: cannot find 'someFunc' in scope
    someFunc()
    ^~~~~~~~
⚠️ /Users/t/App.swift:20:10: variable 'unused' was never used
❌ /Users/t/App.swift:10:5: cannot find 'someFunc' in scope
"""


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "BUILD_WARNINGS_ENABLED", True)
    monkeypatch.setattr(config, "BUILD_WARNINGS_FORCED", None)
    monkeypatch.setattr(config, "XCRESULT_WAIT_TIMEOUT", 0.0)
    monkeypatch.setattr(security, "ALLOWED_FOLDERS", {str(tmp_path)})


class TestParseBuildOutput:
    """parse_build_output tool."""

    def test_reports_deduplicated_issues(self):
        text = parse_build_output(BUILD_OUTPUT)
        assert text.startswith("Build output contains 1 error and 1 warning.")
        assert "/Users/t/App.swift:10:5: cannot find 'someFunc' in scope" in text
        assert "variable 'unused' was never used" in text

    def test_warnings_can_be_excluded(self):
        text = parse_build_output(BUILD_OUTPUT, include_warnings=False)
        assert "never used" not in text

    def test_forced_warnings_setting_wins(self, monkeypatch):
        monkeypatch.setattr(config, "BUILD_WARNINGS_FORCED", False)
        assert "never used" not in parse_build_output(BUILD_OUTPUT, include_warnings=True)

    def test_raw_compiler_output(self):
        text = parse_build_output("/p/main.swift:3:7: error: cannot find 'foo' in scope", beautified=False)
        assert "/p/main.swift:3:7: cannot find 'foo' in scope" in text

    def test_invalid_parameters(self):
        with pytest.raises(InvalidParameterError):
            parse_build_output("   ")
        with pytest.raises(InvalidParameterError):
            parse_build_output(BUILD_OUTPUT, include_warnings="yes")


class TestClassifyBuildFailure:
    """classify_build_failure tool."""

    def test_classified(self):
        text = classify_build_failure('xcodebuild: error: The project named "App" does not contain a scheme named "Foo".')
        assert '📍 Scheme not found: "Foo"' in text

    def test_unclassified_shows_tail(self):
        text = classify_build_failure("Linking App\nSomething odd happened\n")
        assert "Last output lines:" in text
        assert text.endswith("Something odd happened")

    def test_configured_priority(self, monkeypatch):
        monkeypatch.setattr(config, "CLASSIFIER_PRIORITY", ["dependency", "scheme"])
        text = classify_build_failure(
            'xcodebuild: error: The project named "App" does not contain a scheme named "Foo".\n'
            "error: no such module 'Bar'"
        )
        assert "Missing dependency" in text

    def test_empty_output(self):
        with pytest.raises(InvalidParameterError):
            classify_build_failure("")


class TestParseTestResults:
    """parse_test_results tool."""

    def test_console_output(self):
        text = parse_test_results(XCTEST_OUTPUT)
        assert text.splitlines()[0] == "❌ 1 of 4 tests failed (3 passed)"
        assert "AppTests.CalculatorTests/testDivide" in text

    def test_unwritten_bundle_falls_back_to_console(self, tmp_path):
        bundle = str(tmp_path / "Run.xcresult")
        text = parse_test_results(XCTEST_OUTPUT, bundle)
        assert text.splitlines()[0] == "❌ 1 of 4 tests failed (3 passed)"
        assert text.endswith(f"Result bundle: {bundle}")

    def test_bundle_outside_allowed_folders(self):
        with pytest.raises(AccessDeniedError):
            parse_test_results(XCTEST_OUTPUT, "/elsewhere/Run.xcresult")

    def test_echoed_bundle_is_access_checked(self):
        output = XCTEST_OUTPUT + "Test session results, code coverage, and logs:\n\t/elsewhere/Run.xcresult\n"
        with pytest.raises(AccessDeniedError):
            parse_test_results(output)

    def test_invalid_parameters(self):
        with pytest.raises(InvalidParameterError):
            parse_test_results("")
        with pytest.raises(InvalidParameterError):
            parse_test_results(XCTEST_OUTPUT, "/tmp/Run.txt")
