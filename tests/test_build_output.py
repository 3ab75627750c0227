"""
Tests for whole-output build parsing.
"""

import pytest

from xcode_build_mcp.utils.build_output import BuildOutputParser, RawCompilerOutputParser, is_noise_line
from xcode_build_mcp.utils.issues import Issue, Severity

ERROR_LINE = "❌ /Users/t/App.swift:10:5: cannot find 'someFunc' in scope"

BANNER = """----- xcbeautify -----
Version: 2.11.0
----------------------
"""


class TestBuildOutputParser:
    """Beautified build output."""

    def setup_method(self):
        self.parser = BuildOutputParser()

    def test_single_warning(self):
        parsed = self.parser.parse("⚠️ /Users/p/App.swift:20:10: variable 'unused' was never used")
        assert len(parsed.issues) == 1
        issue = parsed.issues[0]
        assert issue.severity is Severity.WARNING
        assert issue.file == "/Users/p/App.swift"
        assert issue.line == 20
        assert issue.column == 10
        assert issue.message == "variable 'unused' was never used"

    def test_code_context_lines_are_discarded(self):
        output = f"{ERROR_LINE}\n    someFunc()\n    ^~~~~~~~"
        parsed = self.parser.parse(output)
        assert parsed.issues == [Issue.error("cannot find 'someFunc' in scope", "/Users/t/App.swift", 10, 5)]

    def test_repeated_error_is_reported_once(self):
        parsed = self.parser.parse("\n".join([ERROR_LINE] * 3))
        assert len(parsed.issues) == 1

    def test_parsing_twice_and_doubled_input_agree(self):
        first = self.parser.parse(ERROR_LINE).issues
        assert self.parser.parse(ERROR_LINE).issues == first
        assert self.parser.parse(ERROR_LINE + "\n" + ERROR_LINE).issues == first

    def test_interleaved_diagnostics_are_each_recognised(self):
        output = "\n".join([
            "❌ /a/One.swift:1:1: first error",
            "    let x: Int = \"a\"",
            "                 ^",
            "⚠️ /a/Two.swift:2:2: a warning",
            "    var unused = 1",
            "❌ error: linker command failed with exit code 1",
        ])
        parsed = self.parser.parse(output)
        assert [i.message for i in parsed.issues] == [
            "first error",
            "a warning",
            "linker command failed with exit code 1",
        ]
        assert len(parsed.errors) == 2
        assert len(parsed.warnings) == 1

    def test_first_seen_order_survives_duplicates(self):
        output = "\n".join([
            "⚠️ /a.swift:1:1: w",
            "❌ /b.swift:2:2: e",
            "⚠️ /a.swift:1:1: w",
        ])
        assert [i.severity for i in self.parser.parse(output).issues] == [Severity.WARNING, Severity.ERROR]

    def test_banner_and_plain_lines_produce_no_issues(self):
        output = BANNER + "Compiling App.swift\n** BUILD SUCCEEDED **\n"
        assert self.parser.parse(output).issues == []

    def test_message_only_issue_for_unstructured_marker_line(self):
        parsed = self.parser.parse("❌ Testing cancelled because the build failed.")
        assert parsed.issues == [Issue.error("Testing cancelled because the build failed.")]

    def test_every_located_issue_has_a_file(self):
        output = BANNER + "\n".join([ERROR_LINE, "❌ error: plain", "⚠️ something odd", "❌ /x.swift:3:4: m"])
        for issue in self.parser.parse(output).issues:
            if issue.line is not None or issue.column is not None:
                assert issue.file is not None

    def test_none_output_is_a_contract_violation(self):
        with pytest.raises(TypeError):
            self.parser.parse(None)

    def test_windows_line_endings(self):
        parsed = self.parser.parse(ERROR_LINE + "\r\n    someFunc()\r\n")
        assert len(parsed.issues) == 1
        assert parsed.issues[0].message == "cannot find 'someFunc' in scope"


class TestNoiseLines:
    """Banner/version lines are skipped."""

    def test_noise(self):
        assert is_noise_line("----- xcbeautify -----")
        assert is_noise_line("Version: 2.11.0")
        assert is_noise_line("----------------------")
        assert is_noise_line("xcbeautify 2.11.0")

    def test_not_noise(self):
        assert not is_noise_line("❌ /a.swift:1:1: error mentioning xcbeautify")
        assert not is_noise_line("Version: 2 of the API is deprecated")
        assert not is_noise_line("    someFunc()")


class TestRawCompilerOutputParser:
    """Plain swift build / xcodebuild compiler lines."""

    def setup_method(self):
        self.parser = RawCompilerOutputParser()

    def test_errors_and_warnings_notes_dropped(self):
        output = "\n".join([
            "[1/3] Compiling App main.swift",
            "/p/Sources/App/main.swift:3:7: error: cannot find 'foo' in scope",
            "/p/Sources/App/main.swift:3:7: note: did you mean 'for'?",
            "/p/Sources/App/util.swift:9:1: warning: will never be executed",
            "/p/Sources/App/main.swift:3:7: error: cannot find 'foo' in scope",
            "error: fatalError",
        ])
        parsed = self.parser.parse(output)
        assert parsed.issues == [
            Issue.error("cannot find 'foo' in scope", "/p/Sources/App/main.swift", 3, 7),
            Issue.warning("will never be executed", "/p/Sources/App/util.swift", 9, 1),
            Issue.error("fatalError"),
        ]

    def test_ignores_beautified_markers(self):
        assert self.parser.parse("Build complete!").issues == []
