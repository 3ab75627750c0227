#!/usr/bin/env python3
"""Build issues (errors/warnings) and single-line issue parsing"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

# xcbeautify prefixes diagnostics with these markers
DEFAULT_ERROR_MARKERS = ("❌",)
DEFAULT_WARNING_MARKERS = ("⚠️", "⚠")

ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")
VARIATION_SELECTOR = "\ufe0f"

# /path/to/File.swift:10:5: message
FILE_POSITION_PATTERN = re.compile(r"^([^:]+):(\d+):(\d+):\s*(.*)$")
# error: message / warning: message
BARE_PREFIX_PATTERN = re.compile(r"^(?:error|warning):\s*(.*)$")


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Issue:
    """
    One diagnostic from a build.

    Two issues with the same key are the same issue, no matter how many
    times they show up in the output.
    """
    severity: Severity
    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    def __post_init__(self):
        if not self.message or not self.message.strip():
            raise ValueError("Build issue message cannot be empty")
        if (self.line is not None or self.column is not None) and self.file is None:
            raise ValueError("Build issue line/column requires a file")
        if self.line is not None and self.line < 1:
            raise ValueError("Line number must be positive")
        if self.column is not None and self.column < 1:
            raise ValueError("Column number must be positive")

    @classmethod
    def error(cls, message: str, file: Optional[str] = None,
              line: Optional[int] = None, column: Optional[int] = None) -> "Issue":
        return cls(Severity.ERROR, message, file, line, column)

    @classmethod
    def warning(cls, message: str, file: Optional[str] = None,
                line: Optional[int] = None, column: Optional[int] = None) -> "Issue":
        return cls(Severity.WARNING, message, file, line, column)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    @property
    def has_location(self) -> bool:
        return self.file is not None

    @property
    def key(self) -> str:
        return f"{self.severity.value}:{self.file or ''}:{self.line or 0}:{self.column or 0}:{self.message}"

    def __str__(self) -> str:
        if self.file is None:
            return self.message
        if self.line is None:
            return f"{self.file}: {self.message}"
        return f"{self.file}:{self.line}:{self.column}: {self.message}"


@dataclass
class ParsedOutput:
    """Issues from one build's output, in first-seen order"""
    issues: List[Issue] = field(default_factory=list)

    @property
    def errors(self) -> List[Issue]:
        return [issue for issue in self.issues if issue.is_error]

    @property
    def warnings(self) -> List[Issue]:
        return [issue for issue in self.issues if issue.is_warning]


class IssueCollection:
    """Ordered, deduplicating set of issues keyed by Issue.key"""

    def __init__(self):
        self._issues: Dict[str, Issue] = {}

    def add(self, issue: Issue) -> bool:
        """Add an issue; returns False if an identical issue was already present"""
        if issue.key in self._issues:
            return False
        self._issues[issue.key] = issue
        return True

    def __len__(self) -> int:
        return len(self._issues)

    def __iter__(self) -> Iterator[Issue]:
        return iter(self._issues.values())

    def to_list(self) -> List[Issue]:
        return list(self._issues.values())


def strip_ansi(text: str) -> str:
    """Remove ANSI color escape sequences"""
    return ANSI_ESCAPE_PATTERN.sub("", text)


def _longest_first(markers: Sequence[str]) -> Tuple[str, ...]:
    return tuple(sorted((m for m in markers if m), key=len, reverse=True))


class IssueLineParser:
    """
    Turns one marker-prefixed line of beautified output into an Issue.

    A line that cannot be structured still becomes a message-only issue, so
    no diagnostic is dropped.
    """

    def __init__(self,
                 error_markers: Sequence[str] = DEFAULT_ERROR_MARKERS,
                 warning_markers: Sequence[str] = DEFAULT_WARNING_MARKERS):
        self.markers = {
            Severity.ERROR: _longest_first(error_markers),
            Severity.WARNING: _longest_first(warning_markers),
        }

    def detect_severity(self, line: str) -> Optional[Severity]:
        """Return the severity implied by the line's leading marker, if any"""
        text = strip_ansi(line).lstrip()
        # Errors win when a marker happens to prefix another
        for severity in (Severity.ERROR, Severity.WARNING):
            if any(text.startswith(marker) for marker in self.markers[severity]):
                return severity
        return None

    def strip_marker(self, line: str, severity: Severity) -> str:
        text = strip_ansi(line).strip()
        for marker in self.markers[severity]:
            if text.startswith(marker):
                text = text[len(marker):]
                break
        # A bare "⚠" marker can leave its variation selector behind
        return text.lstrip(VARIATION_SELECTOR).strip()

    def parse(self, line: str, severity: Severity) -> Optional[Issue]:
        text = self.strip_marker(line, severity)
        if not text:
            return None

        match = FILE_POSITION_PATTERN.match(text)
        if match:
            file_path, line_str, column_str, message = match.groups()
            try:
                return Issue(severity, message.strip(), file_path, int(line_str, 10), int(column_str, 10))
            except ValueError:
                # Zero positions or an empty message; keep the whole line below
                pass

        match = BARE_PREFIX_PATTERN.match(text)
        if match and match.group(1).strip():
            return Issue(severity, match.group(1).strip())

        return Issue(severity, text)
