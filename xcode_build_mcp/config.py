#!/usr/bin/env python3
"""Process-wide settings - initialized by CLI and environment"""

import os
import sys
from typing import List, Optional, Sequence

from xcode_build_mcp.exceptions import InvalidParameterError
from xcode_build_mcp.utils.build_errors import DEFAULT_PRIORITY, DETECTORS
from xcode_build_mcp.utils.issues import DEFAULT_ERROR_MARKERS, DEFAULT_WARNING_MARKERS

# Global build warning settings
BUILD_WARNINGS_ENABLED = True
BUILD_WARNINGS_FORCED = None  # True if forced on, False if forced off, None if not forced

# xcresult bundle readiness polling (seconds)
XCRESULT_WAIT_TIMEOUT = 10.0
XCRESULT_POLL_INTERVAL = 0.2
XCRESULT_SETTLE_DELAY = 0.3
XCRESULTTOOL_TIMEOUT = 60

# Classifier detector order, first match wins
CLASSIFIER_PRIORITY: List[str] = list(DEFAULT_PRIORITY)

# Severity markers recognised at the start of beautified lines
ERROR_MARKERS: List[str] = list(DEFAULT_ERROR_MARKERS)
WARNING_MARKERS: List[str] = list(DEFAULT_WARNING_MARKERS)


def set_build_warnings_enabled(enabled: bool, forced: bool = False):
    """Set the global build warnings setting"""
    global BUILD_WARNINGS_ENABLED, BUILD_WARNINGS_FORCED
    BUILD_WARNINGS_ENABLED = enabled
    BUILD_WARNINGS_FORCED = enabled if forced else None


def should_include_warnings(include_warnings: Optional[bool] = None) -> bool:
    """
    Decide whether warnings are shown.

    Command-line flags override the tool parameter (user control > LLM control).
    """
    if BUILD_WARNINGS_FORCED is not None:
        return BUILD_WARNINGS_FORCED
    return include_warnings if include_warnings is not None else BUILD_WARNINGS_ENABLED


def set_classifier_priority(names: Sequence[str]):
    """
    Set the order in which build error detectors are tried.

    Raises:
        InvalidParameterError: If a name is unknown, repeated, or the list is empty
    """
    global CLASSIFIER_PRIORITY
    cleaned = [name.strip() for name in names if name and name.strip()]
    if not cleaned:
        raise InvalidParameterError("Classifier priority list cannot be empty")

    unknown = [name for name in cleaned if name not in DETECTORS]
    if unknown:
        raise InvalidParameterError(
            f"Unknown classifier detector(s): {', '.join(unknown)}. "
            f"Known detectors: {', '.join(DETECTORS)}"
        )
    if len(set(cleaned)) != len(cleaned):
        raise InvalidParameterError("Classifier priority list contains duplicates")

    CLASSIFIER_PRIORITY = cleaned


def set_markers(error_markers: Optional[Sequence[str]] = None,
                warning_markers: Optional[Sequence[str]] = None):
    """Replace the severity markers used to detect beautified issue lines"""
    global ERROR_MARKERS, WARNING_MARKERS
    if error_markers is not None:
        markers = [m for m in error_markers if m]
        if not markers:
            raise InvalidParameterError("At least one error marker is required")
        ERROR_MARKERS = markers
    if warning_markers is not None:
        markers = [m for m in warning_markers if m]
        if not markers:
            raise InvalidParameterError("At least one warning marker is required")
        WARNING_MARKERS = markers


def _float_from_env(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        raise InvalidParameterError(f"{name} must be a number, got '{value}'")
    if parsed < 0:
        raise InvalidParameterError(f"{name} must be >= 0, got '{value}'")
    return parsed


def load_from_environment():
    """
    Apply XCODEMCP_* environment overrides.

    Raises:
        InvalidParameterError: If an override is malformed
    """
    global XCRESULT_WAIT_TIMEOUT, XCRESULT_POLL_INTERVAL

    XCRESULT_WAIT_TIMEOUT = _float_from_env("XCODEMCP_XCRESULT_WAIT_TIMEOUT", XCRESULT_WAIT_TIMEOUT)
    XCRESULT_POLL_INTERVAL = _float_from_env("XCODEMCP_XCRESULT_POLL_INTERVAL", XCRESULT_POLL_INTERVAL)

    priority = os.environ.get("XCODEMCP_CLASSIFIER_PRIORITY")
    if priority:
        print(f"Using classifier priority from environment: {priority}", file=sys.stderr)
        set_classifier_priority(priority.split(","))

    error_markers = os.environ.get("XCODEMCP_ERROR_MARKERS")
    warning_markers = os.environ.get("XCODEMCP_WARNING_MARKERS")
    set_markers(
        error_markers.split(",") if error_markers else None,
        warning_markers.split(",") if warning_markers else None,
    )
