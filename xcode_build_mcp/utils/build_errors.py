#!/usr/bin/env python3
"""Classification of failed xcodebuild / swift output into a single BuildError"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from xcode_build_mcp.utils.issues import strip_ansi

logger = logging.getLogger(__name__)

XCODEBUILD_ERROR = "xcodebuild: error:"


class BuildErrorKind(str, Enum):
    COMPILE = "compile"
    SCHEME = "scheme"
    SIGNING = "signing"
    PROVISIONING = "provisioning"
    DEPENDENCY = "dependency"
    CONFIGURATION = "configuration"
    SDK = "sdk"
    DESTINATION = "destination"
    TARGET = "target"
    PRODUCT = "product"
    MANIFEST = "manifest"
    GENERIC = "generic"


@dataclass(frozen=True)
class BuildError:
    """One categorized, higher-level build failure"""
    kind: BuildErrorKind
    title: str
    details: Optional[str] = None
    suggestion: Optional[str] = None


def _search(pattern: str, text: str, flags: int = re.IGNORECASE) -> Optional[re.Match]:
    return re.search(pattern, text, flags)


def _group(pattern: str, text: str, flags: int = re.IGNORECASE) -> Optional[str]:
    match = re.search(pattern, text, flags)
    return match.group(1) if match else None


def detect_scheme(text: str) -> Optional[BuildError]:
    # The tool error and the word "scheme" must be on the same line
    if not _search(r"xcodebuild:\s*error:.*scheme", text):
        return None
    name = _group(r'xcodebuild:\s*error:.*?scheme(?:\s+named)?\s+"([^"]+)"', text)
    return BuildError(
        BuildErrorKind.SCHEME,
        f'Scheme not found: "{name}"' if name else "Scheme not found",
        "The specified scheme does not exist in the project",
        'Check available schemes with "xcodebuild -list"',
    )


def detect_signing(text: str) -> Optional[BuildError]:
    if not _search(r"code\s*sign(?:ing)?\s*error|no signing certificate", text):
        return None
    identity = _group(r'signing (?:identity|certificate)\s+"([^"]+)"', text)
    return BuildError(
        BuildErrorKind.SIGNING,
        "Code signing failed",
        f'Missing signing identity: "{identity}"' if identity else "No valid signing certificate found",
        "Check your Keychain for valid certificates or use automatic signing",
    )


def detect_provisioning(text: str) -> Optional[BuildError]:
    if not _search(r"provisioning profile.*not found|no provisioning profile|requires a provisioning profile"
                   r"|doesn't support the .+? capability", text):
        return None
    profile = _group(r'provisioning profile\s+"([^"]+)"', text)
    capability = _group(r"doesn't support the (.+?) capability", text)
    if profile:
        details = f'Profile "{profile}" not found or invalid'
    elif capability:
        details = f"Profile doesn't support {capability} capability"
    else:
        details = "No valid provisioning profile found"
    return BuildError(
        BuildErrorKind.PROVISIONING,
        "Provisioning profile issue",
        details,
        "Check your Apple Developer account or use automatic provisioning",
    )


def detect_dependency(text: str) -> Optional[BuildError]:
    if "Failed to clone repository" in text:
        url = (_group(r"Failed to clone repository (https?://[^\s:']+)", text, 0)
               or _group(r"(https?://[^\s:']+)", text, 0))
        return BuildError(
            BuildErrorKind.DEPENDENCY,
            "Failed to clone repository",
            f"Could not fetch dependency from {url or 'unknown repository'}",
            "Verify the repository URL exists and is accessible",
        )

    if "fatal: repository" in text and "not found" in text:
        url = _group(r"repository '([^']+)' not found", text, 0)
        return BuildError(
            BuildErrorKind.DEPENDENCY,
            "Repository not found",
            f"Repository {url or 'unknown repository'} does not exist",
            "Check the package URL in Package.swift dependencies",
        )

    if "unknown package" in text and "in dependencies" in text:
        package = _group(r"unknown package '([^']+)'", text, 0)
        return BuildError(
            BuildErrorKind.DEPENDENCY,
            "Unknown package in dependencies",
            f"Package '{package or 'unknown'}' is not defined in Package.swift",
            "Ensure the package is listed in the Package dependencies array",
        )

    if _search(r"dependencies could not be resolved", text):
        return BuildError(
            BuildErrorKind.DEPENDENCY,
            "Dependency resolution failed",
            "Swift Package Manager could not resolve package dependencies",
            'Run "swift package resolve" to see detailed errors',
        )

    if not _search(r"no such module|cannot find.*in scope|unresolved identifier", text):
        return None
    module = _group(r"no such module\s+['\"]([^'\"]+)['\"]", text)
    return BuildError(
        BuildErrorKind.DEPENDENCY,
        "Missing dependency",
        f"Module '{module}' not found" if module else "Required dependency is missing",
        'Run "swift package resolve" or check your Package.swift/Podfile',
    )


def detect_configuration(text: str) -> Optional[BuildError]:
    if not _search(r"configuration.*not found|invalid configuration", text):
        return None
    name = _group(r'configuration\s+"([^"]+)"', text)
    return BuildError(
        BuildErrorKind.CONFIGURATION,
        "Configuration error",
        f'Configuration "{name}" not found' if name else "Invalid build configuration",
        "Use Debug or Release, or check project for custom configurations",
    )


def detect_manifest(text: str) -> Optional[BuildError]:
    if not _search(r"manifest parse error|invalid manifest", text):
        return None
    return BuildError(
        BuildErrorKind.MANIFEST,
        "Package.swift parse error",
        "The Package.swift file contains syntax errors",
        "Check Package.swift for syntax errors",
    )


def detect_target(text: str) -> Optional[BuildError]:
    if "no such target" not in text:
        return None
    target = _group(r"no such target '([^']+)'", text, 0)
    return BuildError(
        BuildErrorKind.TARGET,
        f"Target not found: {target or 'unknown'}",
        "The specified target does not exist in Package.swift",
        'Check available targets with "swift package describe"',
    )


def detect_product(text: str) -> Optional[BuildError]:
    if "no such product" not in text:
        return None
    product = _group(r"no such product '([^']+)'", text, 0)
    return BuildError(
        BuildErrorKind.PRODUCT,
        f"Product not found: {product or 'unknown'}",
        "The specified product does not exist in Package.swift",
        'Check available products with "swift package describe"',
    )


def _sdk_not_installed(fragment: str) -> BuildError:
    sdk = _group(r"(\w+\s+[\d.]+)\s+is not installed", fragment, 0)
    return BuildError(
        BuildErrorKind.SDK,
        "SDK not installed",
        f"{sdk or 'Required SDK'} SDK is not installed",
        "Install via: xcodebuild -downloadPlatform iOS or Xcode > Settings > Platforms",
    )


def detect_destination(text: str) -> Optional[BuildError]:
    if "is not installed. To use with Xcode, first download and install the platform" in text:
        return _sdk_not_installed(text)

    if "Unable to find a destination matching" in text:
        ineligible = text.split("Ineligible destinations", 1)
        if len(ineligible) == 2 and "is not installed" in ineligible[1]:
            return _sdk_not_installed(ineligible[1])
        return BuildError(
            BuildErrorKind.DESTINATION,
            "No valid destination found",
            "Unable to find a valid destination for building",
            'Check available simulators with "xcrun simctl list devices" or use a different platform',
        )

    if not _search(r"platform.*not supported|unsupported platform|invalid destination|no destinations", text):
        return None
    platform = _group(r"platform\s+'([^']+)'", text)
    return BuildError(
        BuildErrorKind.DESTINATION,
        "Platform/Destination error",
        f"Platform '{platform}' not supported by scheme" if platform else "Invalid or unsupported destination",
        "Check scheme settings or use a different platform",
    )


def detect_project(text: str) -> Optional[BuildError]:
    # Accessibility framework URL-loading noise mentions paths that "do not exist"
    if "[AXLoading]" in text:
        return None
    if not _search(r"workspace.*does not exist|\.xcodeproj.*does not exist|\.xcworkspace.*does not exist"
                   r"|could not find.*\.(?:xcodeproj|xcworkspace)", text):
        return None
    return BuildError(
        BuildErrorKind.CONFIGURATION,
        "Project not found",
        "The specified project or workspace file does not exist",
        "Check the file path and ensure the project exists",
    )


def detect_generic(text: str) -> Optional[BuildError]:
    message = _group(r"xcodebuild: error:\s*(.+)", text, 0)
    if not message or not message.strip():
        return None
    return BuildError(BuildErrorKind.GENERIC, "Build failed", message.strip())


def detect_failed_commands(text: str) -> Optional[BuildError]:
    marker = "The following build commands failed:"
    if marker not in text:
        return None
    listing = text.split(marker, 1)[1].splitlines()
    commands = [line.strip() for line in listing if line.strip()][:3]
    if not commands:
        return None
    return BuildError(BuildErrorKind.GENERIC, "Build commands failed", "\n".join(commands))


DETECTORS: Dict[str, Callable[[str], Optional[BuildError]]] = {
    "scheme": detect_scheme,
    "signing": detect_signing,
    "provisioning": detect_provisioning,
    "dependency": detect_dependency,
    "configuration": detect_configuration,
    "destination": detect_destination,
    "project": detect_project,
    "manifest": detect_manifest,
    "target": detect_target,
    "product": detect_product,
    "generic": detect_generic,
    "failed_commands": detect_failed_commands,
}

DEFAULT_PRIORITY = tuple(DETECTORS)


class BuildErrorClassifier:
    """
    Picks the single most relevant BuildError for a failed command.

    Detectors run in priority order over the ANSI-stripped output and the
    first one that matches wins. No match is a valid, unclassified outcome.
    """

    def __init__(self, priority: Sequence[str] = DEFAULT_PRIORITY):
        unknown = [name for name in priority if name not in DETECTORS]
        if unknown:
            raise ValueError(f"Unknown build error detector(s): {', '.join(unknown)}")
        if len(set(priority)) != len(priority):
            raise ValueError("Build error detector priority contains duplicates")
        self.priority: List[str] = list(priority)

    def classify(self, output: str) -> Optional[BuildError]:
        if not isinstance(output, str):
            raise TypeError(f"Build output must be a string, got {type(output).__name__}")

        text = strip_ansi(output)
        for name in self.priority:
            error = DETECTORS[name](text)
            if error is not None:
                logger.debug("Build output classified by '%s' detector: %s", name, error.title)
                return error

        logger.debug("No build error detector matched")
        return None
