#!/usr/bin/env python3
"""Allowed-folder access control for paths handed to tools"""

import logging
import os
import sys
from typing import List, Optional, Set

from xcode_build_mcp.exceptions import AccessDeniedError, InvalidParameterError

logger = logging.getLogger(__name__)

# Initialized by CLI
ALLOWED_FOLDERS: Set[str] = set()


def get_allowed_folders(command_line_folders: Optional[List[str]] = None) -> Set[str]:
    """
    Get the allowed folders from environment variable and command line.
    Validates that paths are absolute, exist, and are directories.

    Args:
        command_line_folders: List of folders provided via command line

    Returns:
        Set of validated folder paths
    """
    allowed_folders = set()
    folders_to_process = []

    # Get from environment variable
    folder_list_str = os.environ.get("XCODEMCP_ALLOWED_FOLDERS")

    if folder_list_str:
        print(f"Using allowed folders from environment: {folder_list_str}", file=sys.stderr)
        folders_to_process.extend(folder_list_str.split(":"))

    # Add command line folders
    if command_line_folders:
        print(f"Adding {len(command_line_folders)} folder(s) from command line", file=sys.stderr)
        folders_to_process.extend(command_line_folders)

    # If no folders specified, use $HOME
    if not folders_to_process:
        home = os.environ.get("HOME", "/")
        print(f"No allowed folders specified, using default: $HOME = {home}", file=sys.stderr)
        folders_to_process = [home]

    for folder in folders_to_process:
        folder = folder.rstrip("/")

        if not folder:
            print("Warning: Skipping empty folder entry", file=sys.stderr)
            continue

        if not os.path.isabs(folder):
            print(f"Warning: Skipping non-absolute path: {folder}", file=sys.stderr)
            continue

        if ".." in folder.split("/"):
            print(f"Warning: Skipping path with '..' components: {folder}", file=sys.stderr)
            continue

        if not os.path.isdir(folder):
            print(f"Warning: Skipping missing or non-directory path: {folder}", file=sys.stderr)
            continue

        allowed_folders.add(folder)
        print(f"Added allowed folder: {folder}", file=sys.stderr)

    return allowed_folders


def set_allowed_folders(folders: Set[str]):
    global ALLOWED_FOLDERS
    ALLOWED_FOLDERS = set(folders)


def is_path_allowed(path: str) -> bool:
    """
    Check if a path is allowed based on the allowed folders list.
    Path must be a subfolder or direct match of an allowed folder.
    """
    if not path:
        return False

    # If no allowed folders are specified, nothing is allowed
    if not ALLOWED_FOLDERS:
        logger.debug("ALLOWED_FOLDERS is empty, denying access")
        return False

    path = os.path.abspath(path).rstrip("/")

    for allowed_folder in ALLOWED_FOLDERS:
        if path == allowed_folder or path.startswith(allowed_folder + "/"):
            logger.debug("%s allowed by %s", path, allowed_folder)
            return True

    logger.debug("No allowed folder matches %s", path)
    return False


def validate_result_bundle_path(bundle_path: str) -> str:
    """
    Validate and normalize an .xcresult bundle path.

    The bundle may not exist yet; xcodebuild can still be writing it.

    Raises:
        InvalidParameterError: If the path is empty or not an .xcresult bundle
        AccessDeniedError: If the path is outside the allowed folders
    """
    if not bundle_path or bundle_path.strip() == "":
        raise InvalidParameterError("result_bundle_path cannot be empty")

    bundle_path = bundle_path.strip().rstrip("/")

    if not bundle_path.endswith(".xcresult"):
        raise InvalidParameterError("result_bundle_path must end with '.xcresult'")

    if not is_path_allowed(bundle_path):
        raise AccessDeniedError(
            f"Access to path '{bundle_path}' is not allowed. Set XCODEMCP_ALLOWED_FOLDERS environment variable."
        )

    return os.path.abspath(bundle_path)
