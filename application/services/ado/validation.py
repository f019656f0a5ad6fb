"""Validation functions for branch names and repository paths."""

import logging
import re

from common.exception.exceptions import ValidationError

logger = logging.getLogger(__name__)

_INVALID_BRANCH_CHARS = re.compile(r"[~^:?*\[\]\\]")
_INVALID_PATH_CHARS = re.compile(r'[<>:"|?*]')


def validate_branch_name(branch_name: str) -> str:
    """Validate a git branch name.

    Args:
        branch_name: Branch name to check

    Returns:
        The branch name with surrounding whitespace removed

    Raises:
        ValidationError: If the name is empty or not a legal ref name
    """
    name = (branch_name or "").strip()
    if not name:
        raise ValidationError("Branch name is required")
    if _INVALID_BRANCH_CHARS.search(name):
        raise ValidationError(f"Branch name contains invalid characters: {name}")
    if name.startswith(".") or name.endswith("."):
        raise ValidationError(f"Branch name cannot start or end with a dot: {name}")
    if ".." in name:
        raise ValidationError(f"Branch name cannot contain consecutive dots: {name}")
    return name


def validate_file_path(path: str) -> str:
    """Validate a repository file path.

    Raises:
        ValidationError: If the path is empty or contains invalid characters
    """
    cleaned = (path or "").strip()
    if not cleaned:
        raise ValidationError("File path is required")
    if _INVALID_PATH_CHARS.search(cleaned):
        raise ValidationError(f"File path contains invalid characters: {cleaned}")
    return cleaned
