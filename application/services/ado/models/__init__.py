"""
Azure DevOps Models Module

Shared types, enums, and dataclasses for Azure DevOps git operations.
"""

from application.services.ado.models.types import (
    ZERO_OBJECT_ID,
    BranchRef,
    ChangeType,
    CommitAuthor,
    PendingChange,
    PushResult,
    RepositoryPathIndex,
    normalize_repo_path,
)

__all__ = [
    "ZERO_OBJECT_ID",
    "BranchRef",
    "ChangeType",
    "CommitAuthor",
    "PendingChange",
    "PushResult",
    "RepositoryPathIndex",
    "normalize_repo_path",
]
