"""
Shared types and models for Azure DevOps git operations.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional

ZERO_OBJECT_ID = "0" * 40


def normalize_repo_path(path: str) -> str:
    """Collapse repeated separators and force a single leading ``/``."""
    collapsed = re.sub(r"/+", "/", path.replace("\\", "/"))
    return collapsed if collapsed.startswith("/") else f"/{collapsed}"


class ChangeType(str, Enum):
    ADD = "add"
    EDIT = "edit"


@dataclass(frozen=True)
class BranchRef:
    name: str
    object_id: str
    url: str = ""

    @property
    def short_name(self) -> str:
        return self.name[len("refs/heads/"):] if self.name.startswith("refs/heads/") else self.name

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "BranchRef":
        return cls(
            name=data.get("name", ""),
            object_id=data.get("objectId") or data.get("newObjectId", ""),
            url=data.get("url", ""),
        )


@dataclass(frozen=True)
class PendingChange:
    change_type: ChangeType
    path: str
    content_base64: str = field(repr=False)

    def to_api(self) -> Dict[str, Any]:
        return {
            "changeType": self.change_type.value,
            "item": {"path": self.path},
            "newContent": {"content": self.content_base64, "contentType": "base64Encoded"},
        }


@dataclass(frozen=True)
class PushResult:
    push_id: Optional[int]
    commit_id: Optional[str]
    ref_name: Optional[str]
    url: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PushResult":
        commits = data.get("commits") or [{}]
        ref_updates = data.get("refUpdates") or [{}]
        return cls(
            push_id=data.get("pushId"),
            commit_id=commits[-1].get("commitId"),
            ref_name=ref_updates[0].get("name"),
            url=data.get("url"),
        )


@dataclass(frozen=True)
class CommitAuthor:
    name: str
    email: str
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_api(self) -> Dict[str, str]:
        return {"name": self.name, "email": self.email, "date": self.date.isoformat()}


class RepositoryPathIndex:
    """Case-insensitive set of file paths in a branch snapshot.

    Maps the lower-cased absolute path to the path as the repository spells it,
    so edits keep the existing casing instead of creating a sibling file.
    """

    def __init__(self, paths: Iterable[str] = ()):
        self._paths: Dict[str, str] = {}
        for path in paths:
            self.add(path)

    def add(self, path: str) -> None:
        normalized = normalize_repo_path(path)
        self._paths[normalized.lower()] = normalized

    def resolve(self, path: str) -> Optional[str]:
        """Existing spelling of ``path``, or None when absent."""
        return self._paths.get(normalize_repo_path(path).lower())

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.resolve(path) is not None

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths.values())

    def __repr__(self) -> str:
        return f"RepositoryPathIndex({len(self)} paths)"
