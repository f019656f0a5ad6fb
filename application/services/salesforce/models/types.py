"""
Shared types and models for Salesforce operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class RetrieveState(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    FAILED = "Failed"


@dataclass(frozen=True)
class SessionCookie:
    domain: str
    value: str
    name: str = "sid"


@dataclass(frozen=True)
class SalesforceSession:
    server_url: str
    session_id: str = field(repr=False)

    @property
    def instance_name(self) -> str:
        """First hostname label, e.g. ``mydomain`` for mydomain.my.salesforce.com."""
        host = self.server_url.split("://", 1)[-1].split("/", 1)[0]
        return host.split(".")[0] or "unknown-instance"


@dataclass(frozen=True)
class PackageType:
    name: str
    members: Tuple[str, ...]


@dataclass(frozen=True)
class PackageDescriptor:
    types: Tuple[PackageType, ...]
    version: str


@dataclass
class RetrieveJob:
    async_id: str
    state: str = RetrieveState.PENDING.value


@dataclass(frozen=True)
class RetrieveStatus:
    done: bool
    state: str

    @property
    def succeeded(self) -> bool:
        return self.done and self.state == RetrieveState.COMPLETED.value


@dataclass(frozen=True)
class ExtractedFile:
    """A file unpacked from a retrieve archive."""

    path: str
    text_content: str = field(repr=False)
    binary_content: str = field(repr=False)  # base64


@dataclass(frozen=True)
class SalesforceUser:
    name: Optional[str]
    email: Optional[str]


@dataclass
class ExtractedArchive:
    files: List[ExtractedFile]
    test_classes: List[str]
