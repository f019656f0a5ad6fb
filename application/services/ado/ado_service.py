"""
Main Azure DevOps Service - facade for the commit side of a sync.

This service provides a single entry point for:
- Branch lookup, listing and creation
- Existing path listing and file reads
- Atomic multi-file commit pushes
"""

from typing import List, Optional, Sequence

from application.models.sync_config import SyncConfig
from application.services.ado.api.client import AdoAPIClient
from application.services.ado.api.items import ItemOperations
from application.services.ado.api.pushes import PushOperations
from application.services.ado.api.refs import RefOperations
from application.services.ado.models.types import (
    BranchRef,
    CommitAuthor,
    PendingChange,
    PushResult,
    RepositoryPathIndex,
)


class AdoGitService:
    """
    Unified Azure DevOps git service used by the sync orchestrator.

    One instance targets one repository; it holds no branch state between calls.
    """

    def __init__(self, client: AdoAPIClient):
        """Initialize Azure DevOps service.

        Args:
            client: API client bound to one repository
        """
        self.api_client = client
        self.refs = RefOperations(client=client)
        self.items = ItemOperations(client=client)
        self.pushes = PushOperations(client=client)

    @classmethod
    def from_config(cls, config: SyncConfig, **client_kwargs) -> "AdoGitService":
        return cls(AdoAPIClient(config.org, config.project, config.repo, config.pat, **client_kwargs))

    async def get_branch(self, branch_name: str) -> Optional[BranchRef]:
        return await self.refs.get_branch(branch_name)

    async def list_branches(self) -> List[str]:
        return await self.refs.list_branches()

    async def create_branch(self, new_branch_name: str, source_branch_name: str) -> BranchRef:
        return await self.refs.create_branch(new_branch_name, source_branch_name)

    async def list_existing_paths(self, branch_name: str) -> RepositoryPathIndex:
        return await self.items.list_existing_paths(branch_name)

    async def get_file_content(self, branch_name: str, path: str) -> Optional[str]:
        return await self.items.get_file_content(branch_name, path)

    async def push_commit(
        self,
        branch_name: str,
        expected_head_object_id: str,
        changes: Sequence[PendingChange],
        author: Optional[CommitAuthor],
        message: str,
    ) -> PushResult:
        return await self.pushes.push_commit(
            branch_name, expected_head_object_id, changes, author, message
        )
