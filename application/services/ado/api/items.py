"""
Azure DevOps repository item operations (path listing and file contents).
"""

import logging
from typing import Any, Dict, Optional

from application.services.ado.api.client import AdoAPIClient
from application.services.ado.models.types import RepositoryPathIndex

logger = logging.getLogger(__name__)

CONTINUATION_HEADER = "x-ms-continuationtoken"


class ItemOperations:
    """Handles item listing and file reads on a branch."""

    def __init__(self, client: AdoAPIClient):
        self.client = client

    async def list_existing_paths(self, branch_name: str) -> RepositoryPathIndex:
        """List every file path on a branch.

        Pages are requested until the server stops sending a continuation
        token header. Folders are skipped.

        Args:
            branch_name: Branch to list

        Returns:
            Case-insensitive path index; empty when the branch does not exist

        Raises:
            AdoAPIError: For any other non-2xx response
        """
        index = RepositoryPathIndex()
        continuation_token: Optional[str] = None
        page = 0

        while True:
            params: Dict[str, Any] = {
                "recursionLevel": "Full",
                "includeContent": "false",
                "versionDescriptor.version": branch_name,
                "versionDescriptor.versionType": "branch",
            }
            if continuation_token:
                params["continuationToken"] = continuation_token

            response = await self.client.request("GET", "items", params=params)
            if response.status_code == 404:
                logger.info(f"Branch {branch_name} not found while listing items, treating as empty")
                return RepositoryPathIndex()

            data = self.client.json_or_error(response, "list repository items")
            for item in data.get("value", []):
                if item.get("isFolder") or not item.get("path"):
                    continue
                index.add(item["path"])

            page += 1
            continuation_token = response.headers.get(CONTINUATION_HEADER)
            if not continuation_token:
                break
            logger.debug(f"Fetched item page {page} for {branch_name}, continuing")

        logger.info(f"Indexed {len(index)} existing files on {branch_name}")
        return index

    async def get_file_content(self, branch_name: str, path: str) -> Optional[str]:
        """Get the text content of a file on a branch.

        Returns:
            File content, or None when the file does not exist
        """
        params = {
            "path": path,
            "includeContent": "true",
            "versionDescriptor.version": branch_name,
            "versionDescriptor.versionType": "branch",
        }
        response = await self.client.request("GET", "items", params=params)
        if response.status_code == 404:
            return None

        data = self.client.json_or_error(response, "get file content")
        return data.get("content")
