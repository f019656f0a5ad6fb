"""
Azure DevOps branch reference operations.
"""

import logging
from typing import List, Optional

from application.services.ado.api.client import AdoAPIClient
from application.services.ado.models.types import ZERO_OBJECT_ID, BranchRef
from common.exception.exceptions import AdoAPIError, SourceBranchNotFoundError

logger = logging.getLogger(__name__)


class RefOperations:
    """Handles branch lookup and creation."""

    def __init__(self, client: AdoAPIClient):
        self.client = client

    async def get_branch(self, branch_name: str) -> Optional[BranchRef]:
        """Get the head reference of a branch.

        Returns:
            BranchRef, or None when the branch does not exist
        """
        full_name = f"refs/heads/{branch_name}"
        response = await self.client.request("GET", "refs", params={"filter": f"heads/{branch_name}"})
        data = self.client.json_or_error(response, "get branch")

        # The filter is a prefix match; "main" also returns "main-old"
        for ref in data.get("value", []):
            if ref.get("name") == full_name:
                return BranchRef.from_api(ref)
        return None

    async def list_branches(self) -> List[str]:
        response = await self.client.request("GET", "refs", params={"filter": "heads/"})
        data = self.client.json_or_error(response, "list branches")
        return [ref["name"].replace("refs/heads/", "", 1) for ref in data.get("value", [])]

    async def create_branch(self, new_branch_name: str, source_branch_name: str) -> BranchRef:
        """Create a branch pointing at the head of another branch.

        Raises:
            SourceBranchNotFoundError: If the source branch does not exist
            AdoAPIError: If the server rejects the ref update
        """
        source_ref = await self.get_branch(source_branch_name)
        if source_ref is None:
            raise SourceBranchNotFoundError(source_branch_name)

        body = [{
            "name": f"refs/heads/{new_branch_name}",
            "oldObjectId": ZERO_OBJECT_ID,
            "newObjectId": source_ref.object_id,
        }]
        response = await self.client.request("POST", "refs", data=body)
        data = self.client.json_or_error(response, "create branch")

        results = data.get("value") or []
        if not results:
            raise AdoAPIError("Failed to create branch: empty response", status_code=response.status_code)
        result = results[0]
        if result.get("success") is False:
            raise AdoAPIError(
                f"Failed to create branch: {result.get('updateStatus') or result.get('customMessage')}",
                status_code=response.status_code,
                detail=str(result),
            )

        logger.info(f"Branch {new_branch_name} created from {source_branch_name} at {source_ref.object_id[:7]}")
        return BranchRef(
            name=result.get("name", f"refs/heads/{new_branch_name}"),
            object_id=result.get("newObjectId", source_ref.object_id),
            url=result.get("url", ""),
        )
