"""
Azure DevOps push operations: one atomic commit per push.
"""

import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from application.services.ado.api.client import AdoAPIClient
from application.services.ado.models.types import CommitAuthor, PendingChange, PushResult
from common.exception.exceptions import PushRejectedError, StaleReferenceError

logger = logging.getLogger(__name__)

STALE_TYPE_KEY = "GitReferenceStaleException"
STALE_ERROR_CODE = "TF401028"


def _error_payload(response: httpx.Response) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def classify_push_failure(response: httpx.Response) -> PushRejectedError:
    """Build the error for a failed push from its response.

    A ref update whose ``oldObjectId`` no longer matches the branch head comes
    back as ``GitReferenceStaleException`` (message prefixed ``TF401028``).
    """
    payload = _error_payload(response)
    server_message = payload.get("message") or response.text[:500]
    type_key = payload.get("typeKey", "")

    message = f"Push failed: {response.status_code} {server_message}"
    if type_key == STALE_TYPE_KEY or STALE_ERROR_CODE in response.text:
        return StaleReferenceError(message, status_code=response.status_code, detail=server_message)
    return PushRejectedError(message, status_code=response.status_code, detail=server_message)


class PushOperations:
    """Handles commit pushes."""

    def __init__(self, client: AdoAPIClient):
        self.client = client

    async def push_commit(
        self,
        branch_name: str,
        expected_head_object_id: str,
        changes: Sequence[PendingChange],
        author: Optional[CommitAuthor],
        message: str,
    ) -> PushResult:
        """Push all changes as a single commit.

        Args:
            branch_name: Target branch
            expected_head_object_id: Head the branch must still point to
            changes: Files to add or edit
            author: Commit author (server default when None)
            message: Commit message

        Returns:
            PushResult of the accepted push

        Raises:
            StaleReferenceError: If the branch head moved
            PushRejectedError: For any other rejection
        """
        commit: Dict[str, Any] = {
            "comment": message,
            "changes": [change.to_api() for change in changes],
        }
        if author is not None:
            commit["author"] = author.to_api()

        body = {
            "refUpdates": [{
                "name": f"refs/heads/{branch_name}",
                "oldObjectId": expected_head_object_id,
            }],
            "commits": [commit],
        }

        logger.info(
            f"Pushing {len(changes)} changes to {branch_name} "
            f"(expected head {expected_head_object_id[:7]})"
        )
        response = await self.client.request("POST", "pushes", data=body, idempotent=False)
        if not response.is_success:
            error = classify_push_failure(response)
            logger.error(f"{error.code}: {error.message}")
            raise error

        result = PushResult.from_api(_error_payload(response))
        logger.info(f"✅ Push {result.push_id} accepted, commit {result.commit_id}")
        return result
