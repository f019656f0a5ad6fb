"""Push with retry on stale branch reference."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from application.services.ado.ado_service import AdoGitService
from application.services.ado.models.types import CommitAuthor, PendingChange, PushResult
from common.config.config import MAX_PUSH_RETRIES, PUSH_RETRY_DELAY
from common.exception.exceptions import BranchNotFoundError, StaleReferenceError

logger = logging.getLogger(__name__)

RetryCallback = Callable[[int, int, StaleReferenceError], Awaitable[None]]


async def _fetch_current_head(ado: AdoGitService, branch_name: str) -> str:
    """Head object id of the branch right now."""
    branch = await ado.get_branch(branch_name)
    if branch is None:
        raise BranchNotFoundError(branch_name, f"Target branch {branch_name} disappeared.")
    return branch.object_id


async def push_with_stale_retry(
    ado: AdoGitService,
    branch_name: str,
    changes: Sequence[PendingChange],
    author: Optional[CommitAuthor],
    message: str,
    max_retries: int = MAX_PUSH_RETRIES,
    retry_delay: float = PUSH_RETRY_DELAY,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_retry: Optional[RetryCallback] = None,
) -> PushResult:
    """Push a commit, re-reading the branch head before every attempt.

    Only StaleReferenceError is retried, at most ``max_retries`` times after
    the first attempt. Every other error propagates immediately.

    Args:
        ado: Azure DevOps service
        branch_name: Target branch
        changes: Files to add or edit
        author: Commit author
        message: Commit message
        max_retries: Retries after the first attempt
        retry_delay: Fixed wait between attempts in seconds
        sleep: Awaitable delay (injectable for tests)
        on_retry: Awaited with (retry number, max retries, error) before each retry

    Returns:
        PushResult of the accepted push

    Raises:
        StaleReferenceError: If the last allowed attempt was stale too
        BranchNotFoundError: If the target branch no longer exists
    """
    for attempt in range(max_retries + 1):
        head_object_id = await _fetch_current_head(ado, branch_name)
        logger.info(f"Pushing changes (Attempt {attempt + 1})...")

        try:
            return await ado.push_commit(branch_name, head_object_id, changes, author, message)
        except StaleReferenceError as e:
            if attempt >= max_retries:
                logger.error(f"Push still stale after {max_retries} retries: {e.message}")
                raise
            retry_number = attempt + 1
            logger.warning(f"Stale reference detected. Retrying ({retry_number}/{max_retries})...")
            if on_retry is not None:
                await on_retry(retry_number, max_retries, e)
            await sleep(retry_delay)

    raise RuntimeError("Push failed after all retries")
