"""
Sync orchestrator: runs one Salesforce → Azure DevOps sync as an explicit
state machine.

    Idle → Authenticating → Retrieving → Polling → Downloading → Mapping
         → BranchEnsuring → Committing → Completed | Failed | Cancelled

Each state is entered through ``_enter``, which is also the cancellation
checkpoint. Polling and push retries wait through an injectable ``sleep`` and
the poll timeout reads an injectable ``clock``, so tests run without real
delays.
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

from application.models.sync_config import SyncConfig
from application.services.ado.ado_service import AdoGitService
from application.services.ado.models.types import (
    CommitAuthor,
    PendingChange,
    PushResult,
)
from application.services.ado.validation import validate_branch_name, validate_file_path
from application.services.salesforce.archive import save_archive_backup
from application.services.salesforce.models.types import (
    RetrieveJob,
    RetrieveStatus,
    SalesforceSession,
)
from application.services.salesforce.package_descriptor import validate_package_xml
from application.services.salesforce.salesforce_service import SalesforceService
from application.services.sync.change_builder import (
    MappedFile,
    build_manifest_file,
    build_pending_changes,
    build_test_class_file,
    map_archive_files,
    merge_test_class_names,
)
from application.services.sync.job_log import JobLog, JobRecord, LogEntry, LogLevel
from application.services.sync.push_retry import push_with_stale_retry
from common.config.config import PUSH_RETRY_DELAY
from common.exception.exceptions import (
    RequestTimeoutError,
    RetrieveFailedError,
    StaleReferenceError,
    SyncError,
)

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    IDLE = "Idle"
    AUTHENTICATING = "Authenticating"
    RETRIEVING = "Retrieving"
    POLLING = "Polling"
    DOWNLOADING = "Downloading"
    MAPPING = "Mapping"
    BRANCH_ENSURING = "BranchEnsuring"
    COMMITTING = "Committing"
    COMPLETED = "Completed"
    FAILED = "Failed"
    CANCELLED = "Cancelled"


ProgressCallback = Callable[[SyncState, LogEntry], Any]


class _SyncCancelled(Exception):
    """Raised at a checkpoint once the cancel event is set."""


@dataclass
class SyncResult:
    state: SyncState
    message: str
    job: JobRecord
    error: Optional[SyncError] = None
    changes: List[PendingChange] = field(default_factory=list)
    push_result: Optional[PushResult] = None

    @property
    def succeeded(self) -> bool:
        return self.state == SyncState.COMPLETED


class SyncOrchestrator:
    """Runs syncs one at a time; each ``run`` is independent of the previous one."""

    def __init__(
        self,
        salesforce: SalesforceService,
        ado_factory: Callable[[SyncConfig], AdoGitService] = AdoGitService.from_config,
        on_progress: Optional[ProgressCallback] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        push_retry_delay: float = PUSH_RETRY_DELAY,
    ):
        """Initialize the orchestrator.

        Args:
            salesforce: Retrieve side service
            ado_factory: Builds the Azure DevOps service for a config
            on_progress: Called (and awaited if it returns an awaitable) with
                the current state and each new log entry
            sleep: Awaitable delay used between polls and push retries
            clock: Monotonic seconds used for the poll timeout
            now: Wall clock for log and job timestamps
            push_retry_delay: Wait between stale push attempts
        """
        self.salesforce = salesforce
        self.ado_factory = ado_factory
        self.on_progress = on_progress
        self._sleep = sleep
        self._clock = clock
        self._now = now
        self.push_retry_delay = push_retry_delay

        self.state = SyncState.IDLE
        self._log = JobLog(clock=now)
        self._cancel_event: Optional[asyncio.Event] = None

    async def run(
        self,
        config: SyncConfig,
        stored_session: Optional[SalesforceSession] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> SyncResult:
        """Run one sync to a terminal state.

        Args:
            config: Settings for this sync
            stored_session: Previously captured session; used instead of a
                cookie lookup when given
            cancel_event: Set by the caller to cancel between states

        Returns:
            SyncResult; typed errors are recorded on it rather than raised
        """
        self.state = SyncState.IDLE
        self._log = JobLog(clock=self._now)
        self._cancel_event = cancel_event
        start_time = self._now()

        changes: List[PendingChange] = []
        push_result: Optional[PushResult] = None
        error: Optional[SyncError] = None

        try:
            self._validate(config)
            outcome = await self._run_pipeline(config, stored_session)
            if outcome is None:
                message = "No changes to commit."
            else:
                changes, push_result = outcome
                message = "Sync Complete!"
            self.state = SyncState.COMPLETED
            await self._report(LogLevel.SUCCESS, message)

        except _SyncCancelled:
            self.state = SyncState.CANCELLED
            message = "Sync cancelled."
            await self._report(LogLevel.WARNING, message)

        except SyncError as e:
            logger.exception(f"Sync failed in state {self.state.value}")
            error = e
            message = f"Error: {e.message}"
            self.state = SyncState.FAILED
            await self._report(LogLevel.ERROR, message)

        job = JobRecord(
            status=self.state.value,
            start_time=start_time,
            end_time=self._now(),
            message=message,
            logs=self._log.entries,
            package_xml_snapshot=config.package_descriptor,
        )
        return SyncResult(
            state=self.state,
            message=message,
            job=job,
            error=error,
            changes=changes,
            push_result=push_result,
        )

    @staticmethod
    def _validate(config: SyncConfig) -> None:
        validate_branch_name(config.target_branch)
        validate_branch_name(config.source_branch)
        validate_package_xml(config.package_descriptor)
        for path in (config.package_xml_destination_path, config.test_file_path):
            if path is not None:
                validate_file_path(path)

    async def _run_pipeline(self, config: SyncConfig, stored_session: Optional[SalesforceSession]):
        await self._enter(SyncState.AUTHENTICATING, "Authenticating with Salesforce...")
        if stored_session is not None:
            session = stored_session
            await self._report(LogLevel.INFO, f"Using stored session for {session.server_url}")
        else:
            session = await self.salesforce.get_session(config.salesforce_domain)
            await self._report(LogLevel.INFO, f"Session found for {session.server_url}")

        await self._enter(SyncState.RETRIEVING, "Requesting metadata retrieve...")
        async_id = await self.salesforce.retrieve(
            session.server_url, session.session_id, config.package_descriptor
        )
        await self._report(LogLevel.INFO, f"Retrieve ID: {async_id}. Polling...")

        await self._enter(SyncState.POLLING, "Waiting for retrieve to finish...")
        retrieve_job = await self._poll_until_done(config, session, async_id)

        await self._enter(SyncState.DOWNLOADING, "Downloading zip...")
        zip_base64 = await self.salesforce.retrieve_zip(
            session.server_url, session.session_id, retrieve_job.async_id
        )
        if config.backup_dir:
            await self._backup_archive(zip_base64, config.backup_dir, session)
        archive = self.salesforce.extract(zip_base64)
        await self._report(
            LogLevel.INFO,
            f"Extracted {len(archive.files)} files, {len(archive.test_classes)} test classes detected",
        )

        await self._enter(SyncState.MAPPING, "Preparing changes...")
        planned = await self._plan_files(config, archive.files, archive.test_classes)
        if not planned:
            return None

        ado = self.ado_factory(config)
        await self._enter(SyncState.BRANCH_ENSURING, f"Checking branch {config.target_branch}...")
        reference_branch = await self._ensure_branch(ado, config)
        existing_paths = await ado.list_existing_paths(reference_branch)
        await self._report(
            LogLevel.INFO, f"Found {len(existing_paths)} existing files in {reference_branch}."
        )
        changes = build_pending_changes(planned, existing_paths)

        await self._enter(SyncState.COMMITTING, f"Committing {len(changes)} changes...")
        author = await self._resolve_author(config, session)
        push_result = await push_with_stale_retry(
            ado,
            config.target_branch,
            changes,
            author,
            config.commit_message,
            max_retries=config.max_push_retries,
            retry_delay=self.push_retry_delay,
            sleep=self._sleep,
            on_retry=self._on_push_retry,
        )
        self._checkpoint()
        return changes, push_result

    async def _poll_until_done(
        self, config: SyncConfig, session: SalesforceSession, async_id: str
    ) -> RetrieveJob:
        job = RetrieveJob(async_id=async_id)
        started = self._clock()
        while True:
            status: RetrieveStatus = await self.salesforce.check_status(
                session.server_url, session.session_id, async_id
            )
            self._checkpoint()
            job.state = status.state
            if status.done:
                break

            await self._report(LogLevel.DEBUG, f"Retrieve state: {status.state}")
            timeout = config.poll_timeout_seconds
            if timeout is not None and self._clock() - started >= timeout:
                raise RequestTimeoutError(
                    f"Retrieve {async_id} not finished after {timeout:g}s (last state {status.state})"
                )
            await self._sleep(config.poll_interval_seconds)
            self._checkpoint()

        if not status.succeeded:
            raise RetrieveFailedError(job.state)
        await self._report(LogLevel.INFO, "Retrieve completed.")
        return job

    async def _backup_archive(self, zip_base64: str, backup_dir: str, session: SalesforceSession) -> None:
        try:
            path = save_archive_backup(zip_base64, backup_dir, session.instance_name, self._now())
        except (OSError, SyncError) as e:
            await self._report(LogLevel.WARNING, f"Backup failed: {e}")
        else:
            await self._report(LogLevel.INFO, f"Backup saved to: {path}")

    async def _plan_files(self, config: SyncConfig, files, detected_tests: List[str]) -> List[MappedFile]:
        planned = map_archive_files(files, config.folder_mapping(), config.target_path_prefix)

        manifest = build_manifest_file(config.package_xml_destination_path, config.package_descriptor)
        if manifest is not None:
            planned.append(manifest)

        if config.test_file_path:
            class_names = merge_test_class_names(detected_tests, config.manual_test_class_names)
            test_file = build_test_class_file(config.test_file_path, class_names)
            if test_file is not None:
                planned.append(test_file)
        else:
            await self._report(LogLevel.INFO, "Skipping Test Class List update (no path provided).")

        return planned

    async def _ensure_branch(self, ado: AdoGitService, config: SyncConfig) -> str:
        """Get or create the target branch; returns the branch to compare paths against."""
        target = await ado.get_branch(config.target_branch)
        if target is not None:
            return config.target_branch

        await self._report(
            LogLevel.INFO,
            f"Branch {config.target_branch} not found. Creating from {config.source_branch}...",
        )
        await ado.create_branch(config.target_branch, config.source_branch)
        self._checkpoint()
        await self._report(LogLevel.SUCCESS, f"Branch {config.target_branch} created.")
        return config.source_branch

    async def _resolve_author(self, config: SyncConfig, session: SalesforceSession) -> Optional[CommitAuthor]:
        if config.author_identity is not None:
            return CommitAuthor(
                name=config.author_identity.name, email=config.author_identity.email, date=self._now()
            )

        try:
            user = await self.salesforce.fetch_user_info(session.server_url, session.session_id)
        except SyncError as e:
            await self._report(LogLevel.WARNING, f"User lookup failed, using default author: {e}")
            return None
        if user is not None and user.name and user.email:
            await self._report(LogLevel.INFO, f"Committing as {user.name} <{user.email}>")
            return CommitAuthor(name=user.name, email=user.email, date=self._now())
        return None

    async def _on_push_retry(self, retry_number: int, max_retries: int, error: StaleReferenceError) -> None:
        await self._report(
            LogLevel.WARNING,
            f"Stale reference detected. Retrying ({retry_number}/{max_retries})...",
        )

    def _checkpoint(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise _SyncCancelled()

    async def _enter(self, state: SyncState, message: str) -> None:
        self._checkpoint()
        self.state = state
        await self._report(LogLevel.INFO, message)

    async def _report(self, level: LogLevel, message: str) -> None:
        entry = self._log.add(level, message)
        if self.on_progress is None:
            return
        result = self.on_progress(self.state, entry)
        if inspect.isawaitable(result):
            await result
