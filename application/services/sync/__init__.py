"""
Sync Service Package

Path mapping, commit planning and the orchestrator that runs one
Salesforce → Azure DevOps sync end to end.
"""

from application.services.sync.job_log import JobLog, JobRecord, LogEntry, LogLevel
from application.services.sync.orchestrator import SyncOrchestrator, SyncResult, SyncState
from application.services.sync.path_mapper import map_archive_path, map_extracted_file

__all__ = [
    "JobLog",
    "JobRecord",
    "LogEntry",
    "LogLevel",
    "SyncOrchestrator",
    "SyncResult",
    "SyncState",
    "map_archive_path",
    "map_extracted_file",
]
