"""
Per-job log and job record handed to the history and log collaborators.
"""

import logging
from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Deque, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from common.config.config import JOB_LOG_LIMIT

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


# SUCCESS has no stdlib level; it is logged as INFO
_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class LogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    level: LogLevel
    message: str


class JobLog:
    """Bounded log of one session; the oldest entries are evicted first."""

    def __init__(
        self,
        limit: int = JOB_LOG_LIMIT,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._entries: Deque[LogEntry] = deque(maxlen=limit)
        self._clock = clock

    def add(self, level: LogLevel, message: str) -> LogEntry:
        entry = LogEntry(timestamp=self._clock(), level=level, message=message)
        self._entries.append(entry)
        logger.log(_STDLIB_LEVELS[level], message)
        return entry

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class JobRecord(BaseModel):
    """Outcome of one sync run as stored in job history."""

    status: str = Field(..., description="Terminal sync state")
    start_time: datetime = Field(..., alias="startTime")
    end_time: Optional[datetime] = Field(default=None, alias="endTime")
    message: str = Field(default="", description="Final status message or error text")
    logs: List[LogEntry] = Field(default_factory=list)
    package_xml_snapshot: Optional[str] = Field(default=None, alias="packageXmlSnapshot")

    model_config = ConfigDict(populate_by_name=True)
