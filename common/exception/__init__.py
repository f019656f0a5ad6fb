"""
Exception Module

Typed error hierarchy shared by the Salesforce client, the Azure DevOps client
and the sync orchestrator.
"""

from common.exception.exceptions import (
    AdoAPIError,
    BranchNotFoundError,
    MalformedArchiveError,
    MissingArchiveError,
    NetworkError,
    NoMatchingSessionError,
    NoSessionError,
    PushRejectedError,
    RequestTimeoutError,
    RetrieveFailedError,
    RetrieveSubmissionError,
    SalesforceAPIError,
    SourceBranchNotFoundError,
    StaleReferenceError,
    SyncError,
    ValidationError,
)

__all__ = [
    "AdoAPIError",
    "BranchNotFoundError",
    "MalformedArchiveError",
    "MissingArchiveError",
    "NetworkError",
    "NoMatchingSessionError",
    "NoSessionError",
    "PushRejectedError",
    "RequestTimeoutError",
    "RetrieveFailedError",
    "RetrieveSubmissionError",
    "SalesforceAPIError",
    "SourceBranchNotFoundError",
    "StaleReferenceError",
    "SyncError",
    "ValidationError",
]
