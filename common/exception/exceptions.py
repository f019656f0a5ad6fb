"""
Typed errors raised by the Salesforce and Azure DevOps clients and the sync pipeline.

Every error carries a ``code`` discriminant and the structured context known at
the point it was raised (HTTP status code, server fault text), so callers never
have to inspect message strings to decide what happened.
"""

from typing import Optional


class SyncError(Exception):
    """Base class for all sync pipeline errors."""

    code = "SYNC_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "detail": self.detail,
        }


class ValidationError(SyncError):
    """Raised for a bad branch name, file path or malformed package descriptor."""

    code = "VALIDATION_ERROR"


class NetworkError(SyncError):
    """Raised when a request could not be delivered or no response arrived."""

    code = "NETWORK_ERROR"


class RequestTimeoutError(NetworkError):
    """Raised when a request or a wait loop exceeded its time budget."""

    code = "TIMEOUT"


# Salesforce


class NoSessionError(SyncError):
    """Raised when no Salesforce session cookie exists at all."""

    code = "NO_SESSION"

    def __init__(self, message: str = "No Salesforce session found. Please login to Salesforce."):
        super().__init__(message)


class NoMatchingSessionError(SyncError):
    """Raised when session cookies exist but none matches the requested org."""

    code = "NO_MATCHING_SESSION"

    def __init__(self, domain_hint: Optional[str] = None):
        message = "No valid Salesforce session cookie found."
        if domain_hint:
            message += f" (Target: {domain_hint})"
        super().__init__(message)
        self.domain_hint = domain_hint


class SalesforceAPIError(SyncError):
    """Raised for non-2xx or malformed Salesforce responses."""

    code = "SALESFORCE_API_ERROR"


class RetrieveSubmissionError(SalesforceAPIError):
    """Raised when a retrieve request returns no async process id."""

    code = "RETRIEVE_SUBMISSION_FAILED"

    def __init__(self, fault_string: Optional[str], status_code: Optional[int] = None):
        super().__init__(
            fault_string or "Unknown retrieve error (no ID returned)",
            status_code=status_code,
            detail=fault_string,
        )
        self.fault_string = fault_string


class RetrieveFailedError(SyncError):
    """Raised when a retrieve finished in a state other than Completed."""

    code = "RETRIEVE_FAILED"

    def __init__(self, state: str):
        super().__init__(f"Retrieve failed: {state}", detail=state)
        self.state = state


class MissingArchiveError(SalesforceAPIError):
    """Raised when a completed retrieve response carries no zipFile."""

    code = "MISSING_ARCHIVE"

    def __init__(self, message: str = "No zipFile found in retrieve response."):
        super().__init__(message)


class MalformedArchiveError(SyncError):
    """Raised when the retrieved archive is not valid base64 or not a zip."""

    code = "MALFORMED_ARCHIVE"


# Azure DevOps


class AdoAPIError(SyncError):
    """Raised for non-2xx or malformed Azure DevOps responses."""

    code = "ADO_API_ERROR"


class BranchNotFoundError(AdoAPIError):
    """Raised when a branch required by an operation does not exist."""

    code = "BRANCH_NOT_FOUND"

    def __init__(self, branch_name: str, message: Optional[str] = None):
        super().__init__(message or f"Branch {branch_name} not found.")
        self.branch_name = branch_name


class SourceBranchNotFoundError(BranchNotFoundError):
    """Raised when the branch to create a new branch from does not exist."""

    code = "SOURCE_BRANCH_NOT_FOUND"

    def __init__(self, branch_name: str):
        super().__init__(
            branch_name,
            f"Source branch {branch_name} not found to create new branch.",
        )


class PushRejectedError(AdoAPIError):
    """Raised when a push fails for any reason other than a stale reference."""

    code = "PUSH_REJECTED"


class StaleReferenceError(PushRejectedError):
    """Raised when the branch moved since its head object id was read."""

    code = "STALE_REFERENCE"
