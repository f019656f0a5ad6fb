"""
Salesforce Models Module

Shared types, enums, and dataclasses for Salesforce operations.
"""

from application.services.salesforce.models.types import (
    ExtractedArchive,
    ExtractedFile,
    PackageDescriptor,
    PackageType,
    RetrieveJob,
    RetrieveState,
    RetrieveStatus,
    SalesforceSession,
    SalesforceUser,
    SessionCookie,
)

__all__ = [
    "ExtractedArchive",
    "ExtractedFile",
    "PackageDescriptor",
    "PackageType",
    "RetrieveJob",
    "RetrieveState",
    "RetrieveStatus",
    "SalesforceSession",
    "SalesforceUser",
    "SessionCookie",
]
