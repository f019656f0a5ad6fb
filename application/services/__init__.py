"""
Application services package.

Contains the Salesforce, Azure DevOps and sync services.
"""

from application.services.ado.ado_service import AdoGitService
from application.services.salesforce.salesforce_service import SalesforceService
from application.services.sync.orchestrator import SyncOrchestrator

__all__ = [
    "AdoGitService",
    "SalesforceService",
    "SyncOrchestrator",
]
