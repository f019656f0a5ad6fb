"""
Salesforce Service Package

Retrieve side of the sync: session discovery, Metadata API retrieve, polling
and archive extraction.
"""

from application.services.salesforce.salesforce_service import SalesforceService

__all__ = ["SalesforceService"]
