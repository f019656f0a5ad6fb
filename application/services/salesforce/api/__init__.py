"""
Salesforce API Module

Handles the Metadata SOAP API interactions:
- Retrieve submission
- Retrieve status checks
- Archive download
"""

from application.services.salesforce.api.client import SalesforceMetadataClient

__all__ = [
    "SalesforceMetadataClient",
]
