"""
Azure DevOps API Module

Low-level REST API client and operation groups for Azure DevOps git.
"""

from application.services.ado.api.client import AdoAPIClient
from application.services.ado.api.items import ItemOperations
from application.services.ado.api.pushes import PushOperations
from application.services.ado.api.refs import RefOperations

__all__ = [
    "AdoAPIClient",
    "ItemOperations",
    "PushOperations",
    "RefOperations",
]
