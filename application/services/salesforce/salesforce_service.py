"""
Main Salesforce Service - facade for the retrieve side of a sync.

This service provides a single entry point for:
- Session discovery from browser cookies
- Metadata retrieve submission and status checks
- Archive download and extraction
"""

from typing import Callable, Iterable, Optional

from application.services.salesforce.api.client import SalesforceMetadataClient
from application.services.salesforce.archive import extract_archive
from application.services.salesforce.models.types import (
    ExtractedArchive,
    RetrieveStatus,
    SalesforceSession,
    SalesforceUser,
    SessionCookie,
)
from application.services.salesforce.session import select_session

CookieSource = Callable[[], Iterable[SessionCookie]]


class SalesforceService:
    """Unified Salesforce service used by the sync orchestrator."""

    def __init__(
        self,
        cookie_source: Optional[CookieSource] = None,
        client: Optional[SalesforceMetadataClient] = None,
    ):
        """Initialize Salesforce service.

        Args:
            cookie_source: Callable returning the browser's cookies
            client: Metadata API client (creates new if not provided)
        """
        self.cookie_source = cookie_source or (lambda: [])
        self.client = client or SalesforceMetadataClient()

    async def get_session(self, domain_hint: Optional[str] = None) -> SalesforceSession:
        return select_session(self.cookie_source(), domain_hint)

    async def retrieve(self, server_url: str, session_id: str, package_xml: str) -> str:
        return await self.client.retrieve(server_url, session_id, package_xml)

    async def check_status(self, server_url: str, session_id: str, async_id: str) -> RetrieveStatus:
        return await self.client.check_status(server_url, session_id, async_id)

    async def retrieve_zip(self, server_url: str, session_id: str, async_id: str) -> str:
        return await self.client.retrieve_zip(server_url, session_id, async_id)

    async def fetch_user_info(self, server_url: str, session_id: str) -> Optional[SalesforceUser]:
        return await self.client.fetch_user_info(server_url, session_id)

    @staticmethod
    def extract(zip_base64: str) -> ExtractedArchive:
        return extract_archive(zip_base64)
