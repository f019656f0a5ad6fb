"""
Salesforce Metadata API client.

Submits retrieve requests, checks their status and downloads the resulting
archive over the SOAP endpoint of an org, authenticated by a session id.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional

import httpx

from application.services.salesforce.api.envelopes import (
    build_check_retrieve_status_request,
    build_check_status_request,
    build_retrieve_request,
    parse_response,
    read_fault,
    read_fields,
)
from application.services.salesforce.models.types import RetrieveStatus, SalesforceUser
from application.services.salesforce.package_descriptor import parse_package_xml
from common.config.config import HTTP_CONNECT_TIMEOUT, HTTP_TIMEOUT, SALESFORCE_API_VERSION
from common.exception.exceptions import (
    MissingArchiveError,
    RetrieveSubmissionError,
    SalesforceAPIError,
)
from common.utils.retry import RetryPolicy, send_once, send_with_retry

logger = logging.getLogger(__name__)


class SalesforceMetadataClient:
    """Client for the Salesforce Metadata SOAP API."""

    def __init__(
        self,
        api_version: str = SALESFORCE_API_VERSION,
        timeout: float = HTTP_TIMEOUT,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Salesforce Metadata API client.

        Args:
            api_version: Metadata API version used in the endpoint URL
            timeout: Request timeout in seconds
            retry_policy: Backoff bounds for idempotent calls
            transport: Optional httpx transport (used by tests)
        """
        self.api_version = api_version
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self._transport = transport

    def soap_url(self, server_url: str) -> str:
        return f"{server_url.rstrip('/')}/services/Soap/m/{self.api_version}"

    def _new_client(self) -> httpx.AsyncClient:
        timeout_config = httpx.Timeout(self.timeout, connect=HTTP_CONNECT_TIMEOUT)
        return httpx.AsyncClient(timeout=timeout_config, trust_env=False, transport=self._transport)

    async def _post_soap(
        self,
        server_url: str,
        action: str,
        envelope: str,
        idempotent: bool,
    ) -> httpx.Response:
        """POST a SOAP envelope for ``action``.

        Idempotent actions (status checks) go through the generic retry;
        ``retrieve`` is sent once.
        """
        url = self.soap_url(server_url)
        headers = {"Content-Type": "text/xml; charset=UTF-8", "SOAPAction": action}

        async def send() -> httpx.Response:
            async with self._new_client() as client:
                return await client.post(url, content=envelope.encode("utf-8"), headers=headers)

        description = f"Salesforce {action}"
        if idempotent:
            response = await send_with_retry(send, description, self.retry_policy)
        else:
            response = await send_once(send, description)

        logger.debug(f"Salesforce {action} to {url} returned status {response.status_code}")
        return response

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        fault = read_fault(response.text)
        error_msg = (
            f"Salesforce {action} failed (status {response.status_code}): "
            f"{fault or response.reason_phrase}"
        )
        logger.error(error_msg)
        raise SalesforceAPIError(error_msg, status_code=response.status_code, detail=fault)

    def _parse(self, response: httpx.Response, action: str) -> ET.Element:
        try:
            return parse_response(response.text)
        except ET.ParseError as e:
            raise SalesforceAPIError(
                f"Malformed Salesforce {action} response: {e}",
                status_code=response.status_code,
                detail=response.text[:500],
            ) from e

    async def retrieve(self, server_url: str, session_id: str, package_xml: str) -> str:
        """Submit an asynchronous retrieve for a package.xml manifest.

        Args:
            server_url: Org base URL, e.g. https://mydomain.my.salesforce.com
            session_id: Session id taken from the ``sid`` cookie
            package_xml: Manifest content

        Returns:
            Async process id of the retrieve job

        Raises:
            ValidationError: If the manifest is malformed
            RetrieveSubmissionError: If no id is returned
        """
        descriptor = parse_package_xml(package_xml)
        envelope = build_retrieve_request(session_id, descriptor)
        response = await self._post_soap(server_url, "retrieve", envelope, idempotent=False)

        try:
            root = parse_response(response.text)
        except ET.ParseError:
            raise RetrieveSubmissionError(
                f"Salesforce Retrieve Failed: {response.reason_phrase}",
                status_code=response.status_code,
            )

        fields = read_fields(root, "id", "faultstring")
        if not response.is_success or not fields["id"]:
            fault = fields["faultstring"]
            logger.error(f"Retrieve submission failed (status {response.status_code}): {fault}")
            raise RetrieveSubmissionError(fault, status_code=response.status_code)

        logger.info(f"Retrieve started with id {fields['id']}")
        return fields["id"]

    async def check_status(self, server_url: str, session_id: str, async_id: str) -> RetrieveStatus:
        """Check a retrieve job once.

        Returns:
            RetrieveStatus with the done flag and the job state
        """
        envelope = build_check_status_request(session_id, async_id)
        response = await self._post_soap(server_url, "checkStatus", envelope, idempotent=True)
        self._raise_for_status(response, "checkStatus")

        fields = read_fields(self._parse(response, "checkStatus"), "done", "state")
        if fields["done"] is None:
            raise SalesforceAPIError(
                "Salesforce checkStatus response has no 'done' field",
                status_code=response.status_code,
            )

        return RetrieveStatus(
            done=fields["done"].lower() == "true",
            state=fields["state"] or "Unknown",
        )

    async def retrieve_zip(self, server_url: str, session_id: str, async_id: str) -> str:
        """Download the archive of a completed retrieve.

        Returns:
            Base64 encoded zip archive

        Raises:
            MissingArchiveError: If the response carries no zipFile
        """
        envelope = build_check_retrieve_status_request(session_id, async_id, include_zip=True)
        response = await self._post_soap(server_url, "checkRetrieveStatus", envelope, idempotent=True)
        self._raise_for_status(response, "checkRetrieveStatus")

        zip_file = read_fields(self._parse(response, "checkRetrieveStatus"), "zipFile")["zipFile"]
        if not zip_file:
            raise MissingArchiveError()
        return zip_file

    async def fetch_user_info(self, server_url: str, session_id: str) -> Optional[SalesforceUser]:
        """Get the name and email of the session's user.

        Returns:
            SalesforceUser, or None when the lookup is not permitted
        """
        url = f"{server_url.rstrip('/')}/services/data/v{self.api_version}/chatter/users/me"
        headers = {"Authorization": f"Bearer {session_id}", "Content-Type": "application/json"}

        async def send() -> httpx.Response:
            async with self._new_client() as client:
                return await client.get(url, headers=headers)

        response = await send_with_retry(send, "Salesforce user info", self.retry_policy)
        if not response.is_success:
            logger.warning(f"Failed to fetch user info: {response.status_code} {response.reason_phrase}")
            return None

        try:
            data: Dict[str, Any] = response.json()
        except ValueError:
            logger.warning("Failed to fetch user info: response is not JSON")
            return None
        return SalesforceUser(name=data.get("name"), email=data.get("email"))
