"""
Azure DevOps API client for making authenticated requests.
Authenticates every request with a personal access token over basic auth.
"""

import base64
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from common.config.config import (
    ADO_API_VERSION,
    ADO_BASE_URL,
    HTTP_CONNECT_TIMEOUT,
    HTTP_TIMEOUT,
)
from common.exception.exceptions import AdoAPIError
from common.utils.retry import RetryPolicy, send_once, send_with_retry

logger = logging.getLogger(__name__)


class AdoAPIClient:
    """Base client for Azure DevOps git REST API interactions."""

    BASE_URL = ADO_BASE_URL
    API_VERSION = ADO_API_VERSION

    def __init__(
        self,
        org: str,
        project: str,
        repo: str,
        pat: str,
        timeout: float = HTTP_TIMEOUT,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Azure DevOps API client.

        Args:
            org: Organization name
            project: Project name
            repo: Repository name or id
            pat: Personal access token
            timeout: Request timeout in seconds
            retry_policy: Backoff bounds for idempotent requests
            transport: Optional httpx transport (used by tests)
        """
        self.org = org
        self.project = project
        self.repo = repo
        self._pat = pat
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self._transport = transport

    @property
    def repository_url(self) -> str:
        return (
            f"{self.BASE_URL}/{quote(self.org, safe='')}/{quote(self.project, safe='')}"
            f"/_apis/git/repositories/{quote(self.repo, safe='')}"
        )

    def _get_headers(self, with_body: bool = False) -> Dict[str, str]:
        """Get headers for Azure DevOps API requests.

        Returns:
            Headers dictionary
        """
        token = base64.b64encode(f":{self._pat}".encode("utf-8")).decode("ascii")
        headers = {
            "Authorization": f"Basic {token}",
            "Accept": "application/json",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
            "Expires": "0",
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        data: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        idempotent: Optional[bool] = None,
    ) -> httpx.Response:
        """Make an Azure DevOps API request.

        Args:
            method: HTTP method (GET, POST)
            path: Path below the repository URL ("refs", "items", "pushes")
            data: JSON request body
            params: Query parameters (api-version is added)
            idempotent: Whether transient failures may be retried
                (defaults to True for GET only)

        Returns:
            HTTP response of any status; callers classify it

        Raises:
            NetworkError: If the request could not be delivered
        """
        url = f"{self.repository_url}/{path}"
        query = dict(params or {})
        query["api-version"] = self.API_VERSION
        headers = self._get_headers(with_body=data is not None)
        method_upper = method.upper()
        if idempotent is None:
            idempotent = method_upper == "GET"

        async def send() -> httpx.Response:
            return await self._execute_http_request(method_upper, url, headers, data, query)

        description = f"Azure DevOps {method_upper} {path}"
        if idempotent:
            response = await send_with_retry(send, description, self.retry_policy)
        else:
            response = await send_once(send, description)

        logger.debug(f"Azure DevOps {method_upper} request to {url} returned status {response.status_code}")
        return response

    async def _execute_http_request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[Any],
        params: Dict[str, Any],
    ) -> httpx.Response:
        timeout_config = httpx.Timeout(self.timeout, connect=HTTP_CONNECT_TIMEOUT)
        async with httpx.AsyncClient(
            timeout=timeout_config, trust_env=False, transport=self._transport
        ) as client:
            if method == "GET":
                return await client.get(url, headers=headers, params=params)
            elif method == "POST":
                return await client.post(url, json=data, headers=headers, params=params)
            elif method == "PATCH":
                return await client.patch(url, json=data, headers=headers, params=params)
            else:
                raise ValueError(f"Unsupported HTTP method: {method}")

    @staticmethod
    def json_or_error(response: httpx.Response, action: str) -> Any:
        """Decode a successful JSON response.

        Raises:
            AdoAPIError: If the status is not 2xx or the body is not JSON
        """
        if not response.is_success:
            error_msg = (
                f"Failed to {action}: {response.status_code} {response.reason_phrase}"
                f" - {response.text[:500]}"
            )
            logger.error(error_msg)
            raise AdoAPIError(error_msg, status_code=response.status_code, detail=response.text)

        try:
            return response.json()
        except ValueError as e:
            raise AdoAPIError(
                f"Failed to {action}: response is not JSON",
                status_code=response.status_code,
                detail=response.text[:500],
            ) from e
