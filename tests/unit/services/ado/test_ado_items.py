"""Unit tests for Azure DevOps item listing and reads."""

import httpx
import pytest

from application.services.ado.ado_service import AdoGitService
from application.services.ado.api.client import AdoAPIClient
from common.exception.exceptions import AdoAPIError
from common.utils.retry import RetryPolicy


def make_service(handler, max_attempts=1):
    client = AdoAPIClient(
        "acme",
        "crm",
        "metadata",
        "pat",
        retry_policy=RetryPolicy(max_attempts=max_attempts, base_delay=0),
        transport=httpx.MockTransport(handler),
    )
    return AdoGitService(client)


class TestListExistingPaths:
    """Test ItemOperations.list_existing_paths."""

    @pytest.mark.asyncio
    async def test_follows_continuation_token(self):
        requests = []
        pages = [
            httpx.Response(
                200,
                json={"value": [
                    {"path": "/", "isFolder": True},
                    {"path": "/classes", "isFolder": True},
                    {"path": "/classes/Foo.cls"},
                ]},
                headers={"x-ms-continuationtoken": "page-2"},
            ),
            httpx.Response(200, json={"value": [{"path": "/triggers/Bar.trigger"}]}),
        ]

        def handler(request):
            requests.append(request)
            return pages.pop(0)

        index = await make_service(handler).list_existing_paths("main")

        assert sorted(index) == ["/classes/Foo.cls", "/triggers/Bar.trigger"]
        assert "/CLASSES/foo.CLS" in index
        assert "/classes" not in index

        first, second = requests
        assert first.url.params["recursionLevel"] == "Full"
        assert first.url.params["includeContent"] == "false"
        assert first.url.params["versionDescriptor.version"] == "main"
        assert "continuationToken" not in first.url.params
        assert second.url.params["continuationToken"] == "page-2"

    @pytest.mark.asyncio
    async def test_missing_branch_is_empty(self):
        def handler(request):
            return httpx.Response(404, json={"message": "TF401175: branch not found"})

        index = await make_service(handler).list_existing_paths("ghost")

        assert len(index) == 0

    @pytest.mark.asyncio
    async def test_other_errors_raise(self):
        def handler(request):
            return httpx.Response(403, text="Forbidden")

        with pytest.raises(AdoAPIError):
            await make_service(handler).list_existing_paths("main")

    @pytest.mark.asyncio
    async def test_listing_retries_server_errors(self):
        responses = [
            httpx.Response(500, text="oops"),
            httpx.Response(200, json={"value": [{"path": "/a.txt"}]}),
        ]

        def handler(request):
            return responses.pop(0)

        index = await make_service(handler, max_attempts=3).list_existing_paths("main")

        assert list(index) == ["/a.txt"]


class TestGetFileContent:
    """Test ItemOperations.get_file_content."""

    @pytest.mark.asyncio
    async def test_returns_content(self):
        def handler(request):
            assert request.url.params["path"] == "/config/tests.txt"
            assert request.url.params["includeContent"] == "true"
            return httpx.Response(200, json={"path": "/config/tests.txt", "content": "ATest,BTest"})

        content = await make_service(handler).get_file_content("main", "/config/tests.txt")

        assert content == "ATest,BTest"

    @pytest.mark.asyncio
    async def test_missing_file(self):
        def handler(request):
            return httpx.Response(404, json={"message": "not found"})

        assert await make_service(handler).get_file_content("main", "/nope") is None
