"""Unit tests for Azure DevOps pushes."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from application.services.ado.ado_service import AdoGitService
from application.services.ado.api.client import AdoAPIClient
from application.services.ado.models.types import ChangeType, CommitAuthor, PendingChange
from common.exception.exceptions import NetworkError, PushRejectedError, StaleReferenceError
from common.utils.retry import RetryPolicy

CHANGES = [
    PendingChange(ChangeType.ADD, "/classes/Foo.cls", "Zm9v"),
    PendingChange(ChangeType.EDIT, "/manifest/package.xml", "PFBhY2thZ2UvPg=="),
]
AUTHOR = CommitAuthor("Jo Admin", "jo@example.com", datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))


def make_service(handler):
    client = AdoAPIClient(
        "acme",
        "crm",
        "metadata",
        "pat",
        retry_policy=RetryPolicy(max_attempts=3, base_delay=0),
        transport=httpx.MockTransport(handler),
    )
    return AdoGitService(client)


class TestPushCommit:
    """Test PushOperations.push_commit."""

    @pytest.mark.asyncio
    async def test_push_body(self):
        captured = {}

        def handler(request):
            captured["url"] = request.url
            captured["body"] = json.loads(request.content)
            return httpx.Response(201, json={
                "pushId": 42,
                "commits": [{"commitId": "def456"}],
                "refUpdates": [{"name": "refs/heads/dev", "newObjectId": "def456"}],
            })

        result = await make_service(handler).push_commit("dev", "abc123", CHANGES, AUTHOR, "Sync")

        assert result.push_id == 42
        assert result.commit_id == "def456"
        assert result.ref_name == "refs/heads/dev"
        assert captured["url"].path.endswith("/_apis/git/repositories/metadata/pushes")

        body = captured["body"]
        assert body["refUpdates"] == [{"name": "refs/heads/dev", "oldObjectId": "abc123"}]
        commit = body["commits"][0]
        assert commit["comment"] == "Sync"
        assert commit["author"] == {
            "name": "Jo Admin",
            "email": "jo@example.com",
            "date": "2024-01-02T03:04:05+00:00",
        }
        assert commit["changes"] == [
            {
                "changeType": "add",
                "item": {"path": "/classes/Foo.cls"},
                "newContent": {"content": "Zm9v", "contentType": "base64Encoded"},
            },
            {
                "changeType": "edit",
                "item": {"path": "/manifest/package.xml"},
                "newContent": {"content": "PFBhY2thZ2UvPg==", "contentType": "base64Encoded"},
            },
        ]

    @pytest.mark.asyncio
    async def test_author_omitted_when_none(self):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(201, json={"pushId": 1, "commits": [{"commitId": "c"}]})

        await make_service(handler).push_commit("dev", "abc", CHANGES, None, "Sync")

        assert "author" not in captured["body"]["commits"][0]

    @pytest.mark.asyncio
    async def test_stale_reference_by_type_key(self):
        def handler(request):
            return httpx.Response(409, json={
                "message": "TF401028: The reference 'refs/heads/dev' has already been updated by another client",
                "typeKey": "GitReferenceStaleException",
            })

        with pytest.raises(StaleReferenceError) as exc_info:
            await make_service(handler).push_commit("dev", "abc", CHANGES, AUTHOR, "Sync")

        assert exc_info.value.status_code == 409
        assert exc_info.value.code == "STALE_REFERENCE"

    @pytest.mark.asyncio
    async def test_stale_reference_by_error_code(self):
        def handler(request):
            return httpx.Response(409, text="TF401028: reference already updated")

        with pytest.raises(StaleReferenceError):
            await make_service(handler).push_commit("dev", "abc", CHANGES, AUTHOR, "Sync")

    @pytest.mark.asyncio
    async def test_other_rejection(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503, json={"message": "Service unavailable", "typeKey": "Other"})

        with pytest.raises(PushRejectedError) as exc_info:
            await make_service(handler).push_commit("dev", "abc", CHANGES, AUTHOR, "Sync")

        assert not isinstance(exc_info.value, StaleReferenceError)
        assert exc_info.value.detail == "Service unavailable"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_transport_failure_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("reset", request=request)

        with pytest.raises(NetworkError):
            await make_service(handler).push_commit("dev", "abc", CHANGES, AUTHOR, "Sync")

        assert len(calls) == 1
