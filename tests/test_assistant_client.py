"""Tests for the assistant service client."""

from __future__ import annotations

import base64
import json
from collections.abc import Callable

import httpx
import pytest

from assistant_migration.client.assistant_client import AssistantClient
from assistant_migration.client.exceptions import (
    AuthenticationError,
    NetworkError,
    RateLimitError,
    ResourceNotFoundError,
    ServerError,
    ServiceError,
)
from assistant_migration.config import ServiceAPIConfig

API_CONFIG = ServiceAPIConfig(url="https://assistant.example.com/api", password="k3y")


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> AssistantClient:
    return AssistantClient(API_CONFIG, transport=httpx.MockTransport(handler))


async def test_requests_carry_version_and_basic_auth() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"workspaces": [], "pagination": {}})

    async with _client(handler) as client:
        await client.list_workspaces()

    request = seen[0]
    assert request.url.path == "/api/v1/workspaces"
    assert request.url.params["version"] == "2018-07-10"
    expected = base64.b64encode(b"apikey:k3y").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"


async def test_list_workspaces_follows_cursor() -> None:
    pages = {
        None: {
            "workspaces": [{"workspace_id": "W1", "name": "Alpha"}],
            "pagination": {"next_cursor": "page2"},
        },
        "page2": {
            "workspaces": [{"workspace_id": "W2", "name": "Beta"}],
            "pagination": {"refresh_url": "/v1/workspaces"},
        },
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=pages[request.url.params.get("cursor")])

    async with _client(handler) as client:
        summaries = await client.list_workspaces()

    assert [(s.id, s.name) for s in summaries] == [("W1", "Alpha"), ("W2", "Beta")]


async def test_get_workspace_exports(export_data: dict) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=export_data)

    async with _client(handler) as client:
        export = await client.get_workspace("W1")

    assert seen[0].url.path.endswith("/v1/workspaces/W1")
    assert seen[0].url.params["export"] == "true"
    assert export.name == "Alpha"
    assert export.to_json_dict()["status"] == "Available"


async def test_update_puts_id_in_path() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"workspace_id": "T1", "name": "Alpha"})

    async with _client(handler) as client:
        result = await client.update_workspace({"workspace_id": "T1", "name": "Alpha"})

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path.endswith("/v1/workspaces/T1")
    assert json.loads(request.content) == {"name": "Alpha"}
    assert result["workspace_id"] == "T1"


async def test_update_requires_workspace_id() -> None:
    async with _client(lambda request: httpx.Response(200, json={})) as client:
        with pytest.raises(ValueError):
            await client.update_workspace({"name": "Alpha"})


async def test_create_and_delete() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "DELETE":
            return httpx.Response(200, text="")
        return httpx.Response(201, json={"workspace_id": "N1", "name": "Alpha"})

    async with _client(handler) as client:
        created = await client.create_workspace({"name": "Alpha"})
        deleted = await client.delete_workspace("N1")

    assert created["workspace_id"] == "N1"
    assert deleted == {}
    assert [(r.method, r.url.path.rsplit("/", 1)[-1]) for r in seen] == [
        ("POST", "workspaces"),
        ("DELETE", "N1"),
    ]


@pytest.mark.parametrize(
    ("status_code", "error_type"),
    [
        (401, AuthenticationError),
        (404, ResourceNotFoundError),
        (429, RateLimitError),
        (500, ServerError),
        (503, ServerError),
        (400, ServiceError),
    ],
)
async def test_error_mapping(status_code: int, error_type: type[ServiceError]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"error": "nope", "code": status_code})

    async with _client(handler) as client:
        with pytest.raises(error_type) as exc_info:
            await client.get_workspace("W1")

    assert exc_info.value.status_code == status_code


async def test_rate_limit_retry_after() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": "slow down"}, headers={"Retry-After": "7"})

    async with _client(handler) as client:
        with pytest.raises(RateLimitError) as exc_info:
            await client.list_workspaces()

    assert exc_info.value.retry_after == 7


async def test_transport_failure_is_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(NetworkError):
            await client.list_workspaces()


async def test_non_json_success_body_is_service_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway page</html>")

    async with _client(handler) as client:
        with pytest.raises(ServiceError) as exc_info:
            await client.update_workspace({"workspace_id": "T1", "name": "Alpha"})

    assert exc_info.value.status_code == 200
    assert isinstance(exc_info.value.__cause__, ValueError)
