"""Shared fixtures: test configuration and an in-process fake Subsonic server."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest

from opensubsonic.auth import TokenAuth
from opensubsonic.client import SubsonicClient
from opensubsonic.models import ClientConfig


class FakeSubsonicServer:
    """httpx.MockTransport handler that records requests and serves canned routes.

    Routes are keyed by endpoint name (the last path segment after /rest/).
    Unknown endpoints answer HTTP 404.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[str, Dict[str, Any]] = {}

    def route(
        self,
        endpoint: str,
        json_data: Optional[Dict[str, Any]] = None,
        status_code: int = 200,
        content: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
        error: Optional[type] = None,
    ) -> None:
        self._routes[endpoint] = {
            "json": json_data,
            "status_code": status_code,
            "content": content,
            "headers": headers or {},
            "error": error,
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.rsplit("/", 1)[-1]
        route = self._routes.get(endpoint)
        if route is None:
            return httpx.Response(404, text="Not Found")
        if route["error"] is not None:
            raise route["error"]("Simulated transport failure", request=request)
        if route["json"] is not None:
            return httpx.Response(route["status_code"], json=route["json"])
        return httpx.Response(
            route["status_code"], content=route["content"], headers=route["headers"]
        )

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def fixtures() -> Dict[str, Any]:
    """Load Subsonic API response fixtures from JSON file."""
    fixtures_path = Path(__file__).parent / "fixtures" / "subsonic_responses.json"
    with open(fixtures_path, "r") as f:
        return json.load(f)


@pytest.fixture
def config() -> ClientConfig:
    """Create test client configuration."""
    return ClientConfig(
        base_url="https://music.example.com",
        username="testuser",
        auth=TokenAuth("testpass"),
        client_name="opensubsonic-test",
    )


@pytest.fixture
def server() -> FakeSubsonicServer:
    return FakeSubsonicServer()


@pytest.fixture
def http_client(server: FakeSubsonicServer) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(server))


@pytest.fixture
def client(config: ClientConfig, http_client: httpx.AsyncClient) -> SubsonicClient:
    """SubsonicClient wired to the fake server; no real network access."""
    return SubsonicClient(config, http_client=http_client)
