from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from jirabot.commands import Sender
from jirabot.formatting import Response
from jirabot.jira.client import JiraClient
from jirabot.memory import ExpiringCache
from jirabot.utils.config import JiraConfig


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    def __init__(self):
        self.sent: list[tuple[str, Response]] = []

    async def send(self, channel: str, response: Response) -> None:
        self.sent.append((channel, response))


class RecordingServer:
    """httpx.MockTransport handler that records requests and replays canned responses."""

    def __init__(self, routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"errorMessages": ["no route"]})
        return route(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> dict:
        return json.loads(request.content)


@pytest.fixture
def jira_config() -> JiraConfig:
    return JiraConfig(
        host="jira.example.com",
        port=443,
        username="bot",
        password="secret",
        timeout_seconds=5,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(jira_config: JiraConfig, clock: FakeClock):
    def _make(server: RecordingServer, cache: ExpiringCache | None = None) -> JiraClient:
        return JiraClient(
            jira_config,
            cache if cache is not None else ExpiringCache(clock=clock),
            transport=httpx.MockTransport(server),
        )

    return _make


@pytest.fixture
def sender() -> Sender:
    return Sender(user_id="U123", display_name="Jane Doe", email="jane@example.com")
