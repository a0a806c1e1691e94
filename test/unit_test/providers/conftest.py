from typing import Callable, List

import httpx
import pytest


class Recorder:
    """``httpx.MockTransport`` handler that records requests and replays a canned response."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def mock_http():
    """Build an ``httpx.AsyncClient`` answering every request with ``respond``.

    Returns ``(client, recorder)``.
    """

    def _build(respond: Callable[[httpx.Request], httpx.Response]):
        recorder = Recorder(respond)
        return httpx.AsyncClient(transport=httpx.MockTransport(recorder)), recorder

    return _build
