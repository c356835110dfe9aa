"""Pytest configuration and shared fixtures"""

import json
import os

import httpx
import pytest

from sgpt.transport import TransportClient


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep SGPT_* variables and config files from the real machine out of tests"""
    for name in list(os.environ):
        if name.startswith("SGPT_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    yield


class Recorder:
    """MockTransport handler that records requests and replays canned responses"""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_json(self) -> dict:
        return json.loads(self.last.content)


def sse_body(*lines: str) -> bytes:
    """Build an SSE body with a blank line after each line"""
    return "".join(f"{line}\n\n" for line in lines).encode()


@pytest.fixture
def recorder_factory():
    def make(*responses: httpx.Response) -> tuple[Recorder, TransportClient]:
        recorder = Recorder(*responses)
        client = TransportClient(transport=httpx.MockTransport(recorder))
        return recorder, client
    return make
