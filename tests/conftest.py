"""Shared fixtures: deterministic transport doubles."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
import pytest
from pydantic import BaseModel

from core.interfaces.transport import ResponseMetadata, TransportCompletion
from core.services.dispatch import InlineDispatcher
from core.services.http_client import HttpClient


class MockEntity(BaseModel):
    title: str
    subtitle: str


class MockDataTask:
    def __init__(self) -> None:
        self.resume_count = 0

    def resume(self) -> None:
        self.resume_count += 1


@dataclass
class MockTransport:
    """Delivers a canned outcome synchronously inside `data_task`."""

    status_code: int = 200
    next_data: bytes | None = None
    next_error: BaseException | None = None
    is_invalid_response: bool = False
    calls: list[httpx.URL] = field(default_factory=list)
    next_task: MockDataTask = field(default_factory=MockDataTask)

    @property
    def last_url(self) -> httpx.URL | None:
        return self.calls[-1] if self.calls else None

    def data_task(self, url: httpx.URL, completion: TransportCompletion) -> MockDataTask:
        self.calls.append(url)
        if self.is_invalid_response:
            completion(self.next_data, None, self.next_error)
        else:
            metadata = ResponseMetadata(url=str(url), status_code=self.status_code)
            completion(self.next_data, metadata, self.next_error)
        return self.next_task


class Recorder:
    """Completion that records every delivery."""

    def __init__(self) -> None:
        self.results: list = []

    def __call__(self, result) -> None:
        self.results.append(result)

    @property
    def only(self):
        assert len(self.results) == 1, f"expected exactly one completion, got {len(self.results)}"
        return self.results[0]


@pytest.fixture
def transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def client(transport: MockTransport) -> HttpClient:
    return HttpClient(transport, dispatcher=InlineDispatcher())


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
