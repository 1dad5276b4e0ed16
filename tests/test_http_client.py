from __future__ import annotations

import asyncio
import json
import threading

import pytest

from conftest import MockEntity, MockTransport, Recorder
from core.domain.endpoint import Endpoint
from core.domain.errors import ClientError, ClientRequestError, ErrorKind
from core.domain.result import Failure, Success
from core.interfaces.transport import ResponseMetadata
from core.services.dispatch import InlineDispatcher
from core.services.http_client import HttpClient

VALID = Endpoint(endpoint="https://www.google.com")
NONE = Endpoint(endpoint="")
BODY = json.dumps({"title": "A", "subtitle": "B"}).encode()


def _error(recorder: Recorder) -> ClientError:
    result = recorder.only
    assert isinstance(result, Failure), f"expected a failure, got {result!r}"
    return result.error


@pytest.mark.parametrize("raw", ["", "   ", "not a url", "ftp://example.com/file", "https://", "/relative/path"])
def test_invalid_url_returns_url_not_found_without_transport_call(client, transport, recorder, raw):
    client.request_data(Endpoint(endpoint=raw), MockEntity, recorder)

    assert _error(recorder) == ClientError.url_not_found()
    assert transport.calls == []
    assert transport.next_task.resume_count == 0


def test_transport_error_returns_unknown_with_description(client, transport, recorder):
    transport.next_error = ConnectionError("connection refused")
    transport.next_data = BODY

    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == ClientError.unknown("connection refused")


@pytest.mark.parametrize("status", [200, 403, 404, 500, -1004])
def test_transport_error_wins_regardless_of_status(client, transport, recorder, status):
    transport.status_code = status
    transport.next_error = TimeoutError("timed out")

    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == ClientError.unknown("timed out")


def test_transport_error_without_text_uses_exception_name(client, transport, recorder):
    transport.next_error = TimeoutError()

    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == ClientError.unknown("TimeoutError")


def test_missing_body_returns_broken_data(client, transport, recorder):
    transport.next_data = None

    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == ClientError.broken_data()


def test_missing_response_returns_invalid_http_response(client, transport, recorder):
    transport.next_data = b"someData"
    transport.is_invalid_response = True

    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == ClientError.invalid_http_response()


def test_non_http_metadata_returns_invalid_http_response(recorder):
    class NonHttpTransport(MockTransport):
        def data_task(self, url, completion):
            self.calls.append(url)
            completion(BODY, ResponseMetadata(url=str(url), status_code=None), None)
            return self.next_task

    client = HttpClient(NonHttpTransport(), dispatcher=InlineDispatcher())
    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == ClientError.invalid_http_response()


def test_unparseable_body_returns_could_not_parse_object(client, transport, recorder):
    transport.next_data = b"someData"

    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == ClientError.could_not_parse_object()


def test_missing_field_returns_could_not_parse_object(client, transport, recorder):
    transport.next_data = json.dumps({"title": "A"}).encode()

    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == ClientError.could_not_parse_object()


def test_type_mismatch_returns_could_not_parse_object(client, transport, recorder):
    transport.next_data = json.dumps({"title": ["A"], "subtitle": "B"}).encode()

    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == ClientError.could_not_parse_object()


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (403, ClientError.authentication_required()),
        (404, ClientError.could_not_find_host()),
        (500, ClientError.bad_request()),
        (-1004, ClientError.unknown("Unexpected Error.")),
        (401, ClientError.unknown("Unexpected Error.")),
        (503, ClientError.unknown("Unexpected Error.")),
    ],
)
def test_error_status_codes_are_classified_without_decoding(client, transport, recorder, status, expected):
    # A decodable body proves the decode step is skipped.
    transport.next_data = BODY
    transport.status_code = status

    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == expected


@pytest.mark.parametrize("status", [200, 201, 204, 299])
def test_success_status_decodes_target_type(client, transport, recorder, status):
    transport.next_data = BODY
    transport.status_code = status

    client.request_data(VALID, MockEntity, recorder)

    result = recorder.only
    assert isinstance(result, Success)
    assert result.value == MockEntity(title="A", subtitle="B")


def test_request_targets_resolved_url_and_resumes_task(client, transport, recorder):
    transport.next_data = BODY

    client.request_data(VALID, MockEntity, recorder)

    assert transport.last_url.scheme == "https"
    assert transport.last_url.host == "www.google.com"
    assert transport.next_task.resume_count == 1


def test_decodes_into_generic_container_types(client, transport, recorder):
    transport.next_data = json.dumps([{"title": "A", "subtitle": "B"}]).encode()

    client.request_data(VALID, list[MockEntity], recorder)

    assert recorder.only == Success([MockEntity(title="A", subtitle="B")])


def test_duplicate_transport_completion_is_delivered_once(recorder):
    class ChattyTransport(MockTransport):
        def data_task(self, url, completion):
            metadata = ResponseMetadata(url=str(url), status_code=200)
            completion(BODY, metadata, None)
            completion(None, None, RuntimeError("late"))
            return self.next_task

    client = HttpClient(ChattyTransport(), dispatcher=InlineDispatcher())
    client.request_data(VALID, MockEntity, recorder)

    assert isinstance(recorder.only, Success)


def test_transport_completing_on_worker_thread(recorder):
    done = threading.Event()

    class ThreadedTask:
        def __init__(self, fire):
            self._fire = fire

        def resume(self):
            threading.Thread(target=self._fire).start()

    class ThreadedTransport:
        def data_task(self, url, completion):
            def fire():
                completion(BODY, ResponseMetadata(url=str(url), status_code=200), None)
                done.set()

            return ThreadedTask(fire)

    client = HttpClient(ThreadedTransport(), dispatcher=InlineDispatcher())
    client.request_data(VALID, MockEntity, recorder)

    assert done.wait(1.0)
    assert recorder.only == Success(MockEntity(title="A", subtitle="B"))


def test_fetch_returns_result_on_event_loop(transport):
    transport.next_data = BODY
    client = HttpClient(transport)

    result = asyncio.run(client.fetch(VALID, MockEntity))

    assert result == Success(MockEntity(title="A", subtitle="B"))


def test_fetch_returns_url_not_found(transport):
    client = HttpClient(transport)

    result = asyncio.run(client.fetch(NONE, MockEntity))

    assert result == Failure(ClientError.url_not_found())
    assert transport.calls == []


def test_request_data_on_loop_delivers_via_loop(transport):
    transport.next_data = BODY
    client = HttpClient(transport)

    async def scenario():
        delivered = []
        client.request_data(VALID, MockEntity, delivered.append)
        # Delivery is scheduled on the loop, not performed inline.
        assert delivered == []
        await asyncio.sleep(0)
        return delivered

    delivered = asyncio.run(scenario())
    assert delivered == [Success(MockEntity(title="A", subtitle="B"))]


def test_unwrap_raises_client_request_error(client, transport, recorder):
    transport.status_code = 403
    transport.next_data = BODY

    client.request_data(VALID, MockEntity, recorder)

    with pytest.raises(ClientRequestError) as excinfo:
        recorder.only.unwrap()
    assert excinfo.value.error.kind is ErrorKind.AUTHENTICATION_REQUIRED


class RaisingTransport(MockTransport):
    def data_task(self, url, completion):
        self.calls.append(url)
        raise OSError("socket exhausted")


class RaisingTask:
    def resume(self):
        raise RuntimeError("can't start new thread")


class RaisingResumeTransport(MockTransport):
    def data_task(self, url, completion):
        self.calls.append(url)
        return RaisingTask()


def test_transport_raising_on_submit_completes_with_unknown(recorder):
    client = HttpClient(RaisingTransport(), dispatcher=InlineDispatcher())

    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == ClientError.unknown("socket exhausted")
    assert not recorder.only.error.has_response


def test_task_raising_on_resume_completes_with_unknown(recorder):
    client = HttpClient(RaisingResumeTransport(), dispatcher=InlineDispatcher())

    client.request_data(VALID, MockEntity, recorder)

    assert _error(recorder) == ClientError.unknown("can't start new thread")


def test_fetch_with_raising_transport_returns_failure():
    client = HttpClient(RaisingTransport())

    result = asyncio.run(client.fetch(VALID, MockEntity))

    assert result == Failure(ClientError.unknown("socket exhausted"))


def test_transport_that_delivers_then_raises_completes_once(recorder):
    class DeliverThenRaise(MockTransport):
        def data_task(self, url, completion):
            completion(BODY, ResponseMetadata(url=str(url), status_code=200), None)
            raise RuntimeError("late failure")

    client = HttpClient(DeliverThenRaise(), dispatcher=InlineDispatcher())
    client.request_data(VALID, MockEntity, recorder)

    assert recorder.only == Success(MockEntity(title="A", subtitle="B"))
