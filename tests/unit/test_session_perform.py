"""Unit tests for HTTPSession.perform: response assembly, error mapping, buffer and handle lifecycle."""
from __future__ import annotations

import gc

import pytest

from httpsession.domain.models import HTTPResponse
from httpsession.domain.response_buffer import ResponseBuffer
from httpsession.domain.session import HTTPRequestError, HTTPSession, RequestErrorKind
from httpsession.ports.transport import TransportError
from tests.fakes import TEST_URL, FakeTransport


def _buffer_of(writer) -> ResponseBuffer:  # noqa: ANN001
    assert writer is not None
    return writer.__self__


def test_non_2xx_status_is_a_response_not_an_error():
    transport = FakeTransport(chunks=[b"not found"], status_code=404)
    session = HTTPSession(TEST_URL, transport)

    response = session.perform()

    assert response == HTTPResponse(status_code=404, body=b"not found")
    session.close()


def test_body_is_assembled_from_all_chunks_in_order():
    chunks = [b"a" * 700, b"b" * 700, b"c" * 5]
    transport = FakeTransport(chunks=chunks, status_code=200)
    session = HTTPSession(TEST_URL, transport)

    response = session.perform()

    assert response.body == b"".join(chunks)
    assert isinstance(response.body, bytes)
    session.close()


def test_empty_body_yields_empty_bytes():
    session = HTTPSession(TEST_URL, FakeTransport(chunks=[], status_code=204))

    assert session.perform() == HTTPResponse(status_code=204, body=b"")
    session.close()


def test_transport_failure_maps_to_request_error():
    transport = FakeTransport(error=TransportError(7, "Couldn't connect to server"))
    session = HTTPSession(TEST_URL, transport)

    with pytest.raises(HTTPRequestError) as exc_info:
        session.perform()

    err = exc_info.value
    assert err.kind is RequestErrorKind.TRANSPORT_FAILURE
    assert err.code == 7
    assert err.description == "Couldn't connect to server"
    assert str(err) == "(7) Couldn't connect to server"
    assert isinstance(err.__cause__, TransportError)
    session.close()


def test_request_error_curl_constructor():
    err = HTTPRequestError.curl(28, "Timeout was reached")

    assert err.kind is RequestErrorKind.TRANSPORT_FAILURE
    assert (err.code, err.description) == (28, "Timeout was reached")


def test_buffer_is_released_and_unbound_after_success(session, fake_transport):
    session.perform()

    buffer = _buffer_of(fake_transport.writers_seen[0])
    assert buffer.released is True
    assert fake_transport.writer is None


def test_buffer_is_released_and_unbound_after_failure():
    transport = FakeTransport(error=TransportError(56, "Failure when receiving data from the peer"))
    session = HTTPSession(TEST_URL, transport)

    with pytest.raises(HTTPRequestError):
        session.perform()

    assert _buffer_of(transport.writers_seen[0]).released is True
    assert transport.writer is None
    session.close()


def test_each_perform_gets_a_fresh_buffer(session, fake_transport):
    session.perform()
    session.perform()

    first, second = (_buffer_of(w) for w in fake_transport.writers_seen)
    assert first is not second


def test_failure_does_not_corrupt_session_and_retry_succeeds():
    transport = FakeTransport(chunks=[b"ok"], error=TransportError(28, "Timeout was reached"))
    session = HTTPSession(TEST_URL, transport)
    session.set_header("X", "1")

    with pytest.raises(HTTPRequestError):
        session.perform()

    assert session.headers_dirty is False
    transport.error = None
    response = session.perform()

    assert response == HTTPResponse(status_code=200, body=b"ok")
    assert transport.header_applications == [["X: 1"]]
    assert transport.snapshots[1]["headers"] == ["X: 1"]
    session.close()


def test_every_failure_is_reported_once_per_call():
    transport = FakeTransport(error=TransportError(7, "Couldn't connect to server"))
    session = HTTPSession(TEST_URL, transport)

    for _ in range(3):
        with pytest.raises(HTTPRequestError):
            session.perform()

    assert transport.perform_count == 3
    session.close()


def test_close_releases_handle_once_and_blocks_perform():
    transport = FakeTransport()
    session = HTTPSession(TEST_URL, transport)

    session.close()
    session.close()

    assert transport.close_count == 1
    assert session.closed is True
    with pytest.raises(RuntimeError, match="session is closed"):
        session.perform()


def test_context_manager_closes_handle():
    transport = FakeTransport()
    with HTTPSession(TEST_URL, transport) as session:
        session.perform()
        assert transport.closed is False

    assert transport.closed is True


def test_handle_is_released_when_session_is_garbage_collected():
    transport = FakeTransport()
    session = HTTPSession(TEST_URL, transport)

    del session
    gc.collect()

    assert transport.close_count == 1


def test_close_failure_is_logged_not_raised():
    transport = FakeTransport(raise_on_close=OSError("boom"))
    session = HTTPSession(TEST_URL, transport)

    session.close()

    assert transport.close_count == 1
    assert session.closed is True


def test_response_text_decodes_body():
    response = HTTPResponse(status_code=200, body="héllo".encode("utf-8"))

    assert response.text() == "héllo"
