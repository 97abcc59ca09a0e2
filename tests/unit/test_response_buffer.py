from __future__ import annotations

import pytest

from httpsession.domain.response_buffer import INITIAL_CAPACITY, ResponseBuffer


def test_new_buffer_has_capacity_but_no_content():
    buffer = ResponseBuffer()

    assert buffer.capacity == INITIAL_CAPACITY
    assert buffer.size == 0
    assert buffer.getvalue() == b""


def test_write_appends_and_reports_bytes_consumed():
    buffer = ResponseBuffer(capacity=4)

    assert buffer.write(b"abc") == 3
    assert buffer.write(b"defgh") == 5

    assert buffer.getvalue() == b"abcdefgh"
    assert buffer.size == 8
    assert buffer.capacity >= 8


def test_release_drops_content_and_refuses_further_writes():
    buffer = ResponseBuffer()
    buffer.write(b"data")

    buffer.release()

    assert buffer.released is True
    assert buffer.size == 0
    assert buffer.write(b"more") == 0
    with pytest.raises(RuntimeError):
        buffer.getvalue()


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        ResponseBuffer(capacity=0)
