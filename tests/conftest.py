from __future__ import annotations

import pytest

from httpsession.domain.session import HTTPSession
from tests.fakes import TEST_URL, FakeTransport


@pytest.fixture()
def fake_transport() -> FakeTransport:
    return FakeTransport(chunks=[b"ok"], status_code=200)


@pytest.fixture()
def session(fake_transport: FakeTransport):
    s = HTTPSession(TEST_URL, fake_transport)
    yield s
    s.close()
