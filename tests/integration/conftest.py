from __future__ import annotations

import socket
from typing import Iterator

import pytest

from httpsession.config.settings import Settings
from tests.integration.local_server import start_local_server


@pytest.fixture(scope="session")
def server_url() -> Iterator[str]:
    server = start_local_server()
    host, port = server.server_address[:2]
    yield f"http://{host}:{port}"
    server.shutdown()
    server.server_close()


@pytest.fixture()
def closed_port_url() -> str:
    """URL on a port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}/"


@pytest.fixture(params=["pycurl", "httpx"])
def settings(request) -> Settings:  # noqa: ANN001
    return Settings(
        _env_file=None,
        transport_backend=request.param,
        connect_timeout_seconds=5,
        resource_timeout_seconds=10,
    )
