"""Transport factory: builds a TransportHandle from settings. Only place that imports concrete transports."""
from __future__ import annotations

from httpsession.config.settings import Settings
from httpsession.constants import TRANSPORT_BACKEND
from httpsession.ports.transport import TransportHandle


def create_transport(settings: Settings) -> TransportHandle:
    backend = settings.transport_backend.strip().lower()

    if backend == TRANSPORT_BACKEND.PYCURL:
        from httpsession.infrastructure.transport.pycurl_transport import PycurlTransport

        return PycurlTransport()

    if backend == TRANSPORT_BACKEND.HTTPX:
        from httpsession.infrastructure.transport.httpx_transport import HttpxTransport

        return HttpxTransport()

    raise ValueError(f"Unsupported transport backend: {backend}")
