"""Composition root: build an HTTPSession from settings with a concrete transport.

Composition may: import the transport factory, read settings, hand the handle
to the session, which owns it from then on.
"""
from __future__ import annotations

from httpsession.config.settings import Settings
from httpsession.constants import HTTPRequestMethod
from httpsession.domain.session import HTTPSession
from httpsession.infrastructure.transport.factory import create_transport
from httpsession.ports.transport import TransportHandle


def create_session(
    url: str,
    method: HTTPRequestMethod | str = HTTPRequestMethod.GET,
    *,
    skip_peer_verification: bool = False,
    skip_hostname_verification: bool = False,
    settings: Settings | None = None,
    transport: TransportHandle | None = None,
) -> HTTPSession:
    settings = settings or Settings()
    handle = transport if transport is not None else create_transport(settings)
    session = HTTPSession(
        url,
        handle,
        method,
        skip_peer_verification=skip_peer_verification,
        skip_hostname_verification=skip_hostname_verification,
        connect_timeout=settings.connect_timeout_seconds,
        resource_timeout=settings.resource_timeout_seconds,
        verbose=settings.verbose,
    )
    if settings.user_agent:
        session.set_header("User-Agent", settings.user_agent)
    return session
