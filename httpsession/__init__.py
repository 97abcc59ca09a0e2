"""Single-request HTTP sessions over a libcurl-style transport.

    from httpsession import create_session

    with create_session("https://example.com/status") as session:
        session.set_header("Accept", "application/json")
        response = session.perform()
        print(response.status_code, response.body)
"""
from httpsession.application.dispatch import aperform, create_dispatch_executor, perform_async
from httpsession.composition import create_session
from httpsession.config.settings import Settings
from httpsession.constants import AUTH_ANY, AUTH_ANY_SAFE, AuthMethod, HTTPRequestMethod
from httpsession.domain.models import HeaderField, HTTPResponse
from httpsession.domain.response_buffer import ResponseBuffer
from httpsession.domain.session import HTTPRequestError, HTTPSession, RequestErrorKind
from httpsession.ports.transport import TransportError, TransportHandle

__all__ = [
    "AUTH_ANY",
    "AUTH_ANY_SAFE",
    "AuthMethod",
    "HTTPRequestError",
    "HTTPRequestMethod",
    "HTTPResponse",
    "HTTPSession",
    "HeaderField",
    "RequestErrorKind",
    "ResponseBuffer",
    "Settings",
    "TransportError",
    "TransportHandle",
    "aperform",
    "create_dispatch_executor",
    "create_session",
    "perform_async",
]
