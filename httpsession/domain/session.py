"""HTTP session: one reusable request configuration bound to one transport handle.

Headers, body and method are staged in memory and tracked by dirty flags; they
are reconciled into the handle immediately before each transfer. Timeouts and
credentials go to the handle as soon as they are set. The handle is created
once, reconfigured in place, reused by every perform and released on close.
"""
from __future__ import annotations

import weakref
from concurrent.futures import Executor, Future
from enum import Enum
from typing import Any, Callable

from loguru import logger

from httpsession.application.dispatch import perform_async
from httpsession.constants import (
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_RESOURCE_TIMEOUT_SECONDS,
    AuthMethod,
    HTTPRequestMethod,
)
from httpsession.core import SERVICE_NAME
from httpsession.domain.models import HeaderField, HTTPResponse
from httpsession.domain.response_buffer import ResponseBuffer
from httpsession.ports.transport import TransportError, TransportHandle


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class RequestErrorKind(str, Enum):
    TRANSPORT_FAILURE = "TransportFailure"


class HTTPRequestError(Exception):
    """Raised by perform when the transport reports a non-success status."""

    def __init__(self, kind: RequestErrorKind, code: int, description: str) -> None:
        super().__init__(kind, code, description)
        self.kind = kind
        self.code = code
        self.description = description

    @classmethod
    def curl(cls, code: int, description: str) -> "HTTPRequestError":
        return cls(RequestErrorKind.TRANSPORT_FAILURE, code, description)

    def __str__(self) -> str:
        return f"({self.code}) {self.description}"


def _close_handle(handle: TransportHandle) -> None:
    try:
        handle.close()
    except Exception as exc:
        logger.warning("transport handle close failed: {}", exc)


class HTTPSession:
    """Configures and performs one HTTP request, any number of times.

    Not safe for concurrent perform calls; use one session per in-flight request.

        with create_session("https://example.com/items", HTTPRequestMethod.POST) as session:
            session.set_header("Content-Type", "application/json")
            session.body = b'{"name": "x"}'
            response = session.perform()
    """

    def __init__(
        self,
        url: str,
        transport: TransportHandle,
        method: HTTPRequestMethod | str = HTTPRequestMethod.GET,
        *,
        skip_peer_verification: bool = False,
        skip_hostname_verification: bool = False,
        connect_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS,
        resource_timeout: int = DEFAULT_RESOURCE_TIMEOUT_SECONDS,
        verbose: bool = False,
    ) -> None:
        self._url = url
        self._method = HTTPRequestMethod(method)
        self._skip_peer_verification = skip_peer_verification
        self._skip_hostname_verification = skip_hostname_verification

        self._headers: list[HeaderField] = []
        self._body: bytes | None = None
        self._headers_dirty = False
        self._body_dirty = False
        self._method_dirty = False

        self._handle = transport
        self._finalizer = weakref.finalize(self, _close_handle, transport)

        transport.set_no_signal(True)
        transport.set_url(url)
        transport.set_verbose(verbose)
        transport.set_verify_peer(not skip_peer_verification)
        transport.set_verify_host(not skip_hostname_verification)
        transport.set_custom_method(self._method.value)

        self._connect_timeout = connect_timeout
        self._resource_timeout = resource_timeout
        transport.set_connect_timeout(connect_timeout)
        transport.set_resource_timeout(resource_timeout)

        _log("session_created", url=url, method=self._method.value)

    def __enter__(self) -> "HTTPSession":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<HTTPSession {self._method.value} {self._url}>"

    @property
    def url(self) -> str:
        return self._url

    @property
    def skip_peer_verification(self) -> bool:
        return self._skip_peer_verification

    @property
    def skip_hostname_verification(self) -> bool:
        return self._skip_hostname_verification

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    @property
    def method(self) -> HTTPRequestMethod:
        return self._method

    @method.setter
    def method(self, value: HTTPRequestMethod | str) -> None:
        self._method = HTTPRequestMethod(value)
        self._method_dirty = True

    @property
    def headers(self) -> tuple[HeaderField, ...]:
        """Pending header fields in the order they were set."""
        return tuple(self._headers)

    def set_header(self, name: str, value: str) -> None:
        self._headers.append(HeaderField(name, value))
        self._headers_dirty = True

    def clear_headers(self) -> None:
        self._headers = []
        self._headers_dirty = True

    @property
    def body(self) -> bytes | None:
        return self._body

    @body.setter
    def body(self, data: bytes | None) -> None:
        self._body = bytes(data) if data is not None else None
        self._body_dirty = True

    def set_body(self, data: bytes | None) -> None:
        self.body = data

    @property
    def headers_dirty(self) -> bool:
        return self._headers_dirty

    @property
    def body_dirty(self) -> bool:
        return self._body_dirty

    @property
    def method_dirty(self) -> bool:
        return self._method_dirty

    @property
    def connect_timeout(self) -> int:
        return self._connect_timeout

    @connect_timeout.setter
    def connect_timeout(self, seconds: int) -> None:
        self._connect_timeout = seconds
        self._handle.set_connect_timeout(seconds)

    @property
    def resource_timeout(self) -> int:
        return self._resource_timeout

    @resource_timeout.setter
    def resource_timeout(self, seconds: int) -> None:
        self._resource_timeout = seconds
        self._handle.set_resource_timeout(seconds)

    def set_timeouts(self, connect_seconds: int, resource_seconds: int) -> None:
        self.connect_timeout = connect_seconds
        self.resource_timeout = resource_seconds

    def authenticate(self, method: AuthMethod, username: str, password: str) -> None:
        self._handle.set_credentials(username, password, AuthMethod(method))

    def _reconcile(self) -> None:
        if self._method_dirty:
            self._handle.set_custom_method(self._method.value)
            self._method_dirty = False

        if self._headers_dirty:
            self._handle.set_headers([field.as_line() for field in self._headers])
            self._headers_dirty = False

        if self._body_dirty:
            self._handle.set_body(self._body)
            self._body_dirty = False

    def perform(self) -> HTTPResponse:
        """Run the request once; raise HTTPRequestError if the transport fails.

        Non-2xx statuses are returned as responses, not errors.
        """
        if self.closed:
            raise RuntimeError("session is closed")

        self._reconcile()

        buffer = ResponseBuffer()
        self._handle.bind_writer(buffer.write)
        try:
            self._handle.perform()
            status_code = self._handle.response_code()
            body = buffer.getvalue()
        except TransportError as exc:
            _log(
                "request_failed",
                url=self._url,
                method=self._method.value,
                code=exc.code,
                description=exc.description,
            )
            raise HTTPRequestError.curl(exc.code, exc.description) from exc
        finally:
            self._handle.bind_writer(None)
            buffer.release()

        _log(
            "request_completed",
            url=self._url,
            method=self._method.value,
            status_code=status_code,
            body_bytes=len(body),
        )
        return HTTPResponse(status_code=status_code, body=body)

    def perform_async(
        self,
        executor: Executor,
        completion: Callable[[Exception | None, HTTPResponse | None], None],
    ) -> Future[None]:
        """Run perform on executor and report the outcome through completion."""
        return perform_async(self, executor, completion)

    def close(self) -> None:
        """Release the transport handle. Safe to call more than once."""
        if self._finalizer.alive:
            self._finalizer()
            _log("session_closed", url=self._url)
