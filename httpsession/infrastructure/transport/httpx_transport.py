"""Concrete transport implementation using httpx.

Failures are reported with libcurl's error codes and messages so callers see
the same error taxonomy whichever backend performs the transfer.
"""
from __future__ import annotations

import socket
import ssl
from typing import Generator, Sequence

import httpx
from loguru import logger

from httpsession.constants import (
    CURL_ERROR_MESSAGES,
    CURLE_COULDNT_CONNECT,
    CURLE_COULDNT_RESOLVE_HOST,
    CURLE_NOT_BUILT_IN,
    CURLE_OPERATION_TIMEDOUT,
    CURLE_PEER_FAILED_VERIFICATION,
    CURLE_RECV_ERROR,
    CURLE_SEND_ERROR,
    CURLE_SSL_CONNECT_ERROR,
    CURLE_UNSUPPORTED_PROTOCOL,
    CURLE_WRITE_ERROR,
    AuthMethod,
)
from httpsession.core import SERVICE_NAME
from httpsession.ports.transport import TransportError, TransportHandle, WriteCallback


def _transport_error(code: int) -> TransportError:
    return TransportError(code, CURL_ERROR_MESSAGES[code])


def _caused_by(exc: BaseException, kind: type[BaseException]) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, kind):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def _classify(exc: httpx.HTTPError) -> int:
    if isinstance(exc, httpx.TimeoutException):
        return CURLE_OPERATION_TIMEDOUT
    if isinstance(exc, httpx.UnsupportedProtocol):
        return CURLE_UNSUPPORTED_PROTOCOL
    if isinstance(exc, httpx.ConnectError):
        if _caused_by(exc, socket.gaierror):
            return CURLE_COULDNT_RESOLVE_HOST
        if _caused_by(exc, ssl.SSLCertVerificationError):
            return CURLE_PEER_FAILED_VERIFICATION
        if _caused_by(exc, ssl.SSLError):
            return CURLE_SSL_CONNECT_ERROR
        return CURLE_COULDNT_CONNECT
    if isinstance(exc, httpx.WriteError):
        return CURLE_SEND_ERROR
    return CURLE_RECV_ERROR


class _ChallengeAuth(httpx.Auth):
    """Answers a 401 challenge with the strongest scheme allowed by the bitmask.

    Basic-only credentials are sent up front, as libcurl does.
    """

    def __init__(self, username: str, password: str, methods: AuthMethod) -> None:
        self._basic = httpx.BasicAuth(username, password)
        self._digest = httpx.DigestAuth(username, password)
        self._allow_basic = bool(methods & AuthMethod.BASIC)
        self._allow_digest = bool(methods & (AuthMethod.DIGEST | AuthMethod.DIGEST_IE))

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if self._allow_basic and not self._allow_digest:
            yield from self._basic.auth_flow(request)
            return

        response = yield request
        if response.status_code != 401:
            return
        schemes = [
            value.split(" ", 1)[0].lower()
            for value in response.headers.get_list("www-authenticate")
        ]

        if self._allow_digest and "digest" in schemes:
            flow = self._digest.auth_flow(request)
            next(flow)
            try:
                retry = flow.send(response)
            except StopIteration:
                return
            yield retry
        elif self._allow_basic and "basic" in schemes:
            yield from self._basic.auth_flow(request)


class HttpxTransport(TransportHandle):
    """TransportHandle backed by an httpx.Client.

    The client is built on first perform and rebuilt only when the TLS policy
    changes; every other option is applied per transfer.
    """

    def __init__(self, transport: httpx.BaseTransport | None = None) -> None:
        self._transport = transport
        self._client: httpx.Client | None = None

        self._url = ""
        self._method = "GET"
        self._verbose = False
        self._verify_peer = True
        self._verify_host = True
        self._connect_timeout = 0
        self._resource_timeout = 0
        self._headers: list[tuple[str, str]] = []
        self._body: bytes | None = None
        self._auth: httpx.Auth | None = None
        self._auth_error: int | None = None
        self._writer: WriteCallback | None = None
        self._status_code = 0

    def _invalidate_client(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _ssl_verify(self) -> bool | ssl.SSLContext:
        if not self._verify_peer:
            return False
        if not self._verify_host:
            context = ssl.create_default_context()
            context.check_hostname = False
            return context
        return True

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                verify=self._ssl_verify(),
                transport=self._transport,
                follow_redirects=False,
            )
        return self._client

    def _timeout(self) -> httpx.Timeout:
        # 0 keeps libcurl's meaning: no limit
        return httpx.Timeout(
            self._resource_timeout or None,
            connect=self._connect_timeout or None,
        )

    def _debug(self, prefix: str, text: str) -> None:
        if self._verbose:
            logger.bind(service_name=SERVICE_NAME, event="transport_debug").debug("{} {}", prefix, text)

    def set_url(self, url: str) -> None:
        self._url = url

    def set_custom_method(self, method: str) -> None:
        self._method = method

    def set_verbose(self, enabled: bool) -> None:
        self._verbose = enabled

    def set_verify_peer(self, enabled: bool) -> None:
        if enabled != self._verify_peer:
            self._verify_peer = enabled
            self._invalidate_client()

    def set_verify_host(self, enabled: bool) -> None:
        if enabled != self._verify_host:
            self._verify_host = enabled
            self._invalidate_client()

    def set_no_signal(self, enabled: bool) -> None:
        # httpx never raises signals for timeouts
        return

    def set_connect_timeout(self, seconds: int) -> None:
        self._connect_timeout = seconds

    def set_resource_timeout(self, seconds: int) -> None:
        self._resource_timeout = seconds

    def set_credentials(self, username: str, password: str, auth: AuthMethod) -> None:
        self._auth_error = None
        if not auth:
            self._auth = None
        elif auth & (AuthMethod.BASIC | AuthMethod.DIGEST | AuthMethod.DIGEST_IE):
            self._auth = _ChallengeAuth(username, password, auth)
        else:
            # NEGOTIATE / NTLM only
            self._auth = None
            self._auth_error = CURLE_NOT_BUILT_IN

    def set_headers(self, lines: Sequence[str]) -> None:
        headers = []
        for line in lines:
            name, _, value = line.partition(":")
            headers.append((name.strip(), value.strip()))
        self._headers = headers

    def set_body(self, data: bytes | None) -> None:
        self._body = data

    def bind_writer(self, callback: WriteCallback | None) -> None:
        self._writer = callback

    def perform(self) -> None:
        self._status_code = 0
        if self._auth_error is not None:
            raise _transport_error(self._auth_error)

        client = self._get_client()
        self._debug(">", f"{self._method} {self._url}")
        try:
            with client.stream(
                self._method,
                self._url,
                headers=self._headers,
                content=self._body,
                auth=self._auth,
                timeout=self._timeout(),
            ) as response:
                self._debug("<", f"{response.http_version} {response.status_code} {response.reason_phrase}")
                for chunk in response.iter_bytes():
                    self._deliver(chunk)
                self._status_code = response.status_code
        except httpx.HTTPError as exc:
            code = _classify(exc)
            raise TransportError(code, CURL_ERROR_MESSAGES[code]) from exc

    def _deliver(self, chunk: bytes) -> None:
        writer = self._writer
        consumed = writer(chunk) if writer is not None else 0
        if consumed != len(chunk):
            raise _transport_error(CURLE_WRITE_ERROR)

    def response_code(self) -> int:
        return self._status_code

    def close(self) -> None:
        self._writer = None
        self._invalidate_client()

    def __repr__(self) -> str:
        return f"<HttpxTransport {self._method} {self._url!r}>"
