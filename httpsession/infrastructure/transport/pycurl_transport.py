"""Concrete transport implementation using libcurl through pycurl (default backend)."""
from __future__ import annotations

from typing import Sequence

import pycurl
from loguru import logger

from httpsession.constants import AUTH_ANY, AUTH_ANY_SAFE, CURL_ERROR_MESSAGES, AuthMethod
from httpsession.core import SERVICE_NAME
from httpsession.ports.transport import TransportError, TransportHandle, WriteCallback

_DEBUG_PREFIXES = {
    pycurl.INFOTYPE_TEXT: "*",
    pycurl.INFOTYPE_HEADER_IN: "<",
    pycurl.INFOTYPE_HEADER_OUT: ">",
}

# libcurl's own masks also cover schemes AuthMethod has no flag for
_CURL_AUTH_MASKS = {
    AUTH_ANY: pycurl.HTTPAUTH_ANY,
    AUTH_ANY_SAFE: pycurl.HTTPAUTH_ANYSAFE,
}


class PycurlTransport(TransportHandle):
    """TransportHandle backed by one pycurl.Curl easy handle.

    A single trampoline is registered as WRITEFUNCTION for the handle's whole
    life; bind_writer only swaps the sink it forwards to, so each perform can
    own a fresh buffer without re-registering callbacks.
    """

    def __init__(self, curl: pycurl.Curl | None = None) -> None:
        self._curl = curl if curl is not None else pycurl.Curl()
        self._writer: WriteCallback | None = None
        self._curl.setopt(pycurl.WRITEFUNCTION, self._on_write)
        self._curl.setopt(pycurl.DEBUGFUNCTION, self._on_debug)

    def _on_write(self, chunk: bytes) -> int:
        writer = self._writer
        if writer is None:
            return 0
        return writer(chunk)

    def _on_debug(self, debug_type: int, message: bytes) -> None:
        prefix = _DEBUG_PREFIXES.get(debug_type)
        if prefix is None:
            return
        text = message.decode("utf-8", errors="replace").rstrip()
        if text:
            logger.bind(service_name=SERVICE_NAME, event="transport_debug").debug("{} {}", prefix, text)

    def set_url(self, url: str) -> None:
        self._curl.setopt(pycurl.URL, url)

    def set_custom_method(self, method: str) -> None:
        self._curl.setopt(pycurl.CUSTOMREQUEST, method)

    def set_verbose(self, enabled: bool) -> None:
        self._curl.setopt(pycurl.VERBOSE, 1 if enabled else 0)

    def set_verify_peer(self, enabled: bool) -> None:
        self._curl.setopt(pycurl.SSL_VERIFYPEER, 1 if enabled else 0)

    def set_verify_host(self, enabled: bool) -> None:
        self._curl.setopt(pycurl.SSL_VERIFYHOST, 2 if enabled else 0)

    def set_no_signal(self, enabled: bool) -> None:
        self._curl.setopt(pycurl.NOSIGNAL, 1 if enabled else 0)

    def set_connect_timeout(self, seconds: int) -> None:
        self._curl.setopt(pycurl.CONNECTTIMEOUT, int(seconds))

    def set_resource_timeout(self, seconds: int) -> None:
        self._curl.setopt(pycurl.TIMEOUT, int(seconds))

    def set_credentials(self, username: str, password: str, auth: AuthMethod) -> None:
        self._curl.setopt(pycurl.USERNAME, username)
        self._curl.setopt(pycurl.PASSWORD, password)
        auth = AuthMethod(auth)
        self._curl.setopt(pycurl.HTTPAUTH, _CURL_AUTH_MASKS.get(auth, int(auth)))

    def set_headers(self, lines: Sequence[str]) -> None:
        if not lines:
            # an empty list leaves the previous HTTPHEADER in place
            self._curl.unsetopt(pycurl.HTTPHEADER)
            return
        # bytes so non-ASCII values reach libcurl instead of failing in pycurl
        self._curl.setopt(pycurl.HTTPHEADER, [line.encode("utf-8") for line in lines])

    def set_body(self, data: bytes | None) -> None:
        if data is None:
            # back to a body-less request; CUSTOMREQUEST still names the verb
            self._curl.setopt(pycurl.HTTPGET, 1)
            return
        # pycurl copies the payload and sets POSTFIELDSIZE, so binary data is safe
        self._curl.setopt(pycurl.POSTFIELDS, data)

    def bind_writer(self, callback: WriteCallback | None) -> None:
        self._writer = callback

    def perform(self) -> None:
        try:
            self._curl.perform()
        except pycurl.error as exc:
            code = int(exc.args[0]) if exc.args else -1
            description = CURL_ERROR_MESSAGES.get(code)
            if description is None:
                # unmapped code: the connection-specific error buffer text
                description = (str(exc.args[1]) if len(exc.args) > 1 else "") or self._curl.errstr()
            raise TransportError(code, description) from exc

    def response_code(self) -> int:
        return int(self._curl.getinfo(pycurl.RESPONSE_CODE))

    def close(self) -> None:
        self._writer = None
        self._curl.close()
