"""Transport port: contract for the engine that performs one HTTP exchange.

The session depends on this port; infrastructure (pycurl, httpx) implements it.
A handle is configured incrementally through its setters and keeps every
applied option until it is changed again or the handle is closed.
"""
from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence, runtime_checkable

from httpsession.constants import AuthMethod

# Receives one chunk of response body; returns the number of bytes consumed.
# Returning fewer than len(chunk) aborts the transfer.
WriteCallback = Callable[[bytes], int]


class TransportError(Exception):
    """Raised by TransportHandle.perform for any non-success transport status."""

    def __init__(self, code: int, description: str) -> None:
        super().__init__(code, description)
        self.code = code
        self.description = description

    def __str__(self) -> str:
        return f"({self.code}) {self.description}"


@runtime_checkable
class TransportHandle(Protocol):
    """Port: one reusable transfer handle. Implementations live in infrastructure."""

    def set_url(self, url: str) -> None: ...

    def set_custom_method(self, method: str) -> None: ...

    def set_verbose(self, enabled: bool) -> None: ...

    def set_verify_peer(self, enabled: bool) -> None: ...

    def set_verify_host(self, enabled: bool) -> None: ...

    def set_no_signal(self, enabled: bool) -> None: ...

    def set_connect_timeout(self, seconds: int) -> None: ...

    def set_resource_timeout(self, seconds: int) -> None:
        """0 means no limit on the whole transfer."""
        ...

    def set_credentials(self, username: str, password: str, auth: AuthMethod) -> None: ...

    def set_headers(self, lines: Sequence[str]) -> None:
        """Replace the active header set with `"Name: value"` lines."""
        ...

    def set_body(self, data: Optional[bytes]) -> None:
        """Attach the outgoing payload; None detaches any payload."""
        ...

    def bind_writer(self, callback: Optional[WriteCallback]) -> None:
        """Route received body chunks to callback; None unbinds."""
        ...

    def perform(self) -> None:
        """Run the transfer to completion; raise TransportError on failure."""
        ...

    def response_code(self) -> int: ...

    def close(self) -> None: ...
