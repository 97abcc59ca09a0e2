"""Library-level constants shared across modules."""
from __future__ import annotations

from enum import Enum, IntFlag
from functools import reduce
from operator import or_


class HTTPRequestMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class AuthMethod(IntFlag):
    """HTTP authentication methods; values match libcurl's CURLAUTH_* bits."""

    NONE = 0
    BASIC = 1 << 0
    DIGEST = 1 << 1
    NEGOTIATE = 1 << 2
    NTLM = 1 << 3
    DIGEST_IE = 1 << 4


_ALL_AUTH_METHODS = reduce(or_, (m for m in AuthMethod if m), AuthMethod.NONE)

# Complements over the known flags, mirroring CURLAUTH_ANY / CURLAUTH_ANYSAFE.
# The pycurl adapter hands these two values to libcurl as its own ANY/ANYSAFE
# masks, which also admit schemes newer than the flags above.
AUTH_ANY = _ALL_AUTH_METHODS & ~AuthMethod.DIGEST_IE
AUTH_ANY_SAFE = _ALL_AUTH_METHODS & ~(AuthMethod.BASIC | AuthMethod.DIGEST_IE)


class TRANSPORT_BACKEND:
    PYCURL = "pycurl"
    HTTPX = "httpx"


DEFAULT_CONNECT_TIMEOUT_SECONDS = 300
DEFAULT_RESOURCE_TIMEOUT_SECONDS = 0  # unbounded

# libcurl error codes the adapters report
CURLE_UNSUPPORTED_PROTOCOL = 1
CURLE_URL_MALFORMAT = 3
CURLE_NOT_BUILT_IN = 4
CURLE_COULDNT_RESOLVE_PROXY = 5
CURLE_COULDNT_RESOLVE_HOST = 6
CURLE_COULDNT_CONNECT = 7
CURLE_PARTIAL_FILE = 18
CURLE_WRITE_ERROR = 23
CURLE_OPERATION_TIMEDOUT = 28
CURLE_SSL_CONNECT_ERROR = 35
CURLE_TOO_MANY_REDIRECTS = 47
CURLE_GOT_NOTHING = 52
CURLE_SEND_ERROR = 55
CURLE_RECV_ERROR = 56
CURLE_PEER_FAILED_VERIFICATION = 60

# curl_easy_strerror() text; both backends describe failures with it
CURL_ERROR_MESSAGES: dict[int, str] = {
    CURLE_UNSUPPORTED_PROTOCOL: "Unsupported protocol",
    CURLE_URL_MALFORMAT: "URL using bad/illegal format or missing URL",
    CURLE_NOT_BUILT_IN: (
        "A requested feature, protocol or option was not found built-in in this "
        "libcurl due to a build-time decision."
    ),
    CURLE_COULDNT_RESOLVE_PROXY: "Couldn't resolve proxy name",
    CURLE_COULDNT_RESOLVE_HOST: "Couldn't resolve host name",
    CURLE_COULDNT_CONNECT: "Couldn't connect to server",
    CURLE_PARTIAL_FILE: "Transferred a partial file",
    CURLE_WRITE_ERROR: "Failed writing received data to disk/application",
    CURLE_OPERATION_TIMEDOUT: "Timeout was reached",
    CURLE_SSL_CONNECT_ERROR: "SSL connect error",
    CURLE_TOO_MANY_REDIRECTS: "Number of redirects hit maximum amount",
    CURLE_GOT_NOTHING: "Server returned nothing (no headers, no data)",
    CURLE_SEND_ERROR: "Failed sending data to the peer",
    CURLE_RECV_ERROR: "Failure when receiving data from the peer",
    CURLE_PEER_FAILED_VERIFICATION: "SSL peer certificate or SSH remote key was not OK",
}
