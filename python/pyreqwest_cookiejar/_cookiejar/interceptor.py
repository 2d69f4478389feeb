import logging
from enum import Enum
from typing import Final

from pyreqwest.http import Url

from pyreqwest_cookiejar._cookiejar.cookie import SET_COOKIE, SET_COOKIE2, CookieRecord
from pyreqwest_cookiejar._cookiejar.jar import CookieJar
from pyreqwest_cookiejar.exceptions import MissingAuthorityError
from pyreqwest_cookiejar.types import HeadersType

logger = logging.getLogger(__name__)

COOKIE: Final = "cookie"
SET_COOKIE_HEADERS: Final = (SET_COOKIE, SET_COOKIE2)


class CallState(Enum):
    """Lifecycle of a CookieCall.

    HEADERS_SENT is transient: it only holds while `send_headers` attaches cookies to the request headers, and the
    call is in AWAITING_RESPONSE_HEADERS once it returns.
    """

    CREATED = "created"
    HEADERS_SENT = "headers_sent"
    AWAITING_RESPONSE_HEADERS = "awaiting_response_headers"
    RESPONSE_HEADERS_RECEIVED = "response_headers_received"
    CLOSED = "closed"


class CookieInterceptor:
    """Binds a cookie jar to the calls of an RPC client.

    Each call is scoped to the URL built from its authority and method path. The jar is shared by all calls going
    through the interceptor, and may be shared between interceptors.
    """

    def __init__(
        self,
        jar: CookieJar,
        *,
        use_plaintext: bool = False,
        default_authority: str | None = None,
        join_cookies: bool = False,
    ) -> None:
        """Initialize the interceptor.

        Args:
            jar: Cookie jar to read from and write to
            use_plaintext: Build call URLs with http:// instead of https://. Secure cookies are then never sent.
            default_authority: Channel level authority used when a call does not provide its own
            join_cookies: Send all cookies in a single '; ' joined Cookie header instead of one header per cookie
        """
        self._jar = jar
        self._use_plaintext = use_plaintext
        self._default_authority = default_authority
        self._join_cookies = join_cookies

    @property
    def jar(self) -> CookieJar:
        return self._jar

    @property
    def use_plaintext(self) -> bool:
        return self._use_plaintext

    @property
    def default_authority(self) -> str | None:
        return self._default_authority

    @property
    def join_cookies(self) -> bool:
        return self._join_cookies

    def resolve_authority(self, call_authority: str | None = None) -> str:
        """Return the per-call authority if given, else the default one.

        Raises:
            MissingAuthorityError: Neither is available
        """
        if call_authority:
            return call_authority
        if self._default_authority:
            return self._default_authority
        raise MissingAuthorityError("authority cannot be determined for request")

    def call_url(self, authority: str, method: str) -> Url:
        scheme = "http" if self._use_plaintext else "https"
        path = method if method.startswith("/") else f"/{method}"
        return Url(f"{scheme}://{authority}{path}")

    def start_call(self, method: str, authority: str | None = None) -> "CookieCall":
        """Start a call to the given method path, e.g. 'grpc.Service/GetCookies'.

        Raises:
            MissingAuthorityError: The authority cannot be resolved. Nothing has been sent.
        """
        return self.call_for_url(self.call_url(self.resolve_authority(authority), method))

    def call_for_url(self, url: Url) -> "CookieCall":
        """Start a call whose origin and path are already known."""
        return CookieCall(self._jar, url, join_cookies=self._join_cookies)


class CookieCall:
    """Cookie handling for a single call.

    Request cookies are attached once when the request headers are sent, response cookies are stored once when the
    response headers arrive. Both steps use the same call URL.
    """

    def __init__(self, jar: CookieJar, url: Url, *, join_cookies: bool = False) -> None:
        self._jar = jar
        self._url = url
        self._join_cookies = join_cookies
        self._state = CallState.CREATED

    @property
    def url(self) -> Url:
        return self._url

    @property
    def state(self) -> CallState:
        return self._state

    def send_headers(self, headers: HeadersType) -> list[str]:
        """Attach matching cookies to the outgoing request headers. Returns the attached 'name=value' pairs."""
        self._transition(CallState.CREATED, CallState.HEADERS_SENT)
        try:
            cookies = self._jar.select(self._url)
        except Exception:
            logger.exception("Error retrieving cookies for %s", self._url)
            cookies = []

        values = ["; ".join(cookies)] if self._join_cookies and cookies else cookies
        for value in values:
            headers.append(COOKIE, value)

        self._state = CallState.AWAITING_RESPONSE_HEADERS
        return cookies

    def receive_headers(self, headers: HeadersType) -> int:
        """Store the cookies set by the response headers. Returns the number of cookies stored.

        Only Set-Cookie and Set-Cookie2 are inspected. Failures are logged, never raised.
        """
        self._transition(CallState.AWAITING_RESPONSE_HEADERS, CallState.RESPONSE_HEADERS_RECEIVED)

        raw_cookies = [
            raw
            for name in SET_COOKIE_HEADERS
            for value in _header_values(headers, name)
            for raw in CookieRecord.split_header(value, name)
        ]
        if not raw_cookies:
            return 0

        try:
            return self._jar.submit(self._url, raw_cookies)
        except Exception:
            logger.exception("Error processing response cookies for %s", self._url)
            return 0

    def close(self) -> None:
        self._state = CallState.CLOSED

    def _transition(self, expected: CallState, new: CallState) -> None:
        if self._state is not expected:
            msg = f"Cannot move cookie call from {self._state.value} to {new.value}"
            raise RuntimeError(msg)
        self._state = new

    def __repr__(self) -> str:
        return f"CookieCall(url={str(self._url)!r}, state={self._state.value})"


def _header_values(headers: HeadersType, name: str) -> list[str]:
    return headers.getall(name) if name in headers else []
