from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from typing import NamedTuple

from pyreqwest.cookie import Cookie

from pyreqwest_cookiejar.exceptions import MalformedCookieError

SET_COOKIE = "set-cookie"
SET_COOKIE2 = "set-cookie2"

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_FAR_FUTURE = datetime.max.replace(tzinfo=UTC)


class CookieKey(NamedTuple):
    """Storage identity of a cookie. A cookie with the same key replaces the stored one."""

    domain: str
    path: str
    name: str


@dataclass(frozen=True, slots=True)
class CookieRecord:
    """A cookie as held by the jar: the parsed pyreqwest Cookie plus its absolute expiry.

    Attribute parsing is done by `pyreqwest.cookie.Cookie`. The record adds what the jar needs on top of it:
    the expiry resolved against the time the cookie was received, and whether the Domain was assigned by the jar.
    """

    cookie: Cookie
    expires_at: datetime | None = None
    host_only: bool = False

    @staticmethod
    def parse(cookie: str, *, now: datetime | None = None) -> "CookieRecord":
        """Parse a single Set-Cookie header value.

        Only the leading name=value pair is the cookie. Later segments are attributes; unknown ones, including
        stray name=value pairs, are ignored. Max-Age takes precedence over Expires.

        Args:
            cookie: Raw header value, e.g. "sid=123; Path=/; Max-Age=60"
            now: Reference time for Max-Age, defaults to the current UTC time

        Raises:
            MalformedCookieError: The value has no name=value pair or the name is empty
        """
        try:
            parsed = Cookie.parse(cookie)
        except ValueError as e:
            raise MalformedCookieError(str(e), details={"cookie": cookie}) from e
        return CookieRecord.from_cookie(parsed, now=now)

    @staticmethod
    def from_cookie(cookie: Cookie, *, now: datetime | None = None) -> "CookieRecord":
        """Wrap an already parsed cookie, resolving its expiry relative to `now` (current UTC time by default)."""
        return CookieRecord(cookie, expires_at=_resolve_expiry(cookie, now or datetime.now(UTC)))

    @staticmethod
    def split_header(value: str, header_name: str = SET_COOKIE) -> list[str]:
        """Split a response header value into individual cookie strings.

        Set-Cookie carries exactly one cookie per value. Set-Cookie2 may carry several comma separated cookies.
        """
        if header_name.lower() != SET_COOKIE2:
            return [value]
        return _split_unquoted(value, ",")

    @property
    def name(self) -> str:
        return self.cookie.name

    @property
    def value(self) -> str:
        return self.cookie.value

    @property
    def domain(self) -> str | None:
        return self.cookie.domain

    @property
    def path(self) -> str | None:
        return self.cookie.path

    @property
    def secure(self) -> bool:
        return self.cookie.secure

    @property
    def http_only(self) -> bool:
        return self.cookie.http_only

    @property
    def key(self) -> CookieKey:
        """Storage key. Only defined once the cookie is scoped to a domain and path."""
        domain, path = self.cookie.domain, self.cookie.path
        assert domain is not None and path is not None, "Cookie is not scoped to a domain and path"
        return CookieKey(domain, path, self.cookie.name)

    @property
    def is_session(self) -> bool:
        """Whether the cookie has no expiry."""
        return self.expires_at is None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def scoped(self, domain: str, path: str, *, host_only: bool) -> "CookieRecord":
        """Copy bound to the given domain and path."""
        return replace(self, cookie=self.cookie.with_domain(domain).with_path(path), host_only=host_only)

    def stripped(self) -> str:
        """Return just the 'name=value' pair, as sent in a Cookie request header."""
        return self.cookie.stripped()

    def __str__(self) -> str:
        return str(self.cookie)

    def __repr__(self) -> str:
        return f"CookieRecord({str(self)!r})"


def _resolve_expiry(cookie: Cookie, now: datetime) -> datetime | None:
    try:
        max_age = cookie.max_age
    except (OverflowError, ValueError):
        # Max-Age beyond what timedelta can hold
        return _FAR_FUTURE
    if max_age is None:
        return cookie.expires_datetime
    if max_age <= timedelta(0):
        return _EPOCH
    try:
        return now + max_age
    except OverflowError:
        return _FAR_FUTURE


def _split_unquoted(value: str, separator: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    quoted = False
    for char in value:
        if char == '"':
            quoted = not quoted
        elif char == separator and not quoted:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]
