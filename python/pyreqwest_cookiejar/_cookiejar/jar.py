import logging
import threading
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from pyreqwest.cookie import Cookie
from pyreqwest.http import Url

from pyreqwest_cookiejar._cookiejar.cookie import CookieKey, CookieRecord
from pyreqwest_cookiejar.exceptions import MalformedCookieError, MissingAuthorityError
from pyreqwest_cookiejar.types import UrlType

logger = logging.getLogger(__name__)

ENCRYPTED_SCHEMES = frozenset({"https", "wss", "grpcs"})


def default_cookie_path(request_path: str) -> str:
    """Directory of the request path: everything up to and including the last '/', or '/' if there is none."""
    index = request_path.rfind("/")
    if index < 0:
        return "/"
    return request_path[: index + 1]


def path_matches(cookie_path: str, request_path: str) -> bool:
    """Directory-aware prefix match, so '/grpc.Service' does not match '/grpc.ServiceLong'."""
    if request_path == cookie_path:
        return True
    if not request_path.startswith(cookie_path):
        return False
    return cookie_path.endswith("/") or request_path[len(cookie_path)] == "/"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _to_url(url: UrlType) -> Url:
    return url if isinstance(url, Url) else Url(url)


def _host(url: Url) -> str:
    if not url.host_str:
        raise MissingAuthorityError("URL has no host to scope cookies to", details={"url": str(url)})
    return url.host_str.lower()


def _normalize_domain(domain: str) -> str:
    return domain.removeprefix(".").lower()


class CookieJar:
    """Thread-safe in-memory cookie jar.

    Cookies are stored under their (domain, path, name) key. A cookie is only accepted for the exact host that set
    it, and only returned to that same host. Expired cookies are evicted lazily when an operation touches them.

    Implements the CookieProvider protocol (`set_cookies` / `cookies`). With pyreqwest clients it is attached through
    `CookieMiddleware`.
    """

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        """Create an empty cookie jar.

        Args:
            clock: Returns the current time as an aware UTC datetime. Used for all expiry decisions.
        """
        self._clock = clock or _utc_now
        self._lock = threading.Lock()
        # domain -> key -> cookie, in insertion/update order
        self._domains: dict[str, dict[CookieKey, CookieRecord]] = {}

    def submit(self, origin: UrlType, raw_cookies: Iterable[str], scope_path: str | None = None) -> int:
        """Store cookies received in a response from origin.

        Malformed cookies and cookies whose Domain does not equal the origin host are skipped, the rest of the batch
        is still processed. Already expired cookies delete the stored cookie with the same key.

        Args:
            origin: URL of the request the response belongs to
            raw_cookies: Set-Cookie header values, one cookie each
            scope_path: Request path used for the default cookie Path, defaults to the origin path

        Returns:
            Number of cookies stored (inserted or overwritten)
        """
        url = _to_url(origin)
        host = _host(url)
        default_path = default_cookie_path(url.path if scope_path is None else scope_path)
        now = self._clock()

        cookies: list[CookieRecord] = []
        for raw in raw_cookies:
            try:
                cookie = CookieRecord.parse(raw, now=now)
            except MalformedCookieError as e:
                logger.warning("Ignoring malformed cookie from %s: %s (%r)", host, e, raw)
                continue
            if (scoped := self._scope(cookie, host, default_path)) is not None:
                cookies.append(scoped)

        return self._store(cookies, now)

    def insert(self, cookie: Cookie | str, request_url: UrlType) -> bool:
        """Insert a cookie as if set by a response for request_url. Returns whether the cookie was stored.

        Raises:
            MalformedCookieError: cookie is a string that cannot be parsed
        """
        url = _to_url(request_url)
        host = _host(url)
        now = self._clock()
        if isinstance(cookie, str):
            record = CookieRecord.parse(cookie, now=now)
        else:
            record = CookieRecord.from_cookie(cookie, now=now)
        scoped = self._scope(record, host, default_cookie_path(url.path))
        return scoped is not None and self._store([scoped], now) == 1

    def select(self, target: UrlType) -> list[str]:
        """Return the 'name=value' pairs to send with a request to target. An empty list means no Cookie header."""
        return [cookie.stripped() for cookie in self.matches(target)]

    def matches(self, target: UrlType) -> list[CookieRecord]:
        """Return unexpired cookies whose domain equals the target host and whose path matches the target path.

        Secure cookies are only returned for encrypted schemes. Expired cookies met on the way are evicted.
        """
        url = _to_url(target)
        host = _host(url)
        request_path = url.path or "/"
        encrypted = url.scheme in ENCRYPTED_SCHEMES
        now = self._clock()

        matched: list[CookieRecord] = []
        with self._lock:
            cookies = self._domains.get(host)
            if not cookies:
                return matched

            expired: list[CookieKey] = []
            for key, cookie in cookies.items():
                if cookie.is_expired(now):
                    expired.append(key)
                elif path_matches(key.path, request_path) and (encrypted or not cookie.secure):
                    matched.append(cookie)

            for key in expired:
                del cookies[key]
            if not cookies:
                del self._domains[host]

        if expired:
            logger.debug("Evicted %d expired cookie(s) for %s", len(expired), host)
        return matched

    # CookieProvider protocol

    def set_cookies(self, cookie_headers: list[str], url: str) -> None:
        """Store Set-Cookie header values received from url."""
        self.submit(url, cookie_headers)

    def cookies(self, url: str) -> str | None:
        """Cookie header value for url, or None if no cookie matches."""
        if selected := self.select(url):
            return "; ".join(selected)
        return None

    # Inspection

    def contains(self, domain: str, path: str, name: str) -> bool:
        """Whether the jar holds an unexpired cookie with the given key."""
        return self.get(domain, path, name) is not None

    def contains_any(self, domain: str, path: str, name: str) -> bool:
        """Whether the jar holds a cookie with the given key, even an expired one not yet evicted."""
        return self.get_any(domain, path, name) is not None

    def get(self, domain: str, path: str, name: str) -> CookieRecord | None:
        """Return the unexpired cookie with the given key."""
        cookie = self.get_any(domain, path, name)
        if cookie is None or cookie.is_expired(self._clock()):
            return None
        return cookie

    def get_any(self, domain: str, path: str, name: str) -> CookieRecord | None:
        """Return the cookie with the given key, even an expired one not yet evicted."""
        key = CookieKey(_normalize_domain(domain), path, name)
        with self._lock:
            return self._domains.get(key.domain, {}).get(key)

    def remove(self, domain: str, path: str, name: str) -> CookieRecord | None:
        """Remove a cookie from the jar, returning it if it was stored."""
        key = CookieKey(_normalize_domain(domain), path, name)
        with self._lock:
            return self._pop(key)

    def clear(self) -> None:
        """Remove all cookies."""
        with self._lock:
            self._domains.clear()

    def get_all_unexpired(self) -> list[CookieRecord]:
        now = self._clock()
        return [cookie for cookie in self.get_all_any() if not cookie.is_expired(now)]

    def get_all_any(self) -> list[CookieRecord]:
        with self._lock:
            return [cookie for cookies in self._domains.values() for cookie in cookies.values()]

    def __len__(self) -> int:
        with self._lock:
            return sum(len(cookies) for cookies in self._domains.values())

    def __repr__(self) -> str:
        return f"CookieJar({self.get_all_any()!r})"

    def _scope(self, record: CookieRecord, host: str, default_path: str) -> CookieRecord | None:
        if not record.domain:
            domain = host
        elif (domain := _normalize_domain(record.domain)) != host:
            logger.debug("Rejecting cookie %r from %s: domain %r does not match", record.name, host, record.domain)
            return None

        path = record.path if record.path and record.path.startswith("/") else default_path
        return record.scoped(domain, path, host_only=not record.domain)

    def _store(self, cookies: list[CookieRecord], now: datetime) -> int:
        stored = 0
        with self._lock:
            for cookie in cookies:
                key = cookie.key
                previous = self._pop(key)
                if cookie.is_expired(now):
                    if previous is not None:
                        logger.debug("Removed cookie %r for %s: expired on arrival", key.name, key.domain)
                    continue
                self._domains.setdefault(key.domain, {})[key] = cookie
                stored += 1
        return stored

    def _pop(self, key: CookieKey) -> CookieRecord | None:
        cookies = self._domains.get(key.domain)
        if cookies is None:
            return None
        cookie = cookies.pop(key, None)
        if not cookies:
            del self._domains[key.domain]
        return cookie

