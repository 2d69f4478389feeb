"""Cookie jar usage examples.

Run directly:
    uv run python -m examples.cookie_jar

The examples run offline: response headers are handed to the calls directly instead of coming from a server.
"""

import asyncio
import sys
from datetime import UTC, datetime, timedelta

from pyreqwest.http import HeaderMap

from pyreqwest_cookiejar.cookie import CookieRecord
from pyreqwest_cookiejar.interceptor import CookieInterceptor
from pyreqwest_cookiejar.jar import CookieJar

START = datetime(2025, 1, 1, tzinfo=UTC)


class ManualClock:
    def __init__(self) -> None:
        self.now = START

    def __call__(self) -> datetime:
        return self.now


def example_parse_cookie() -> None:
    """Example 1: Parse a Set-Cookie value"""
    cookie = CookieRecord.parse("sid=abc123; Path=/api; Max-Age=3600; Secure; HttpOnly", now=START)
    print(
        {
            "example": "parse_cookie",
            "name": cookie.name,
            "value": cookie.value,
            "path": cookie.path,
            "secure": cookie.secure,
            "expires_at": cookie.expires_at.isoformat() if cookie.expires_at else None,
            "str": str(cookie),
        }
    )


def example_interceptor_calls() -> None:
    """Example 2: Cookies set by one call are sent with the next one"""
    interceptor = CookieInterceptor(CookieJar(), default_authority="greeter.example")

    first = interceptor.start_call("helloworld.Greeter/SayHello")
    first.send_headers(HeaderMap())
    first.receive_headers(HeaderMap([("set-cookie", "session=s1"), ("set-cookie", "lang=en")]))
    first.close()

    second = interceptor.start_call("helloworld.Greeter/SayHello")
    request_headers = HeaderMap()
    sent = second.send_headers(request_headers)
    second.close()

    print(
        {
            "example": "interceptor_calls",
            "url": str(second.url),
            "sent": sent,
            "cookie_headers": request_headers.getall("cookie"),
        }
    )


def example_expiry() -> None:
    """Example 3: Cookies expire by the jar clock"""
    clock = ManualClock()
    jar = CookieJar(clock=clock)
    jar.submit("https://greeter.example/", ["short=1; Max-Age=60", "long=2; Max-Age=3600"])

    before = jar.select("https://greeter.example/")
    clock.now += timedelta(minutes=5)
    after = jar.select("https://greeter.example/")

    print({"example": "expiry", "before": before, "after": after, "stored": len(jar)})


def example_domain_scoping() -> None:
    """Example 4: Cookies are only accepted for and sent to the exact host"""
    jar = CookieJar()
    stored = jar.submit(
        "https://api.greeter.example/",
        ["own=1", "parent=2; Domain=greeter.example", "explicit=3; Domain=.api.greeter.example"],
    )
    print(
        {
            "example": "domain_scoping",
            "stored": stored,
            "api": jar.cookies("https://api.greeter.example/"),
            "parent": jar.cookies("https://greeter.example/"),
            "sub": jar.cookies("https://www.api.greeter.example/"),
        }
    )


if __name__ == "__main__":  # pragma: no cover
    from ._utils import run_examples

    asyncio.run(run_examples(sys.modules[__name__]))
