from dataclasses import dataclass, field
from typing import Any

import pytest
from pyreqwest.client import SyncClientBuilder
from pyreqwest.http import HeaderMap, Url
from pyreqwest_cookiejar.cookie.types import CookieProvider
from pyreqwest_cookiejar.exceptions import MissingAuthorityError
from pyreqwest_cookiejar.interceptor import CookieInterceptor
from pyreqwest_cookiejar.jar import CookieJar
from pyreqwest_cookiejar.middleware import SyncCookieMiddleware

from tests.servers.echo_server import echoed_headers
from tests.servers.server import EmbeddedServer


@dataclass
class FakeRequest:
    url: Url
    headers: HeaderMap = field(default_factory=HeaderMap)
    extensions: dict[str, Any] = field(default_factory=dict)


@dataclass
class FakeResponse:
    headers: HeaderMap


class FakeSyncNext:
    def __init__(self, *response_headers: tuple[str, str]) -> None:
        self.response_headers = list(response_headers)
        self.requests: list[FakeRequest] = []

    def run(self, request: FakeRequest) -> FakeResponse:
        self.requests.append(request)
        return FakeResponse(HeaderMap(self.response_headers))


def send(middleware: SyncCookieMiddleware, request: FakeRequest, next_handler: FakeSyncNext) -> FakeResponse:
    return middleware(request, next_handler)  # type: ignore[arg-type,return-value]


def test_middleware(interceptor: CookieInterceptor):
    middleware = SyncCookieMiddleware(interceptor)
    url = Url("https://svc.example/pkg.Greeter/SayHello")

    send(middleware, FakeRequest(url), FakeSyncNext(("Set-Cookie", "sid=123"), ("Set-Cookie2", "a=1, b=2")))

    next_handler = FakeSyncNext()
    send(middleware, FakeRequest(url), next_handler)
    assert next_handler.requests[0].headers.getall("cookie") == ["sid=123", "a=1", "b=2"]
    assert middleware.interceptor is interceptor


def test_middleware_overwrite_and_expire(jar: CookieJar):
    middleware = SyncCookieMiddleware(CookieInterceptor(jar))
    url = Url("https://svc.example/pkg.Svc/M")

    send(middleware, FakeRequest(url), FakeSyncNext(("set-cookie", "sid=1"), ("set-cookie", "keep=1")))
    send(middleware, FakeRequest(url), FakeSyncNext(("set-cookie", "sid=2")))
    assert jar.select(url) == ["keep=1", "sid=2"]

    send(middleware, FakeRequest(url), FakeSyncNext(("set-cookie", "sid=2; Max-Age=0")))
    assert jar.select(url) == ["keep=1"]


def test_missing_authority(interceptor: CookieInterceptor):
    next_handler = FakeSyncNext()
    with pytest.raises(MissingAuthorityError):
        send(SyncCookieMiddleware(interceptor), FakeRequest(Url("unix:/run/grpc.sock")), next_handler)
    assert next_handler.requests == []


def test_client_round_trip(jar: CookieJar, echo_server: EmbeddedServer):
    middleware = SyncCookieMiddleware(CookieInterceptor(jar))
    set_cookies = [("header_Set_Cookie", "sid=1"), ("header_Set_Cookie", "lang=en")]

    with SyncClientBuilder().with_middleware(middleware).build() as client:
        resp = client.get(echo_server.url).query(set_cookies).build().send()
        assert echoed_headers(resp.json(), "cookie") == []
        assert resp.headers.getall("set-cookie") == ["sid=1", "lang=en"]

        resp = client.get(echo_server.url / "next").build().send()
        assert echoed_headers(resp.json(), "cookie") == ["sid=1", "lang=en"]

    assert jar.select(echo_server.url) == ["sid=1", "lang=en"]


def test_client_round_trip_cookie_provider(jar: CookieJar, echo_server: EmbeddedServer):
    provider: CookieProvider = jar
    middleware = SyncCookieMiddleware(CookieInterceptor(jar, join_cookies=True))
    provider.set_cookies(["sid=1", "lang=en"], str(echo_server.url))

    with SyncClientBuilder().with_middleware(middleware).build() as client:
        resp = client.get(echo_server.url).build().send()
        assert echoed_headers(resp.json(), "cookie") == ["sid=1; lang=en"]

        client.get(echo_server.url).query([("header_Set_Cookie", "sid=2")]).build().send()

    assert provider.cookies(str(echo_server.url)) == "lang=en; sid=2"
