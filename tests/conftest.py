from collections.abc import AsyncGenerator

import pytest
from pyreqwest_cookiejar.interceptor import CookieInterceptor
from pyreqwest_cookiejar.jar import CookieJar

from tests.servers.echo_server import EchoServer
from tests.servers.server import EmbeddedServer
from tests.utils import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def jar(clock: FakeClock) -> CookieJar:
    return CookieJar(clock=clock)


@pytest.fixture
def interceptor(jar: CookieJar) -> CookieInterceptor:
    return CookieInterceptor(jar)


@pytest.fixture
def plaintext_interceptor(jar: CookieJar) -> CookieInterceptor:
    return CookieInterceptor(jar, use_plaintext=True)


@pytest.fixture
async def echo_server() -> AsyncGenerator[EmbeddedServer]:
    async with EmbeddedServer(EchoServer()).serve_context() as server:
        yield server
