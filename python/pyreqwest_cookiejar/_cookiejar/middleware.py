from typing import TYPE_CHECKING, Final

from pyreqwest_cookiejar._cookiejar.interceptor import CookieCall, CookieInterceptor

if TYPE_CHECKING:
    from pyreqwest.middleware import Next, SyncNext
    from pyreqwest.request import Request
    from pyreqwest.response import Response, SyncResponse

AUTHORITY_EXTENSION: Final = "cookie_authority"


def start_request_call(interceptor: CookieInterceptor, request: "Request") -> CookieCall:
    """Start the cookie call for a pyreqwest request.

    The authority comes from the request's "cookie_authority" extension, then the interceptor's default authority,
    then the request URL itself. Only in the last case is the request scheme kept as is.
    """
    url = request.url
    override = request.extensions.get(AUTHORITY_EXTENSION)
    if override is None and interceptor.default_authority is None and url.has_host:
        return interceptor.call_for_url(url)
    return interceptor.start_call(url.path, override)


class CookieMiddleware:
    """Middleware that sends jar cookies with each request and stores cookies set by each response."""

    def __init__(self, interceptor: CookieInterceptor) -> None:
        self._interceptor = interceptor

    @property
    def interceptor(self) -> CookieInterceptor:
        return self._interceptor

    async def __call__(self, request: "Request", next_handler: "Next") -> "Response":
        call = start_request_call(self._interceptor, request)
        try:
            call.send_headers(request.headers)
            response = await next_handler.run(request)
            call.receive_headers(response.headers)
            return response
        finally:
            call.close()


class SyncCookieMiddleware:
    """Blocking variant of CookieMiddleware for SyncClient."""

    def __init__(self, interceptor: CookieInterceptor) -> None:
        self._interceptor = interceptor

    @property
    def interceptor(self) -> CookieInterceptor:
        return self._interceptor

    def __call__(self, request: "Request", next_handler: "SyncNext") -> "SyncResponse":
        call = start_request_call(self._interceptor, request)
        try:
            call.send_headers(request.headers)
            response = next_handler.run(request)
            call.receive_headers(response.headers)
            return response
        finally:
            call.close()
