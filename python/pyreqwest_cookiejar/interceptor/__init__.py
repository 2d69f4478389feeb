"""Transport neutral interceptor driving the cookie jar for each call."""

from pyreqwest_cookiejar._cookiejar.interceptor import (
    COOKIE,
    SET_COOKIE_HEADERS,
    CallState,
    CookieCall,
    CookieInterceptor,
)

__all__ = [
    "COOKIE",
    "SET_COOKIE_HEADERS",
    "CallState",
    "CookieCall",
    "CookieInterceptor",
]
