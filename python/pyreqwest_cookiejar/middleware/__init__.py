"""pyreqwest middlewares attaching and storing cookies."""

from pyreqwest_cookiejar._cookiejar.middleware import (
    AUTHORITY_EXTENSION,
    CookieMiddleware,
    SyncCookieMiddleware,
    start_request_call,
)

__all__ = [
    "AUTHORITY_EXTENSION",
    "CookieMiddleware",
    "SyncCookieMiddleware",
    "start_request_call",
]
