"""Cookie records held by the jar. Parsing is done by `pyreqwest.cookie.Cookie`."""

from pyreqwest_cookiejar._cookiejar.cookie import SET_COOKIE, SET_COOKIE2, CookieKey, CookieRecord

__all__ = [
    "SET_COOKIE",
    "SET_COOKIE2",
    "CookieKey",
    "CookieRecord",
]
