"""Cookie jar with accept and selection policies."""

from pyreqwest_cookiejar._cookiejar.jar import ENCRYPTED_SCHEMES, CookieJar, default_cookie_path, path_matches

__all__ = [
    "ENCRYPTED_SCHEMES",
    "CookieJar",
    "default_cookie_path",
    "path_matches",
]
