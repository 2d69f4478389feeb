"""Cookie types and interfaces."""

from typing import Protocol


class CookieProvider(Protocol):
    """Header level cookie provider interface, implemented by CookieJar.

    pyreqwest's `ClientBuilder.cookie_provider()` only accepts its native `CookieStore`. The jar is attached to a
    pyreqwest client with `CookieMiddleware` instead, and keeps this interface for clients that take a provider.
    """

    def set_cookies(self, cookie_headers: list[str], url: str) -> None:
        """Set cookies for a given URL.

        Called when the HTTP client receives Set-Cookie headers from a server response.

        Args:
            cookie_headers: List of Set-Cookie header values received from url
            url: The URL that sent the Set-Cookie headers
        """

    def cookies(self, url: str) -> str | None:
        """Get cookies for a given URL.

        Called when the HTTP client is about to make a request and needs to determine which cookies to send.

        Args:
            url: The URL for which cookies are requested

        Returns:
            A string containing the Cookie header value, or None if no cookies
        """
