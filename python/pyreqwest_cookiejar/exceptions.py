"""Exceptions raised by the cookie jar and its interceptors."""

from collections.abc import Mapping
from typing import Any


class CookieJarError(Exception):
    """Base class for all cookie jar errors."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = dict(details or {})


class MalformedCookieError(CookieJarError, ValueError):
    """A single cookie string could not be parsed.

    Only the offending cookie is dropped. The jar keeps processing the rest of the batch.
    """


class MissingAuthorityError(CookieJarError, RuntimeError):
    """The target authority of a call could not be determined. The call is aborted before it is sent."""
