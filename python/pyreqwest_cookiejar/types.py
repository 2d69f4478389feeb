"""Common types and interfaces used in the library."""

from typing import Protocol

from pyreqwest.http import Url

UrlType = Url | str


class HeadersType(Protocol):
    """Multi-value header map, as pyreqwest's HeaderMap. Names are case-insensitive."""

    def __contains__(self, key: object) -> bool: ...

    def getall(self, key: str) -> list[str]: ...

    def append(self, key: str, value: str) -> object: ...
