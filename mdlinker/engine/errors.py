"""Exception and warning types raised by the linking engine."""

from __future__ import annotations


class MdlinkerError(Exception):
    """Base class for engine errors."""


class FetchError(MdlinkerError):
    """A sitemap could not be retrieved (network failure, timeout, bad status)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Unable to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class ParseError(MdlinkerError):
    """A sitemap document is not well-formed XML."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Unable to parse sitemap {url}: {reason}")
        self.url = url
        self.reason = reason


class EngineInternalError(MdlinkerError):
    """Unexpected failure while extracting, matching or inserting links."""


class IndexEmptyWarning(UserWarning):
    """A sitemap was read successfully but produced no keywords."""
