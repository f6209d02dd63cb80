"""
Exceptions raised by ResourceScout.

Only two conditions abort an analysis run: an input URL that cannot be
parsed and a root document that no relay could deliver. Everything else
(per-resource failures, malformed markup references) is recovered locally.
"""
from __future__ import annotations

from typing import Sequence


class ResourceScoutError(Exception):
    """Base class for all ResourceScout errors."""


class InvalidURL(ResourceScoutError, ValueError):
    """The user-supplied URL cannot be turned into an absolute http(s) URL."""

    def __init__(self, url: str, reason: str = "Invalid URL format") -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url!r}")


class FetchFailed(ResourceScoutError, RuntimeError):
    """The root document could not be fetched through any relay."""

    def __init__(self, url: str, errors: Sequence[str] = ()) -> None:
        self.url = url
        self.errors = list(errors)
        message = f"Failed to fetch {url} through any relay"
        if self.errors:
            message += ": " + "; ".join(self.errors)
        super().__init__(message)


__all__ = ["ResourceScoutError", "InvalidURL", "FetchFailed"]
