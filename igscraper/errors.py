from __future__ import annotations


class ResolverError(RuntimeError):
    """Base class for every user-visible resolution failure."""


class InvalidUrl(ResolverError):
    """Raised when the input is not a parseable absolute URL."""

    def __init__(self, message: str = "Invalid URL"):
        super().__init__(message)


class UnsupportedHost(ResolverError):
    """Raised when the URL does not point at the target platform."""

    def __init__(self, host: str | None = None, expected: str = "instagram.com"):
        self.host = host
        self.expected = expected
        super().__init__(f"URL is not an {expected} link (host: {host or 'n/a'})")


class NavigationTimeout(ResolverError):
    """Raised when the page did not reach DOMContentLoaded in time."""

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(f"Page did not load within {timeout_ms / 1000:g}s")


class PageLoadFailed(ResolverError):
    """Raised when navigation returned no response or a non-success status."""

    def __init__(self, status: int | None):
        self.status = status
        super().__init__(f"Failed to load page (status {status if status is not None else 'n/a'})")


class NoMediaFound(ResolverError):
    """Raised when the page rendered but no trusted media URL survived resolution."""

    def __init__(self):
        super().__init__(
            "Could not locate media URLs. The post may be private, removed, "
            "or blocked by a login wall."
        )


class DownloadFailed(ResolverError):
    """Raised when the media host refuses or fails a download."""

    def __init__(self, url: str, status: int | None = None, reason: str | None = None):
        self.url = url
        self.status = status
        detail = reason or f"upstream status {status if status is not None else 'n/a'}"
        super().__init__(f"Failed to fetch media: {detail}")
