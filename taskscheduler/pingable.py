"""
Ping URL hooks shared by schedules and events.

Only the URLs are kept here; the runner is responsible for sending
the requests before and after execution.
"""

from typing import Optional


class PingableMixin:
    """Stores URLs to ping before and after execution."""

    _ping_before_url: Optional[str] = None
    _ping_after_url: Optional[str] = None

    def ping_before(self, url: str):
        """Register a URL to ping before execution."""
        self._ping_before_url = self._check_url(url)
        return self

    def then_ping(self, url: str):
        """Register a URL to ping after execution."""
        self._ping_after_url = self._check_url(url)
        return self

    def has_ping_before(self) -> bool:
        return self._ping_before_url is not None

    def has_ping_after(self) -> bool:
        return self._ping_after_url is not None

    def get_ping_before_url(self) -> str:
        if self._ping_before_url is None:
            raise LookupError("No ping-before URL registered")
        return self._ping_before_url

    def get_ping_after_url(self) -> str:
        if self._ping_after_url is None:
            raise LookupError("No ping-after URL registered")
        return self._ping_after_url

    @staticmethod
    def _check_url(url: str) -> str:
        if not isinstance(url, str) or not url.strip():
            raise ValueError("Ping URL cannot be empty")
        return url
