"""Result types for page fetches."""

from dataclasses import dataclass


@dataclass
class FetchResult:
    """Result of an HTML fetch operation.

    Attributes:
        url: URL that was requested
        html: HTML content, None when the fetch failed
        status_code: HTTP status code received
        is_blocked: True if a consent wall or bot check was served
        block_reason: Why the fetch failed or was blocked
        fetch_time: Total time for the HTML to be fetched

    """

    url: str
    html: str | None = None
    status_code: int | None = None
    is_blocked: bool = False
    block_reason: str | None = None
    fetch_time: float = 0.0

    @property
    def success(self) -> bool:
        """Whether the fetch produced usable HTML."""
        return self.html is not None and not self.is_blocked
