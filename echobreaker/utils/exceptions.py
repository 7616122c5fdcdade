"""Custom exceptions for EchoBreaker."""


class EchoBreakerError(Exception):
    """Base class for all EchoBreaker exceptions."""

    pass


class EscalationError(EchoBreakerError):
    """Raised when a selector proposer cannot produce a proposal."""

    def __init__(self, target: str, page_type: str, reason: str):
        """Initialize escalation error.

        Args:
            target: Target the selector was requested for
            page_type: Page type the request was made on
            reason: Why the proposer failed

        """
        self.target = target
        self.page_type = page_type
        self.reason = reason
        super().__init__(f"Selector escalation failed for '{target}' on {page_type}: {reason}")


class TransportError(EchoBreakerError):
    """Raised when a collection batch could not be submitted."""

    def __init__(self, url: str, status_code: int | None, reason: str):
        """Initialize transport error.

        Args:
            url: Endpoint the batch was sent to
            status_code: HTTP status code received, if any
            reason: Description of the failure

        """
        self.url = url
        self.status_code = status_code
        self.reason = reason
        super().__init__(f'Submission to {url} failed (status={status_code}): {reason}')


class BotDetectionError(EchoBreakerError):
    """Raised when bot detection is triggered while fetching a page."""

    def __init__(self, url: str, status_code: int, indicators: list[str]):
        """Initialize bot detection error.

        Args:
            url: URL where bot detection was triggered
            status_code: HTTP status code received
            indicators: List of bot detection indicators found

        """
        self.url = url
        self.status_code = status_code
        self.indicators = indicators
        super().__init__(f'Bot detection triggered on {url} (status={status_code}): {", ".join(indicators)}')
