"""Abstract base class for HTML fetchers."""

from abc import ABC, abstractmethod

from echobreaker.models.results import FetchResult

# Checked against the first part of a 200 response, where interstitials announce themselves
INTERSTITIAL_INDICATORS = {
    'consent.youtube.com': 'Consent wall',
    'before you continue to youtube': 'Consent wall',
    'our systems have detected unusual traffic': 'Unusual traffic check',
    'g-recaptcha': 'CAPTCHA',
    'please verify you are human': 'Human verification',
}

ERROR_INDICATORS = {
    'captcha': 'CAPTCHA required',
    'unusual traffic': 'Unusual traffic check',
    'too many requests': 'Too many requests',
    'access denied': 'Access denied',
}


class HTMLFetcher(ABC):
    """Abstract base class for HTML fetchers.

    Implement this interface to feed pages into the collector from another source.
    """

    @abstractmethod
    def fetch(self, url: str) -> FetchResult:
        """Fetch HTML from a URL.

        Args:
            url: URL to fetch

        Returns:
            FetchResult with HTML and status

        Raises:
            BotDetectionError: If a consent wall or bot check is served

        """

    def close(self) -> None:  # noqa: B027
        """Release any held resources."""

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def _check_for_bot_detection(self, html: str, status_code: int) -> tuple[bool, list[str]]:
        """Check if HTML indicates a consent wall or bot detection.

        Args:
            html: The HTML of the URL
            status_code: The status code of the URL returned

        Returns:
            Tuple of (is_blocked, indicators).

        """
        if not html or len(html) < 100:
            return True, ['HTML too short']

        if status_code in (403, 429, 503):
            return True, [f'HTTP {status_code}']

        html_check = html[:5000].lower()
        indicators = INTERSTITIAL_INDICATORS if status_code < 400 else ERROR_INDICATORS
        found = [message for indicator, message in indicators.items() if indicator in html_check]
        return bool(found), sorted(set(found))
