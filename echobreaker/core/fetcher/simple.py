"""HTTP fetcher with realistic browser headers."""

import random
import time

import logfire
import requests

from echobreaker.core.fetcher.base import HTMLFetcher
from echobreaker.models.results import FetchResult
from echobreaker.utils.exceptions import BotDetectionError
from echobreaker.utils.headers import HeaderGenerator, UserAgentRotator

# Skips the EU consent interstitial on plain HTTP fetches
CONSENT_COOKIES = {'CONSENT': 'YES+cb', 'SOCS': 'CAI'}


class SimpleFetcher(HTMLFetcher):
    """Plain HTTP fetcher.

    Served markup is the server-rendered shell; grids rendered client-side
    are only partly present, which the extractor's fallbacks tolerate.

    Attributes:
        timeout: Request timeout in seconds
        min_delay: Minimum delay between requests in seconds
        max_delay: Maximum delay between requests in seconds
        language: Accept-Language to send, random when None
        session: Requests session reused across fetches
        last_request_time: Timestamp of last request for delay calculation

    """

    def __init__(
        self,
        timeout: int = 30,
        min_delay: float = 0.5,
        max_delay: float = 2.0,
        language: str | None = None,
        session: requests.Session | None = None,
    ):
        """Initialize the simple fetcher.

        Args:
            timeout: Request timeout in seconds
            min_delay: Minimum time to pause between fetches
            max_delay: Maximum time to pause between fetches
            language: Accept-Language to send, random when None
            session: Session to reuse, a new one is created when omitted

        """
        self.timeout = timeout
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.language = language
        self.session = session or requests.Session()
        self.session.cookies.update(CONSENT_COOKIES)
        self.last_request_time = 0.0

    def _apply_request_delay(self):
        """Apply a random delay between requests."""
        if self.min_delay > 0:
            elapsed = time.time() - self.last_request_time
            delay_needed = random.uniform(self.min_delay, self.max_delay)

            if elapsed < delay_needed:
                time.sleep(delay_needed - elapsed)

        self.last_request_time = time.time()

    def fetch(self, url: str) -> FetchResult:
        """Fetch a page over HTTP.

        Args:
            url: Page URL

        Returns:
            The fetch result. Network errors are reported in block_reason.

        Raises:
            BotDetectionError: If a consent wall or bot check is served

        """
        start_time = time.time()
        self._apply_request_delay()

        headers = HeaderGenerator.generate_headers(user_agent=UserAgentRotator.get_chrome(), language=self.language)

        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            logfire.warn('Fetch failed', url=url, error=str(e))
            return FetchResult(url=url, block_reason=str(e), fetch_time=time.time() - start_time)

        html = response.text
        is_blocked, indicators = self._check_for_bot_detection(html, response.status_code)
        if is_blocked:
            raise BotDetectionError(url, response.status_code, indicators)

        return FetchResult(
            url=response.url or url,
            html=html,
            status_code=response.status_code,
            fetch_time=time.time() - start_time,
        )

    def close(self):
        """Close the session."""
        self.session.close()
