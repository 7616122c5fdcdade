"""Playwright-based fetcher using a real browser."""

import time

from echobreaker.core.fetcher.base import HTMLFetcher
from echobreaker.models.results import FetchResult
from echobreaker.utils.exceptions import BotDetectionError

RENDERED_MARKER = 'ytd-app, ytm-app'


class PlaywrightFetcher(HTMLFetcher):
    """Fetches fully rendered pages with a headless browser.

    Scrolls a few times so lazily loaded grid rows are present in the
    returned markup.
    """

    def __init__(self, timeout: int = 60000, headless: bool = True, scrolls: int = 3, settle_ms: int = 3000):
        """Initialize Playwright fetcher.

        Args:
            timeout: Page load timeout in milliseconds
            headless: Run browser in headless mode
            scrolls: Number of scrolls to trigger lazy loading
            settle_ms: Wait after load and after each scroll, in milliseconds

        """
        self.timeout = timeout
        self.headless = headless
        self.scrolls = scrolls
        self.settle_ms = settle_ms

    def fetch(self, url: str) -> FetchResult:
        """Fetch rendered HTML using Playwright."""
        start_time = time.time()

        try:
            # playwright is an optional extra
            from playwright.sync_api import Error as PlaywrightError
            from playwright.sync_api import sync_playwright
        except ImportError as err:
            raise ImportError(
                'Playwright not installed. Install with: '
                'pip install "echobreaker[browser]" && playwright install chromium'
            ) from err

        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(
                    headless=self.headless, args=['--disable-blink-features=AutomationControlled', '--no-sandbox']
                )
                context = browser.new_context(viewport={'width': 1920, 'height': 1080}, locale='en-US')
                page = context.new_page()

                response = page.goto(url, wait_until='domcontentloaded', timeout=self.timeout)
                page.wait_for_selector(RENDERED_MARKER, timeout=self.timeout, state='attached')
                page.wait_for_timeout(self.settle_ms)

                for _ in range(self.scrolls):
                    page.mouse.wheel(0, 4000)
                    page.wait_for_timeout(self.settle_ms // 2)

                html = page.content()
                final_url = page.url
                status_code = response.status if response else None
                browser.close()
        except PlaywrightError as e:
            return FetchResult(url=url, block_reason=str(e), fetch_time=time.time() - start_time)

        is_blocked, indicators = self._check_for_bot_detection(html, status_code or 200)
        if is_blocked:
            raise BotDetectionError(url, status_code or 0, indicators)

        return FetchResult(url=final_url, html=html, status_code=status_code, fetch_time=time.time() - start_time)
