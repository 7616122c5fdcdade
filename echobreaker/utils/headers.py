"""Realistic browser headers for fetching feed pages."""

import random


class UserAgentRotator:
    """Pool of desktop browser user agents.

    The feed only serves its full grid markup to desktop browsers, so the
    pool is limited to desktop Chrome, Firefox, Safari and Edge.
    """

    USER_AGENTS = [
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36',
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36',
        'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) Gecko/20100101 Firefox/133.0',
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:133.0) Gecko/20100101 Firefox/133.0',
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/18.1 Safari/605.1.15',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36 Edg/131.0.0.0',
    ]

    @classmethod
    def get_random(cls) -> str:
        """Get a random user agent."""
        return random.choice(cls.USER_AGENTS)

    @classmethod
    def get_chrome(cls) -> str:
        """Get a Chrome user agent (no Edge)."""
        return random.choice([ua for ua in cls.USER_AGENTS if 'Chrome' in ua and 'Edg' not in ua])


class HeaderGenerator:
    """Generates browser headers for a page request."""

    LANGUAGES = [
        'en-US,en;q=0.9',
        'en-GB,en;q=0.9',
        'ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7',
        'en-US,en;q=0.9,ko;q=0.8',
    ]

    @classmethod
    def generate_headers(cls, user_agent: str | None = None, language: str | None = None) -> dict[str, str]:
        """Generate request headers.

        Args:
            user_agent: User agent to send, random when omitted
            language: Accept-Language value, random when omitted

        Returns:
            Header mapping for requests

        """
        user_agent = user_agent or UserAgentRotator.get_random()
        headers = {
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
            'Accept-Language': language or random.choice(cls.LANGUAGES),
            'Accept-Encoding': 'gzip, deflate, br',
            'DNT': '1',
            'Connection': 'keep-alive',
            'Upgrade-Insecure-Requests': '1',
        }

        if 'Chrome' in user_agent:
            headers.update(
                {
                    'Sec-Fetch-Dest': 'document',
                    'Sec-Fetch-Mode': 'navigate',
                    'Sec-Fetch-Site': 'none',
                    'Sec-Fetch-User': '?1',
                }
            )

        return headers
