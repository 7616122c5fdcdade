"""Page fetchers for running the collector outside a browser session."""

from typing import Any

from echobreaker.core.fetcher.base import HTMLFetcher
from echobreaker.core.fetcher.playwright import PlaywrightFetcher
from echobreaker.core.fetcher.simple import SimpleFetcher

FETCHERS: dict[str, type[HTMLFetcher]] = {
    'simple': SimpleFetcher,
    'playwright': PlaywrightFetcher,
}

# Feed grids fill in lazily; labels are requested in a locale the normalizers read
FEED_DEFAULTS: dict[str, dict[str, Any]] = {
    'simple': {'language': 'en-US,en;q=0.9'},
    'playwright': {'scrolls': 3, 'settle_ms': 3000},
}


def create_fetcher(name: str = 'simple', **overrides: Any) -> HTMLFetcher:
    """Build a fetcher with feed-page defaults.

    Args:
        name: Key in FETCHERS
        **overrides: Constructor arguments replacing the defaults

    Returns:
        The fetcher, usable as a context manager.

    Raises:
        ValueError: If the name is unknown.

    """
    if name not in FETCHERS:
        raise ValueError(f'Unknown fetcher: {name}. Choose from: {", ".join(FETCHERS)}')
    return FETCHERS[name](**{**FEED_DEFAULTS.get(name, {}), **overrides})


__all__ = ['FETCHERS', 'HTMLFetcher', 'PlaywrightFetcher', 'SimpleFetcher', 'create_fetcher']
