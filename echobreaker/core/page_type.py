"""Page-type detection from the page URL."""

from urllib.parse import parse_qs, urlparse

from echobreaker.models import PageType

CHANNEL_PREFIXES = ('/@', '/channel/', '/c/', '/user/')


def detect_page_type(url: str) -> PageType:
    """Classify a page by its path and query string only.

    Args:
        url: Full page URL or a bare path

    Returns:
        The page type, OTHER for anything unrecognized.

    """
    parsed = urlparse(url)
    path = parsed.path.rstrip('/') or '/'

    if path == '/watch':
        return PageType.WATCH
    if path.startswith('/shorts/'):
        return PageType.SHORTS
    if path == '/playlist' and 'list' in parse_qs(parsed.query):
        return PageType.PLAYLIST
    if path == '/feed/subscriptions':
        return PageType.SUBSCRIPTIONS
    if path == '/feed/history':
        return PageType.HISTORY
    if path == '/results':
        return PageType.SEARCH
    if path.startswith(CHANNEL_PREFIXES):
        return PageType.CHANNEL
    if path == '/':
        return PageType.HOME
    return PageType.OTHER
