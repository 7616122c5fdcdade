"""Per-field extraction strategies.

Every field is resolved through an ordered list of independent strategies,
each a pure function ``(node) -> value | None``. ``first_success`` returns
the first non-empty value, so a markup change that breaks one strategy (or
one field) leaves the others working.
"""

import re
from collections.abc import Callable, Iterable
from typing import TypeVar
from urllib.parse import parse_qs, unquote, urlparse

from bs4 import Tag

from echobreaker.core.extraction.normalize import collapse_whitespace
from echobreaker.core.probe import select_all, select_first

T = TypeVar('T')
Strategy = Callable[[Tag], T | None]

VIDEO_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{11}$')
_ID_IN_CLASS = re.compile(r'(?:content-id|video-id|videoid)-([A-Za-z0-9_-]{11})$')
_ID_IN_MARKUP = re.compile(
    r'(?:videoId["\']?\s*[:=]\s*["\']|[?&;]v=|/shorts/|/vi(?:_webp)?/|/embed/|/live/|youtu\.be/)'
    r'([A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])'
)
_HANDLE_PATH = re.compile(r'/(@[^/?#]+)')
_CHANNEL_PATH = re.compile(r'/channel/(UC[A-Za-z0-9_-]{22})')

ID_DATA_ATTRIBUTES = ('data-video-id', 'data-videoid', 'data-context-item-id', 'video-id')

LINK_CARRIERS = (
    'a#thumbnail, a#video-title-link, a#video-title, a.yt-lockup-view-model-wiz__content-image, '
    'a.yt-lockup-view-model__content-image, a.reel-item-endpoint, a.shortsLockupViewModelHostEndpoint'
)
TITLE_CARRIERS = (
    '#video-title, a#video-title-link, .yt-lockup-metadata-view-model-wiz__title, '
    '.yt-lockup-metadata-view-model__title, .shortsLockupViewModelHostMetadataTitle, h1 yt-formatted-string'
)
ARIA_TITLE_CARRIERS = '#video-title[aria-label], a[href*="/watch"][aria-label], a[href*="/shorts/"][aria-label]'
LEGACY_TITLE_CARRIERS = ('span#video-title', 'h3', '#video-title-text', '.title')
TITLE_SEPARATORS = (' by ', ' 게시자: ', ' 작성자: ', ' - ')

CHANNEL_CARRIERS = (
    '#channel-name a',
    'ytd-channel-name a',
    '#text-container a',
    '.yt-content-metadata-view-model-wiz__metadata-text a',
    '.yt-content-metadata-view-model__metadata-text a',
    '#byline a',
    'ytd-channel-name #text',
    '#channel-name #text',
    'a[href^="/@"]',
    'a[href*="/channel/"]',
)

METADATA_CONTAINERS = (
    '#metadata-line span, .inline-metadata-item, #metadata span, '
    '.yt-content-metadata-view-model-wiz__metadata-text, .yt-content-metadata-view-model__metadata-text, '
    '#info-strings yt-formatted-string, #info span, #view-count, #date-text'
)
DURATION_CARRIERS = (
    'ytd-thumbnail-overlay-time-status-renderer #text, ytd-thumbnail-overlay-time-status-renderer span, '
    '.badge-shape-wiz__text, .yt-badge-shape__text, span.ytd-thumbnail-overlay-time-status-renderer'
)

SHORTS_TAGS = (
    'ytd-reel-item-renderer',
    'ytd-reel-video-renderer',
    'ytm-shorts-lockup-view-model',
    'ytm-shorts-lockup-view-model-v2',
)
SHORTS_CLASS_KEYWORDS = ('shorts', 'reel')


def first_success(strategies: Iterable[Strategy[T]], node: Tag) -> T | None:
    """Apply strategies in order and return the first non-empty value."""
    for strategy in strategies:
        value = strategy(node)
        if value is not None and value != '':
            return value
    return None


def _attr(element: Tag | None, name: str) -> str:
    if element is None:
        return ''
    value = element.get(name)
    if isinstance(value, list):
        value = ' '.join(value)
    return collapse_whitespace(value)


def _text(element: Tag | None) -> str:
    if element is None:
        return ''
    return collapse_whitespace(element.get_text(' ', strip=True))


def _self_and_descendants(node: Tag, **kwargs) -> list[Tag]:
    return [node, *node.find_all(True, **kwargs)]


# =============================================================================
# URL GRAMMARS
# =============================================================================


def video_id_from_url(href: str | None) -> str | None:
    """Extract an 11-character video id from a watch, shorts, embed, live or short-link URL."""
    if not href:
        return None

    parsed = urlparse(href)
    candidate: str | None = None

    if parsed.path.startswith('/watch'):
        candidate = (parse_qs(parsed.query).get('v') or [None])[0]
    elif parsed.netloc.endswith('youtu.be'):
        candidate = parsed.path.strip('/').split('/')[0]
    else:
        for prefix in ('/shorts/', '/embed/', '/live/', '/vi/', '/vi_webp/'):
            if prefix in parsed.path:
                candidate = parsed.path.split(prefix, 1)[1].split('/')[0]
                break

    if candidate and VIDEO_ID_PATTERN.match(candidate):
        return candidate
    return None


def channel_id_from_url(href: str | None) -> str | None:
    """Extract '@handle' or an opaque 'UC…' channel id from a channel URL."""
    if not href:
        return None
    path = urlparse(href).path
    match = _HANDLE_PATH.search(path)
    if match:
        return unquote(match.group(1))
    match = _CHANNEL_PATH.search(path)
    return match.group(1) if match else None


def is_shorts_url(href: str | None) -> bool:
    """Whether a URL points at a short."""
    return bool(href) and '/shorts/' in urlparse(href).path  # type: ignore[arg-type]


# =============================================================================
# IDENTIFIER
# =============================================================================


def identifier_strategies(link_query: str = '') -> list[Strategy[str]]:
    """Ordered identifier strategies: link, class name, data attribute, any link, raw markup."""

    def from_target_link(node: Tag) -> str | None:
        if node.name == 'a':
            found = video_id_from_url(_attr(node, 'href'))
            if found:
                return found
        for query in (link_query, LINK_CARRIERS):
            link = select_first(node, query)
            found = video_id_from_url(_attr(link, 'href'))
            if found:
                return found
        return None

    def from_class_name(node: Tag) -> str | None:
        for element in _self_and_descendants(node, class_=True):
            for token in element.get('class') or []:
                match = _ID_IN_CLASS.search(token)
                if match:
                    return match.group(1)
        return None

    def from_data_attribute(node: Tag) -> str | None:
        for attribute in ID_DATA_ATTRIBUTES:
            for element in (node, node.find(attrs={attribute: True})):
                value = _attr(element, attribute) if isinstance(element, Tag) else ''
                if VIDEO_ID_PATTERN.match(value):
                    return value
        return None

    def from_any_link(node: Tag) -> str | None:
        for link in node.find_all('a', href=True):
            found = video_id_from_url(_attr(link, 'href'))
            if found:
                return found
        return None

    def from_raw_markup(node: Tag) -> str | None:
        match = _ID_IN_MARKUP.search(str(node))
        return match.group(1) if match else None

    return [from_target_link, from_class_name, from_data_attribute, from_any_link, from_raw_markup]


# =============================================================================
# SHORTS CLASSIFICATION
# =============================================================================


def is_short(node: Tag, link_query: str = '') -> bool:
    """Logical OR of URL path, structural marker and class-name keyword checks."""
    links = [node] if node.name == 'a' else []
    links += select_all(node, link_query) + node.find_all('a', href=True)
    by_url = any(is_shorts_url(_attr(link, 'href')) for link in links)

    by_marker = (
        node.name in SHORTS_TAGS
        or node.find(list(SHORTS_TAGS)) is not None
        or node.has_attr('is-shorts')
        or node.find(attrs={'overlay-style': 'SHORTS'}) is not None
    )

    by_class = any(
        keyword in token.lower()
        for element in _self_and_descendants(node, class_=True)
        for token in element.get('class') or []
        for keyword in SHORTS_CLASS_KEYWORDS
    )

    return by_url or by_marker or by_class


# =============================================================================
# TITLE
# =============================================================================


def truncate_label(label: str) -> str:
    """Cut an accessibility label at the first recognized separator."""
    for separator in TITLE_SEPARATORS:
        if separator in label:
            return label.split(separator, 1)[0].strip()
    return label.strip()


def title_strategies(title_query: str = '') -> list[Strategy[str]]:
    """Ordered title strategies: title attribute, carrier text, aria label, legacy carriers."""

    def carriers(node: Tag) -> list[Tag]:
        return select_all(node, title_query) + select_all(node, TITLE_CARRIERS)

    def from_title_attribute(node: Tag) -> str | None:
        for element in carriers(node):
            value = _attr(element, 'title')
            if value:
                return value
        return None

    def from_carrier_text(node: Tag) -> str | None:
        for element in carriers(node):
            value = _text(element)
            if value:
                return value
        return None

    def from_aria_label(node: Tag) -> str | None:
        for element in select_all(node, ARIA_TITLE_CARRIERS):
            value = truncate_label(_attr(element, 'aria-label'))
            if value:
                return value
        return None

    def from_legacy_carrier(node: Tag) -> str | None:
        for query in LEGACY_TITLE_CARRIERS:
            value = _text(select_first(node, query))
            if value:
                return value
        return None

    return [from_title_attribute, from_carrier_text, from_aria_label, from_legacy_carrier]


# =============================================================================
# CHANNEL
# =============================================================================


def channel_name_strategies(channel_query: str = '') -> list[Strategy[str]]:
    """Ordered channel-name strategies across current and legacy markup."""

    def by_query(query: str) -> Strategy[str]:
        def strategy(node: Tag) -> str | None:
            return _text(select_first(node, query)) or None

        return strategy

    queries = ([channel_query] if channel_query else []) + list(CHANNEL_CARRIERS)
    return [by_query(query) for query in queries]


def find_channel_id(node: Tag, channel_query: str = '') -> str | None:
    """Channel id from the first channel link in the node, independent of the name."""
    links = select_all(node, channel_query) + node.find_all('a', href=True)
    for link in links:
        found = channel_id_from_url(_attr(link, 'href'))
        if found:
            return found
    return None


# =============================================================================
# METADATA
# =============================================================================


def metadata_texts(node: Tag) -> list[str]:
    """Distinct texts of the known metadata containers, in document order."""
    texts: list[str] = []
    for element in select_all(node, METADATA_CONTAINERS):
        value = _text(element)
        if value and value not in texts:
            texts.append(value)
    return texts


def find_duration_text(node: Tag) -> str | None:
    """Raw text of the time overlay, if present."""
    for element in select_all(node, DURATION_CARRIERS):
        value = _text(element)
        if value:
            return value
    return None
