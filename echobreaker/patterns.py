"""Default selectors used before anything has been learned.

The table maps ``target -> page_type -> selector``. Every target carries a
``default`` entry used when no page-type-specific selector exists. Bump
PATTERN_LIBRARY_VERSION whenever the table changes so persisted caches can
be told apart from the defaults they were learned against.
"""

from collections.abc import Mapping

from echobreaker.models import PageType, Target

PATTERN_LIBRARY_VERSION = '2025.11.1'

DEFAULT_KEY = 'default'

DEFAULT_PATTERNS: dict[str, dict[str, str]] = {
    Target.VIDEO_TITLE.value: {
        PageType.WATCH.value: 'h1.ytd-watch-metadata yt-formatted-string, h1 yt-formatted-string',
        PageType.HOME.value: '#video-title, a#video-title-link',
        PageType.SHORTS.value: 'h2.ytShortsVideoTitleViewModelShortsVideoTitle, .reel-player-header-renderer h2',
        DEFAULT_KEY: '#video-title, a#video-title-link, .yt-lockup-metadata-view-model-wiz__title',
    },
    Target.CHANNEL_NAME.value: {
        PageType.WATCH.value: '#owner #channel-name a, ytd-video-owner-renderer ytd-channel-name a',
        PageType.HOME.value: '#channel-name a, ytd-channel-name a',
        DEFAULT_KEY: '#channel-name a, ytd-channel-name a, #text-container a',
    },
    Target.VIDEO_LINK.value: {
        PageType.HOME.value: 'a#thumbnail, a.ytd-thumbnail',
        PageType.SHORTS.value: 'a[href*="/shorts/"]',
        DEFAULT_KEY: 'a#thumbnail, a.yt-lockup-view-model-wiz__content-image',
    },
    Target.VIDEO_CONTAINER.value: {
        PageType.HOME.value: 'ytd-rich-item-renderer, ytd-video-renderer',
        PageType.SUBSCRIPTIONS.value: 'ytd-grid-video-renderer, ytd-rich-item-renderer',
        PageType.PLAYLIST.value: 'ytd-playlist-video-renderer',
        PageType.HISTORY.value: 'ytd-video-renderer, yt-lockup-view-model',
        PageType.SEARCH.value: 'ytd-video-renderer',
        PageType.CHANNEL.value: 'ytd-rich-item-renderer, ytd-grid-video-renderer',
        DEFAULT_KEY: 'ytd-video-renderer',
    },
    Target.SHORTS_CONTAINER.value: {
        PageType.HOME.value: 'ytd-rich-shelf-renderer[is-shorts] ytd-rich-item-renderer, ytm-shorts-lockup-view-model',
        PageType.SHORTS.value: 'ytd-reel-video-renderer',
        DEFAULT_KEY: 'ytd-reel-item-renderer, ytm-shorts-lockup-view-model',
    },
    Target.SIDEBAR_RECOMMENDATIONS.value: {
        PageType.WATCH.value: 'ytd-compact-video-renderer, #secondary yt-lockup-view-model',
        DEFAULT_KEY: 'ytd-compact-video-renderer',
    },
    Target.SUBSCRIPTION_CHANNELS.value: {
        DEFAULT_KEY: 'ytd-guide-entry-renderer a[href*="/@"], ytd-guide-entry-renderer a[href*="/channel/"]',
    },
    Target.METADATA.value: {
        PageType.WATCH.value: (
            '#info-container yt-formatted-string, #info-strings yt-formatted-string, '
            '#count .ytd-video-view-count-renderer'
        ),
        DEFAULT_KEY: '#metadata-line span, .inline-metadata-item, .yt-content-metadata-view-model-wiz__metadata-text',
    },
}


class PatternLibrary:
    """Lookup over a versioned default-selector table.

    Attributes:
        patterns: Mapping of target name to page-type name to selector
        version: Version string of the table

    """

    def __init__(self, patterns: Mapping[str, Mapping[str, str]] | None = None, version: str = PATTERN_LIBRARY_VERSION):
        """Initialize the library.

        Args:
            patterns: Custom table, defaults to DEFAULT_PATTERNS
            version: Version string of the table

        Raises:
            ValueError: If a target has no 'default' entry

        """
        self.patterns = patterns if patterns is not None else DEFAULT_PATTERNS
        self.version = version

        missing = [target for target, by_page in self.patterns.items() if DEFAULT_KEY not in by_page]
        if missing:
            raise ValueError(f"Pattern library targets without a '{DEFAULT_KEY}' entry: {', '.join(missing)}")

    def lookup(self, page_type: PageType, target: Target) -> str:
        """Return the selector for a page type, falling back to the target default.

        Args:
            page_type: Page type being resolved
            target: Target being resolved

        Returns:
            Selector string, empty if the target is unknown to the library.

        """
        by_page = self.patterns.get(target.value)
        if not by_page:
            return ''
        return by_page.get(page_type.value) or by_page.get(DEFAULT_KEY, '')

    def targets(self) -> list[str]:
        """Target names covered by the library."""
        return sorted(self.patterns)
