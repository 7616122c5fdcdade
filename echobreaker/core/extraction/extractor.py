"""Build records out of matched nodes, one field at a time."""

from collections.abc import Callable
from datetime import datetime

import logfire
from bs4 import BeautifulSoup, Tag

from echobreaker.core.extraction import strategies as s
from echobreaker.core.extraction.normalize import (
    clean_duration,
    collapse_whitespace,
    find_relative_date,
    looks_like_view_count,
    parse_relative_date,
    parse_view_count,
)
from echobreaker.core.probe import select_all, select_first
from echobreaker.models import (
    UNKNOWN_CHANNEL,
    UNTITLED,
    ChannelRecord,
    ExtractedRecord,
    FieldQueries,
    SourcePhase,
    VideoMetadata,
)
from echobreaker.storage.cache import utc_now

# Labels of the guide section header, which links to the feed rather than a channel
SUBSCRIPTION_HEADER_LABELS = frozenset({'subscriptions', '구독'})

CURRENT_VIDEO_REGION = (
    'ytd-watch-metadata, #above-the-fold, #info-contents, #meta-contents, '
    'ytd-reel-video-renderer[is-active], #shorts-player'
)
CANONICAL_LINKS = ('link[rel="canonical"]', 'meta[property="og:url"]')
ID_META = ('meta[itemprop="videoId"]', 'meta[itemprop="identifier"]')
PAGE_TITLE_SUFFIX = ' - YouTube'


class RecordExtractor:
    """Turns matched nodes into records using per-field fallback chains.

    A record is produced whenever an identifier can be found. Every other
    field degrades to a default instead of discarding the record.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        """Initialize the extractor.

        Args:
            clock: Reference time used to date relative upload phrases

        """
        self.clock = clock

    def extract(
        self,
        node: Tag,
        queries: FieldQueries | None = None,
        source_phase: SourcePhase = SourcePhase.VIDEO,
    ) -> ExtractedRecord | None:
        """Extract one record from a container node.

        Args:
            node: Container node (video tile, sidebar item, shorts item)
            queries: Resolved selectors tried first inside each field chain
            source_phase: How the node was discovered. Shorts are always
                tagged with the shorts phase.

        Returns:
            The record, or None when no identifier could be found.

        """
        queries = queries or FieldQueries()

        video_id = s.first_success(s.identifier_strategies(queries.link), node)
        if video_id is None:
            logfire.debug('Discarded node without identifier', tag=node.name, phase=source_phase.value)
            return None

        short = s.is_short(node, queries.link)
        phase = SourcePhase.SHORTS if short else source_phase

        return ExtractedRecord(
            id=video_id,
            title=s.first_success(s.title_strategies(queries.title), node) or UNTITLED,
            channel_name=s.first_success(s.channel_name_strategies(queries.channel), node) or UNKNOWN_CHANNEL,
            channel_id=s.find_channel_id(node, queries.channel),
            is_short=short,
            metadata=self._metadata(node, queries.metadata),
            source_phase=phase,
        )

    def extract_current_video(
        self,
        tree: BeautifulSoup,
        url: str,
        queries: FieldQueries | None = None,
        source_phase: SourcePhase = SourcePhase.VIDEO,
    ) -> ExtractedRecord | None:
        """Extract the video a watch or shorts page is currently playing.

        The identifier comes from the URL and falls back to canonical links,
        item metadata and the player element. Other fields are read from the
        metadata region below the player, then from document-level metadata.
        """
        queries = queries or FieldQueries()

        video_id = s.video_id_from_url(url) or self._id_from_document(tree)
        if video_id is None:
            logfire.info('Current video has no identifier', url=url)
            return None

        region = select_first(tree, CURRENT_VIDEO_REGION)
        short = s.is_shorts_url(url)

        title = None
        channel = None
        channel_id = None
        metadata = VideoMetadata()
        if queries.title:
            title = _text_of(select_first(tree, queries.title)) or None
        if queries.channel:
            link = select_first(tree, queries.channel)
            channel = _text_of(link) or None
            channel_id = s.channel_id_from_url(link.get('href')) if link is not None else None
        if region is not None:
            title = title or s.first_success(s.title_strategies(), region)
            channel = channel or s.first_success(s.channel_name_strategies(), region)
            channel_id = channel_id or s.find_channel_id(region)
            metadata = self._metadata(region, queries.metadata, query_scope=tree)
        elif queries.metadata:
            metadata = self._metadata(tree, queries.metadata)

        return ExtractedRecord(
            id=video_id,
            title=title or self._document_title(tree) or UNTITLED,
            channel_name=channel or self._document_author(tree) or UNKNOWN_CHANNEL,
            channel_id=channel_id,
            is_short=short,
            metadata=metadata,
            source_phase=SourcePhase.SHORTS if short else source_phase,
        )

    def extract_channel(self, node: Tag) -> ChannelRecord | None:
        """Extract a subscribed channel from a guide sidebar entry.

        Args:
            node: The entry or its link

        Returns:
            The channel, or None for non-channel links and the section header.

        """
        link = node if node.name == 'a' else node.find('a', href=True)
        if link is None:
            return None

        href = link.get('href') or ''
        if '/@' not in href and '/channel/' not in href:
            return None

        entry = link.find_parent('ytd-guide-entry-renderer') or node
        name = (
            _text_of(select_first(entry, 'yt-formatted-string.title, .title, #endpoint-title'))
            or collapse_whitespace(link.get('title'))
            or _text_of(link)
        )
        if not name or name.lower() in SUBSCRIPTION_HEADER_LABELS:
            return None

        channel_id = s.channel_id_from_url(href) or href.rstrip('/').rsplit('/', 1)[-1]
        image = entry.find('img', src=True)

        return ChannelRecord(
            channel_id=channel_id,
            channel_name=name,
            thumbnail_url=image.get('src') if image else None,
        )

    def _metadata(self, node: Tag, metadata_query: str = '', query_scope: Tag | None = None) -> VideoMetadata:
        # resolved selector first (it may target the whole page), then built-in containers
        texts = [_text_of(element) for element in select_all(query_scope or node, metadata_query)]
        texts = [text for text in texts if text]
        texts += [text for text in s.metadata_texts(node) if text not in texts]

        view_text = next((text for text in texts if looks_like_view_count(text)), None)
        upload_text = next((found for found in map(find_relative_date, texts) if found), None)

        return VideoMetadata(
            view_count=parse_view_count(view_text),
            view_count_text=view_text,
            upload_date=upload_text,
            uploaded_at=parse_relative_date(upload_text, self.clock()),
            duration=clean_duration(s.find_duration_text(node)),
        )

    @staticmethod
    def _id_from_document(tree: BeautifulSoup) -> str | None:
        for query in CANONICAL_LINKS:
            element = select_first(tree, query)
            if element is not None:
                found = s.video_id_from_url(element.get('href') or element.get('content'))
                if found:
                    return found
        for query in ID_META:
            element = select_first(tree, query)
            value = (element.get('content') or '') if element is not None else ''
            if s.VIDEO_ID_PATTERN.match(value):
                return value
        player = select_first(tree, 'ytd-watch-flexy[video-id]')
        value = (player.get('video-id') or '') if player is not None else ''
        return value if s.VIDEO_ID_PATTERN.match(value) else None

    @staticmethod
    def _document_title(tree: BeautifulSoup) -> str | None:
        element = select_first(tree, 'meta[property="og:title"], meta[name="title"]')
        if element is not None and element.get('content'):
            return collapse_whitespace(element['content'])
        if tree.title and tree.title.string:
            return collapse_whitespace(tree.title.string).removesuffix(PAGE_TITLE_SUFFIX) or None
        return None

    @staticmethod
    def _document_author(tree: BeautifulSoup) -> str | None:
        element = select_first(tree, '[itemprop="author"] [itemprop="name"]')
        if element is None:
            return None
        return collapse_whitespace(element.get('content')) or _text_of(element) or None


def _text_of(element: Tag | None) -> str:
    if element is None:
        return ''
    return collapse_whitespace(element.get_text(' ', strip=True))
