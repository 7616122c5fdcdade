"""Pydantic models for page types, targets and learned selectors."""

from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PageType(StrEnum):
    """Coarse classification of a feed page, derived from its URL."""

    HOME = 'home'
    WATCH = 'watch'
    PLAYLIST = 'playlist'
    SHORTS = 'shorts'
    SUBSCRIPTIONS = 'subscriptions'
    HISTORY = 'history'
    SEARCH = 'search'
    CHANNEL = 'channel'
    OTHER = 'other'


class Target(StrEnum):
    """Logical field or region located in the page tree."""

    VIDEO_TITLE = 'video_title'
    CHANNEL_NAME = 'channel_name'
    VIDEO_LINK = 'video_link'
    VIDEO_CONTAINER = 'video_container'
    SHORTS_CONTAINER = 'shorts_container'
    SIDEBAR_RECOMMENDATIONS = 'sidebar_recommendations'
    SUBSCRIPTION_CHANNELS = 'subscription_channels'
    METADATA = 'metadata'


def cache_key(page_type: PageType, target: Target) -> str:
    """Build the persistent store key for a (page type, target) pair."""
    return f'{page_type.value}_{target.value}'


class SelectorCacheEntry(BaseModel):
    """A selector confirmed to match at least one node.

    Attributes:
        page_type: Page type the selector was confirmed on
        target: Target the selector locates
        query: CSS selector (possibly comma-joined alternatives)
        saved_at: When the selector was last confirmed

    """

    model_config = ConfigDict(frozen=True)

    page_type: PageType
    target: Target
    query: str
    saved_at: datetime

    def is_valid(self, now: datetime, ttl: timedelta) -> bool:
        """Whether the entry is still inside its validity window."""
        return now - self.saved_at < ttl

    def to_store(self) -> dict[str, Any]:
        """Serialize to the `{query, savedAt}` store format (epoch milliseconds)."""
        return {'query': self.query, 'savedAt': int(self.saved_at.timestamp() * 1000)}

    @classmethod
    def from_store(cls, page_type: PageType, target: Target, value: dict[str, Any]) -> 'SelectorCacheEntry | None':
        """Rebuild an entry from a stored value, or None if the value is unusable."""
        if not isinstance(value, dict):
            return None
        query = value.get('query')
        saved_at = value.get('savedAt')
        if not isinstance(query, str) or not query.strip():
            return None
        if isinstance(saved_at, bool) or not isinstance(saved_at, int | float):
            return None
        try:
            saved = datetime.fromtimestamp(saved_at / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
        return cls(page_type=page_type, target=target, query=query, saved_at=saved)


class SelectorProposal(BaseModel):
    """Structured answer expected from the escalation service."""

    selector: str | None = Field(default=None, description='Single CSS selector, comma-joined if several are needed')


class FieldQueries(BaseModel):
    """Resolved selectors handed to the record extractor for one pass.

    Empty strings mean "no resolved selector"; the extractor then relies on
    its built-in structural patterns only.
    """

    model_config = ConfigDict(frozen=True)

    link: str = ''
    title: str = ''
    channel: str = ''
    metadata: str = ''
