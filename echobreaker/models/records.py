"""Pydantic models for extracted records and collection batches."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

from echobreaker.models.selectors import PageType

UNTITLED = 'Untitled'
UNKNOWN_CHANNEL = 'Unknown'
THUMBNAIL_URL_TEMPLATE = 'https://img.youtube.com/vi/{video_id}/mqdefault.jpg'


class SourcePhase(StrEnum):
    """How a record was discovered (provenance, not content classification)."""

    SHORTS = 'shorts'
    VIDEO = 'video'
    PLAYLIST = 'playlist'
    HOME_FEED = 'home_feed'
    WATCH_HISTORY = 'watch_history'
    SUBSCRIPTIONS = 'subscriptions'
    SEARCH = 'search'
    RECOMMENDED = 'recommended'


SIGNIFICANCE_WEIGHTS: dict[SourcePhase, int] = {
    SourcePhase.VIDEO: 100,
    SourcePhase.WATCH_HISTORY: 100,
    SourcePhase.SUBSCRIPTIONS: 60,
    SourcePhase.PLAYLIST: 55,
    SourcePhase.HOME_FEED: 50,
    SourcePhase.SEARCH: 45,
    SourcePhase.SHORTS: 40,
    SourcePhase.RECOMMENDED: 35,
}


def significance_for(phase: SourcePhase | str) -> int:
    """Default significance weight for a source phase."""
    return SIGNIFICANCE_WEIGHTS.get(SourcePhase(phase), 50)


class WireModel(BaseModel):
    """Base for models exchanged with the companion server (camelCase on the wire)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class VideoMetadata(WireModel):
    """Free-text metadata scraped next to a video.

    Attributes:
        view_count: Absolute view count, None when the text could not be parsed
        view_count_text: View count as displayed
        upload_date: Upload recency as displayed (e.g. '2 days ago', '3일 전')
        uploaded_at: Approximate upload time derived from upload_date
        duration: Duration as displayed on the time overlay (e.g. '12:34')

    """

    view_count: int | None = None
    view_count_text: str | None = None
    upload_date: str | None = None
    uploaded_at: datetime | None = None
    duration: str | None = None


class ExtractedRecord(WireModel):
    """One video discovered on a page. Immutable after construction.

    Records are not deduplicated here; the same id may appear in several
    passes and is merged downstream.
    """

    id: str = Field(alias='videoId', pattern=r'^[A-Za-z0-9_-]{11}$')
    title: str = UNTITLED
    channel_name: str = UNKNOWN_CHANNEL
    channel_id: str | None = None
    is_short: bool = False
    metadata: VideoMetadata = Field(default_factory=VideoMetadata)
    source_phase: SourcePhase = SourcePhase.VIDEO
    significance_weight: int = Field(default=50, ge=0, le=100)

    @model_validator(mode='before')
    @classmethod
    def _default_significance(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get('significance_weight') is None and data.get('significanceWeight') is None:
            data = {k: v for k, v in data.items() if k not in ('significance_weight', 'significanceWeight')}
            phase = data.get('source_phase', data.get('sourcePhase', SourcePhase.VIDEO))
            data['significance_weight'] = significance_for(phase)
        return data

    @computed_field(alias='thumbnailUrl')  # type: ignore[prop-decorator]
    @property
    def thumbnail_url(self) -> str:
        """Thumbnail derived from the video id."""
        return THUMBNAIL_URL_TEMPLATE.format(video_id=self.id)

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the crawl endpoint.

        The server stores view count and duration as flat text columns, so
        both are lifted out of the nested metadata.
        """
        data = self.model_dump(by_alias=True, mode='json', exclude={'metadata'})
        data['viewCount'] = self.metadata.view_count_text
        data['duration'] = self.metadata.duration
        data['metadata'] = self.metadata.model_dump(by_alias=True, mode='json', exclude_none=True)
        return data


class ChannelRecord(WireModel):
    """A subscribed channel listed in the guide sidebar."""

    channel_id: str
    channel_name: str
    thumbnail_url: str | None = None
    subscriber_count: str | None = None
    video_count: str | None = None


class CollectionBatch(BaseModel):
    """Everything one collection pass produced, ready for hand-off."""

    url: str = ''
    page_type: PageType = PageType.OTHER
    collected_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    videos: list[ExtractedRecord] = Field(default_factory=list)
    shorts: list[ExtractedRecord] = Field(default_factory=list)
    subscriptions: list[ChannelRecord] = Field(default_factory=list)
    recommended_videos: list[ExtractedRecord] = Field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of items across all lists."""
        return len(self.videos) + len(self.shorts) + len(self.subscriptions) + len(self.recommended_videos)

    def counts(self) -> dict[str, int]:
        """Per-list item counts, for logging."""
        return {
            'videos': len(self.videos),
            'shorts': len(self.shorts),
            'subscriptions': len(self.subscriptions),
            'recommended': len(self.recommended_videos),
        }

    def to_payload(self) -> dict[str, Any]:
        """Build the crawl endpoint payload."""
        return {
            'videos': [record.to_wire() for record in self.videos],
            'shorts': [record.to_wire() for record in self.shorts],
            'subscriptions': [channel.model_dump(by_alias=True, mode='json') for channel in self.subscriptions],
            'recommendedVideos': [record.to_wire() for record in self.recommended_videos],
            'pageType': self.page_type.value,
            'pageUrl': self.url,
            'collectedAt': self.collected_at.isoformat(),
        }
