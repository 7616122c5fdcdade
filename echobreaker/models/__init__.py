"""Pydantic models for selectors, records and batches."""

from echobreaker.models.records import (
    SIGNIFICANCE_WEIGHTS,
    UNKNOWN_CHANNEL,
    UNTITLED,
    ChannelRecord,
    CollectionBatch,
    ExtractedRecord,
    SourcePhase,
    VideoMetadata,
    significance_for,
)
from echobreaker.models.results import FetchResult
from echobreaker.models.selectors import (
    FieldQueries,
    PageType,
    SelectorCacheEntry,
    SelectorProposal,
    Target,
    cache_key,
)

__all__ = [
    'ChannelRecord',
    'CollectionBatch',
    'ExtractedRecord',
    'FetchResult',
    'FieldQueries',
    'PageType',
    'SIGNIFICANCE_WEIGHTS',
    'SelectorCacheEntry',
    'SelectorProposal',
    'SourcePhase',
    'Target',
    'UNKNOWN_CHANNEL',
    'UNTITLED',
    'VideoMetadata',
    'cache_key',
    'significance_for',
]
