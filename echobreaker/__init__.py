"""EchoBreaker - resilient feed collection.

Learns the selectors a page needs, survives markup changes, and asks for
help only when cheaper strategies keep failing.
"""

from echobreaker.config import CollectorConfig
from echobreaker.core.escalation import (
    AgentSelectorProposer,
    EscalationClient,
    LLMConfig,
    ServiceSelectorProposer,
    create_model,
    gemini,
    groq,
    openai,
)
from echobreaker.core.extraction import RecordExtractor
from echobreaker.core.fetcher import HTMLFetcher, PlaywrightFetcher, SimpleFetcher, create_fetcher
from echobreaker.core.page_type import detect_page_type
from echobreaker.core.pipeline import CollectionOrchestrator, OrchestratorState
from echobreaker.core.probe import probe
from echobreaker.core.resolution import ResolverState, SelectorResolver
from echobreaker.models import (
    ChannelRecord,
    CollectionBatch,
    ExtractedRecord,
    FetchResult,
    PageType,
    SourcePhase,
    Target,
)
from echobreaker.patterns import PatternLibrary
from echobreaker.storage import JsonFileStore, MemoryStore, PendingQueue, SelectorCache
from echobreaker.transport import CrawlTransport, NullTransport, Transport
from echobreaker.utils import BotDetectionError, EchoBreakerError, EscalationError, TransportError, init_echobreaker

__all__ = [
    # Core components
    'CollectionOrchestrator',
    'OrchestratorState',
    'PatternLibrary',
    'RecordExtractor',
    'ResolverState',
    'SelectorResolver',
    'detect_page_type',
    'probe',
    # Escalation
    'AgentSelectorProposer',
    'EscalationClient',
    'ServiceSelectorProposer',
    # LLM configuration
    'LLMConfig',
    'create_model',
    'gemini',
    'groq',
    'openai',
    # Fetchers
    'FetchResult',
    'HTMLFetcher',
    'PlaywrightFetcher',
    'SimpleFetcher',
    'create_fetcher',
    # Storage and transport
    'CrawlTransport',
    'JsonFileStore',
    'MemoryStore',
    'NullTransport',
    'PendingQueue',
    'SelectorCache',
    'Transport',
    # Models
    'ChannelRecord',
    'CollectionBatch',
    'CollectorConfig',
    'ExtractedRecord',
    'PageType',
    'SourcePhase',
    'Target',
    # Errors and utilities
    'BotDetectionError',
    'EchoBreakerError',
    'EscalationError',
    'TransportError',
    'init_echobreaker',
]
