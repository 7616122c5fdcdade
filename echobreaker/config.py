"""Collector configuration loaded from the environment."""

import os
from dataclasses import dataclass, field
from datetime import timedelta

from dotenv import load_dotenv

from echobreaker.core.escalation.config import DEFAULT_ESCALATION_TIMEOUT, LLMConfig
from echobreaker.core.resolution.failures import ESCALATION_THRESHOLD
from echobreaker.storage.cache import CACHE_TTL

DEFAULT_API_URL = 'http://localhost:3000'
ESCALATION_MODES = ('service', 'agent', 'none')

# Default model per provider when escalation goes through an agent
DEFAULT_MODELS = {
    'groq': 'llama-3.3-70b-versatile',
    'gemini': 'gemini-2.0-flash',
    'openai': 'gpt-4o-mini',
}

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


@dataclass
class CollectorConfig:
    """Settings for a collection session.

    Attributes:
        api_base_url: Base URL of the companion server
        auto_sync: Whether periodic collection is enabled
        sync_interval: Minimum time between periodic collections
        max_videos: Cap per output list
        max_recommendations: Cap for sidebar recommendations
        settle_delay: Seconds to wait after navigation before collecting
        escalation: 'service', 'agent' or 'none'
        escalation_threshold: Consecutive misses before escalating
        escalation_timeout: Timeout of an escalation request in seconds
        cache_ttl: Validity window of cached selectors
        llm: LLM configuration, required when escalation is 'agent'
        logfire_token: Token for sending logfire events, None keeps them local
        debug: Save escalation snippets under .echobreaker/debug_html

    """

    api_base_url: str = DEFAULT_API_URL
    auto_sync: bool = True
    sync_interval: timedelta = field(default_factory=lambda: timedelta(minutes=15))
    max_videos: int = 50
    max_recommendations: int = 20
    settle_delay: float = 3.0
    escalation: str = 'service'
    escalation_threshold: int = ESCALATION_THRESHOLD
    escalation_timeout: float = DEFAULT_ESCALATION_TIMEOUT
    cache_ttl: timedelta = CACHE_TTL
    llm: LLMConfig | None = None
    logfire_token: str | None = None
    debug: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises:
            ValueError: If a setting is out of range or agent escalation lacks an LLM configuration.

        """
        if self.escalation not in ESCALATION_MODES:
            raise ValueError(f'Unknown escalation mode: {self.escalation}. Choose from: {", ".join(ESCALATION_MODES)}')
        if self.escalation == 'agent' and self.llm is None:
            raise ValueError('Agent escalation requires an LLM configuration (set GROQ_KEY, GEMINI_KEY or OPENAI_KEY)')
        if self.max_videos <= 0 or self.max_recommendations <= 0:
            raise ValueError('Batch caps must be positive')
        if self.escalation_threshold < 1:
            raise ValueError(f'Escalation threshold must be at least 1, got {self.escalation_threshold}')
        if self.settle_delay < 0:
            raise ValueError(f'Settle delay cannot be negative, got {self.settle_delay}')

    @classmethod
    def from_env(cls, **overrides) -> 'CollectorConfig':
        """Build a configuration from environment variables (and a .env file).

        Args:
            **overrides: Values taking precedence over the environment

        Returns:
            The configuration.

        """
        load_dotenv()

        timeout = float(os.getenv('ECHOBREAKER_ESCALATION_TIMEOUT', DEFAULT_ESCALATION_TIMEOUT))
        llm = llm_config_from_env(timeout=timeout)
        escalation = os.getenv('ECHOBREAKER_ESCALATION', 'service').lower()

        values = {
            'api_base_url': os.getenv('ECHOBREAKER_API_URL', DEFAULT_API_URL),
            'auto_sync': os.getenv('ECHOBREAKER_AUTO_SYNC', 'true').lower() in _TRUE_VALUES,
            'sync_interval': timedelta(minutes=float(os.getenv('ECHOBREAKER_SYNC_INTERVAL', '15'))),
            'escalation': escalation,
            'escalation_timeout': timeout,
            'llm': llm,
            'logfire_token': os.getenv('LOGFIRE_TOKEN'),
            'debug': os.getenv('ECHOBREAKER_DEBUG', 'false').lower() in _TRUE_VALUES,
        }
        values.update(overrides)
        return cls(**values)


def llm_config_from_env(timeout: float = DEFAULT_ESCALATION_TIMEOUT) -> LLMConfig | None:
    """Pick the first provider with a key in the environment (Groq, then Gemini, then OpenAI)."""
    for provider, variable in (('groq', 'GROQ_KEY'), ('gemini', 'GEMINI_KEY'), ('openai', 'OPENAI_KEY')):
        api_key = os.getenv(variable)
        if api_key:
            model_name = os.getenv('ECHOBREAKER_MODEL') or DEFAULT_MODELS[provider]
            return LLMConfig(provider=provider, model_name=model_name, api_key=api_key, timeout=timeout)
    return None
