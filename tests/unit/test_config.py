from datetime import timedelta

import pytest

from echobreaker.config import CollectorConfig, llm_config_from_env

ENV_VARS = (
    'ECHOBREAKER_API_URL',
    'ECHOBREAKER_AUTO_SYNC',
    'ECHOBREAKER_SYNC_INTERVAL',
    'ECHOBREAKER_ESCALATION',
    'ECHOBREAKER_ESCALATION_TIMEOUT',
    'ECHOBREAKER_MODEL',
    'ECHOBREAKER_DEBUG',
    'GROQ_KEY',
    'GEMINI_KEY',
    'OPENAI_KEY',
    'LOGFIRE_TOKEN',
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr('echobreaker.config.load_dotenv', lambda: False)


def test_defaults():
    config = CollectorConfig.from_env()

    assert config.api_base_url == 'http://localhost:3000'
    assert config.auto_sync is True
    assert config.sync_interval == timedelta(minutes=15)
    assert config.max_videos == 50
    assert config.max_recommendations == 20
    assert config.settle_delay == 3.0
    assert config.escalation == 'service'
    assert config.escalation_timeout == 20.0
    assert config.cache_ttl == timedelta(hours=24)
    assert config.llm is None
    assert config.debug is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv('ECHOBREAKER_API_URL', 'http://collector:8080')
    monkeypatch.setenv('ECHOBREAKER_AUTO_SYNC', 'off')
    monkeypatch.setenv('ECHOBREAKER_SYNC_INTERVAL', '5')
    monkeypatch.setenv('ECHOBREAKER_DEBUG', 'yes')
    monkeypatch.setenv('LOGFIRE_TOKEN', 'token')

    config = CollectorConfig.from_env()

    assert config.api_base_url == 'http://collector:8080'
    assert config.auto_sync is False
    assert config.sync_interval == timedelta(minutes=5)
    assert config.debug is True
    assert config.logfire_token == 'token'


def test_keyword_overrides_win(monkeypatch):
    monkeypatch.setenv('ECHOBREAKER_ESCALATION', 'service')
    config = CollectorConfig.from_env(escalation='none', max_videos=10)

    assert config.escalation == 'none'
    assert config.max_videos == 10


def test_agent_escalation_picks_first_provider(monkeypatch):
    monkeypatch.setenv('ECHOBREAKER_ESCALATION', 'agent')
    monkeypatch.setenv('ECHOBREAKER_ESCALATION_TIMEOUT', '12')
    monkeypatch.setenv('GEMINI_KEY', 'gemini-key')
    monkeypatch.setenv('OPENAI_KEY', 'openai-key')

    config = CollectorConfig.from_env()

    assert config.escalation == 'agent'
    assert config.llm.provider == 'gemini'
    assert config.llm.model_name == 'gemini-2.0-flash'
    assert config.llm.timeout == 12.0
    assert config.escalation_timeout == 12.0


def test_escalation_timeout_applies_without_llm_key(monkeypatch):
    monkeypatch.setenv('ECHOBREAKER_ESCALATION_TIMEOUT', '7.5')

    config = CollectorConfig.from_env()

    assert config.escalation == 'service'
    assert config.llm is None
    assert config.escalation_timeout == 7.5


def test_model_name_from_environment(monkeypatch):
    monkeypatch.setenv('GROQ_KEY', 'groq-key')
    monkeypatch.setenv('ECHOBREAKER_MODEL', 'llama-3.1-8b-instant')

    llm = llm_config_from_env()
    assert llm.provider == 'groq'
    assert llm.model_name == 'llama-3.1-8b-instant'


def test_agent_escalation_requires_key(monkeypatch):
    monkeypatch.setenv('ECHOBREAKER_ESCALATION', 'agent')
    with pytest.raises(ValueError, match='LLM configuration'):
        CollectorConfig.from_env()


@pytest.mark.parametrize(
    ('kwargs', 'message'),
    [
        ({'escalation': 'magic'}, 'Unknown escalation mode'),
        ({'max_videos': 0}, 'caps must be positive'),
        ({'max_recommendations': -1}, 'caps must be positive'),
        ({'escalation_threshold': 0}, 'threshold'),
        ({'settle_delay': -1}, 'Settle delay'),
    ],
)
def test_validation(kwargs, message):
    with pytest.raises(ValueError, match=message):
        CollectorConfig(**kwargs)
