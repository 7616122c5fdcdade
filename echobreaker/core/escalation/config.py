"""LLM configuration for agent-based selector escalation.

Supports several providers behind one small dataclass and a factory.
"""

from dataclasses import dataclass
from typing import Any

from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.groq import GroqModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.groq import GroqProvider
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

DEFAULT_ESCALATION_TIMEOUT = 20.0

# ============================================================================
# 1. CONFIG DATACLASS
# ============================================================================


@dataclass
class LLMConfig:
    """Configuration for any LLM provider.

    Attributes:
        provider: Provider name ('groq', 'gemini', 'openai', etc.)
        model_name: Model identifier string
        api_key: API key for authentication
        temperature: Sampling temperature (0.0-2.0). Defaults to 0.2.
        max_tokens: Maximum tokens for generation. Defaults to None.
        timeout: Request timeout in seconds. Defaults to 20.
        extra_params: Additional provider-specific model settings. Defaults to None.

    """

    provider: str
    model_name: str
    api_key: str
    temperature: float = 0.2
    max_tokens: int | None = None
    timeout: float = DEFAULT_ESCALATION_TIMEOUT
    extra_params: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises:
            ValueError: If API key or model name is missing, or the timeout is not positive.

        """
        if not self.api_key:
            raise ValueError(f'API key required for {self.provider}')
        if not self.model_name:
            raise ValueError(f'Model name required for {self.provider}')
        if self.timeout <= 0:
            raise ValueError(f'Timeout must be positive, got {self.timeout}')

    @property
    def model_id(self) -> str:
        """Identifier in 'provider:model_name' form."""
        return f'{self.provider}:{self.model_name}'

    def model_settings(self) -> ModelSettings:
        """Settings passed with every request."""
        settings = ModelSettings(temperature=self.temperature, timeout=self.timeout)
        if self.max_tokens:
            settings['max_tokens'] = self.max_tokens
        if self.extra_params:
            settings.update(self.extra_params)  # type: ignore[typeddict-item]
        return settings


# ============================================================================
# 2. BUILT-IN PROVIDERS
# ============================================================================


def create_groq_model(config: LLMConfig) -> GroqModel:
    """Create a Groq model from configuration."""
    return GroqModel(config.model_name, provider=GroqProvider(api_key=config.api_key))


def create_gemini_model(config: LLMConfig) -> GoogleModel:
    """Create a Gemini (Google) model from configuration."""
    return GoogleModel(config.model_name, provider=GoogleProvider(api_key=config.api_key))


def create_openai_model(config: LLMConfig) -> OpenAIChatModel:
    """Create an OpenAI model from configuration."""
    return OpenAIChatModel(config.model_name, provider=OpenAIProvider(api_key=config.api_key))


PROVIDER_FACTORIES = {
    'groq': create_groq_model,
    'gemini': create_gemini_model,
    'google': create_gemini_model,  # Alias
    'openai': create_openai_model,
    'gpt': create_openai_model,  # Alias
}


# ============================================================================
# 3. MAIN FACTORY
# ============================================================================


def create_model(config: LLMConfig) -> Any:
    """Create a model from configuration.

    Args:
        config: LLMConfig specifying the provider and parameters

    Returns:
        Model instance (GroqModel, GoogleModel, OpenAIChatModel)

    Raises:
        ValueError: If provider is not supported

    Example:
        >>> config = LLMConfig(provider='groq', model_name='llama-3.3-70b-versatile', api_key='your-key')
        >>> model = create_model(config)

    """
    provider_name = config.provider.lower()

    if provider_name not in PROVIDER_FACTORIES:
        available = ', '.join(PROVIDER_FACTORIES.keys())
        raise ValueError(f'Unknown provider: {provider_name}. Available: {available}')

    return PROVIDER_FACTORIES[provider_name](config)


# ============================================================================
# 4. QUICK HELPERS
# ============================================================================


def groq(model_name: str, api_key: str, **kwargs) -> LLMConfig:
    """Quick config for Groq."""
    return LLMConfig(provider='groq', model_name=model_name, api_key=api_key, **kwargs)


def gemini(model_name: str, api_key: str, **kwargs) -> LLMConfig:
    """Quick config for Gemini."""
    return LLMConfig(provider='gemini', model_name=model_name, api_key=api_key, **kwargs)


def openai(model_name: str, api_key: str, **kwargs) -> LLMConfig:
    """Quick config for OpenAI."""
    return LLMConfig(provider='openai', model_name=model_name, api_key=api_key, **kwargs)
