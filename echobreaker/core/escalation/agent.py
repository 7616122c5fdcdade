"""Selector proposals from an LLM agent reading an HTML snippet."""

from pathlib import Path
from typing import Any, cast

import logfire
from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings
from rich.console import Console

from echobreaker.core.escalation.config import DEFAULT_ESCALATION_TIMEOUT, LLMConfig, create_model
from echobreaker.models import PageType, SelectorProposal, Target
from echobreaker.utils.exceptions import EscalationError

SYSTEM_PROMPT_PATH = Path(__file__).resolve().parents[2] / 'prompts' / 'selector_discovery.md'

TARGET_DESCRIPTIONS: dict[Target, str] = {
    Target.VIDEO_TITLE: 'the visible title text of a video',
    Target.CHANNEL_NAME: 'the link or text naming the channel that uploaded a video',
    Target.VIDEO_LINK: 'the anchor whose href points at /watch?v= or /shorts/',
    Target.VIDEO_CONTAINER: 'each repeated element wrapping one video tile',
    Target.SHORTS_CONTAINER: 'each repeated element wrapping one short',
    Target.SIDEBAR_RECOMMENDATIONS: 'each recommended video in the sidebar next to the player',
    Target.SUBSCRIPTION_CHANNELS: 'each channel link in the subscriptions section of the guide',
    Target.METADATA: 'the text elements holding view count and upload date',
}


def load_system_prompt(path: Path = SYSTEM_PROMPT_PATH) -> str:
    """Selector discovery instructions, followed by what each target means."""
    glossary = '\n'.join(f'- {target.value}: {description}' for target, description in TARGET_DESCRIPTIONS.items())
    return f'{path.read_text(encoding="utf-8").strip()}\n\n## Targets\n{glossary}'


class AgentSelectorProposer:
    """Asks a pydantic-ai agent for a selector.

    Attributes:
        agent: Agent producing SelectorProposal outputs
        model_settings: Settings sent with every request (timeout included)
        model_name: Name of the model being used
        provider: Name of the LLM provider

    """

    agent: Agent[Any, SelectorProposal]

    def __init__(
        self,
        llm_config: LLMConfig | None = None,
        agent: Agent[Any, SelectorProposal] | None = None,
        console: Console | None = None,
        timeout: float = DEFAULT_ESCALATION_TIMEOUT,
    ):
        """Initialize the proposer with an LLM configuration or a ready agent.

        Args:
            llm_config: Configuration for the LLM provider and model
            agent: Agent to use instead of building one
            console: Rich console instance for formatted output
            timeout: Request timeout used when an agent is passed directly

        Raises:
            ValueError: Must provide llm_config or an agent

        """
        self.console = console or Console()

        # Priority: agent > llm_config
        if agent is not None:
            self.agent = agent
            self.model_settings = ModelSettings(timeout=timeout)
            self.model_name = 'custom-agent'
            self.provider = 'custom'
        elif llm_config is not None:
            self.agent = Agent(
                create_model(llm_config),
                output_type=SelectorProposal,
                system_prompt=load_system_prompt(),
            )
            self.model_settings = llm_config.model_settings()
            self.model_name = llm_config.model_name
            self.provider = llm_config.provider
        else:
            raise ValueError('Either provide llm_config or agent parameter')

    @logfire.instrument('agent_selector_request', extract_args=False)
    def propose_selector(self, snippet: str, target: Target, page_type: PageType) -> str | None:
        """Ask the agent for a selector locating a target inside the snippet.

        Raises:
            EscalationError: If the request fails or times out

        """
        prompt = f"""Find a CSS selector for **{target.value}**: {TARGET_DESCRIPTIONS[target]}.

The snippet comes from a YouTube {page_type.value} page:
```html
{snippet}
```

Only use tags, ids, classes and attributes that appear in the snippet above."""

        try:
            result = self.agent.run_sync(prompt, model_settings=self.model_settings)
        except Exception as e:
            logfire.error('Agent request failed', error=str(e), provider=self.provider, target=target.value)
            raise EscalationError(target.value, page_type.value, str(e)) from e

        return cast(SelectorProposal, result.output).selector
