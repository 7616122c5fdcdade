"""Selector escalation to an LLM agent or the companion server."""

from echobreaker.core.escalation.agent import AgentSelectorProposer
from echobreaker.core.escalation.client import (
    EscalationClient,
    SelectorProposer,
    sanitize_proposal,
    select_snippet_root,
)
from echobreaker.core.escalation.config import LLMConfig, create_model, gemini, groq, openai
from echobreaker.core.escalation.service import ServiceSelectorProposer

__all__ = [
    'AgentSelectorProposer',
    'EscalationClient',
    'LLMConfig',
    'SelectorProposer',
    'ServiceSelectorProposer',
    'create_model',
    'gemini',
    'groq',
    'openai',
    'sanitize_proposal',
    'select_snippet_root',
]
