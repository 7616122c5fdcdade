"""Utility components for EchoBreaker."""

from echobreaker.utils.exceptions import BotDetectionError, EchoBreakerError, EscalationError, TransportError
from echobreaker.utils.files import init_echobreaker
from echobreaker.utils.headers import HeaderGenerator, UserAgentRotator

__all__ = [
    'BotDetectionError',
    'EchoBreakerError',
    'EscalationError',
    'HeaderGenerator',
    'TransportError',
    'UserAgentRotator',
    'init_echobreaker',
]
