"""Selector resolution and failure tracking."""

from echobreaker.core.resolution.failures import ESCALATION_THRESHOLD, FailureTracker
from echobreaker.core.resolution.resolver import ResolverState, SelectorDiscoverer, SelectorResolver

__all__ = ['ESCALATION_THRESHOLD', 'FailureTracker', 'ResolverState', 'SelectorDiscoverer', 'SelectorResolver']
