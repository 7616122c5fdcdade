"""Selector resolution: cache, then defaults, then escalation."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

import logfire
from bs4 import BeautifulSoup

from echobreaker.core.probe import probe
from echobreaker.core.resolution.failures import FailureTracker
from echobreaker.models import PageType, Target
from echobreaker.patterns import PatternLibrary
from echobreaker.storage import SelectorCache


class SelectorDiscoverer(Protocol):
    """Anything able to propose a validated replacement selector."""

    def discover(self, tree: BeautifulSoup, target: Target, page_type: PageType) -> str | None:
        """Return a selector already validated against the tree, or None."""
        ...


@dataclass
class ResolverState:
    """Mutable resolution state owned by one page session.

    Attributes:
        cache: Persistent selector cache
        failures: In-memory miss counters

    """

    cache: SelectorCache = field(default_factory=SelectorCache)
    failures: FailureTracker = field(default_factory=FailureTracker)


class SelectorResolver:
    """Returns one usable selector per (page type, target) request.

    Resolution order is fixed: a valid cache entry that still matches, then
    the pattern library, then escalation once the key has missed often
    enough. When everything misses, the default selector is returned anyway
    and callers handle the empty result; misses accumulate across visits
    until escalation kicks in.

    Attributes:
        state: Cache and failure counters
        patterns: Default selector table
        escalation: Optional escalation capability

    """

    def __init__(
        self,
        state: ResolverState | None = None,
        patterns: PatternLibrary | None = None,
        escalation: SelectorDiscoverer | None = None,
    ):
        """Initialize the resolver.

        Args:
            state: Resolution state, a fresh one is created when omitted
            patterns: Default selector table
            escalation: Escalation capability, None disables escalation

        """
        self.state = state or ResolverState()
        self.patterns = patterns or PatternLibrary()
        self.escalation = escalation

    def resolve(self, tree: BeautifulSoup, page_type: PageType, target: Target) -> str:
        """Resolve a selector for a target on the current tree.

        Args:
            tree: Parsed page the selector must match
            page_type: Page type of the tree
            target: Target to locate

        Returns:
            A selector. It matches at least one node unless every strategy
            missed, in which case the default selector is returned.

        """
        cache = self.state.cache
        failures = self.state.failures

        entry = cache.get(page_type, target)
        if entry is not None:
            if probe(tree, entry.query) > 0:
                failures.reset(page_type, target)
                return entry.query
            logfire.debug(
                'Cached selector missed', page_type=page_type.value, target=target.value, selector=entry.query
            )

        default_query = self.patterns.lookup(page_type, target)
        if probe(tree, default_query) > 0:
            failures.reset(page_type, target)
            cache.set(page_type, target, default_query)
            return default_query

        count = failures.increment(page_type, target)
        logfire.info(
            'Selector resolution missed',
            page_type=page_type.value,
            target=target.value,
            selector=default_query,
            failures=count,
        )

        if failures.should_escalate(page_type, target) and self.escalation is not None:
            learned = self.escalation.discover(tree, target, page_type)
            if learned and probe(tree, learned) > 0:
                cache.set(page_type, target, learned)
                failures.reset(page_type, target)
                logfire.info(
                    'Escalation learned selector', page_type=page_type.value, target=target.value, selector=learned
                )
                return learned
            logfire.warn('Escalation produced no usable selector', page_type=page_type.value, target=target.value)

        return default_query

    def resolve_many(self, tree: BeautifulSoup, page_type: PageType, targets: Iterable[Target]) -> dict[Target, str]:
        """Resolve several targets in the given order."""
        return {target: self.resolve(tree, page_type, target) for target in targets}
