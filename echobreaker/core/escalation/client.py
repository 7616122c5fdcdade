"""Escalation client: snippet selection, proposal, validation."""

import re
from typing import Protocol

import logfire
from bs4 import BeautifulSoup, Tag

from echobreaker.core.cleaning import HTMLCleaner
from echobreaker.core.probe import probe, select_first
from echobreaker.models import PageType, Target
from echobreaker.storage import DebugManager
from echobreaker.utils.exceptions import EscalationError

WATCH_METADATA_REGION = '#above-the-fold, ytd-watch-metadata, #info-contents, #meta-contents'
CONTENT_REGION = '#contents, ytd-rich-grid-renderer, #secondary, #related, ytd-section-list-renderer, #guide'

WATCH_METADATA_CAP = 5_000
CONTENT_CAP = 15_000
DOCUMENT_CAP = 20_000

WATCH_METADATA_TARGETS = frozenset({Target.VIDEO_TITLE, Target.CHANNEL_NAME, Target.METADATA})
CONTENT_TARGETS = frozenset(
    {
        Target.VIDEO_CONTAINER,
        Target.SHORTS_CONTAINER,
        Target.SIDEBAR_RECOMMENDATIONS,
        Target.SUBSCRIPTION_CHANNELS,
    }
)

# Region queried first for each content target
CONTENT_REGION_BY_TARGET: dict[Target, str] = {
    Target.SIDEBAR_RECOMMENDATIONS: '#secondary, #related',
    Target.SUBSCRIPTION_CHANNELS: '#guide, ytd-guide-renderer',
}

_FENCE = re.compile(r'^```[a-zA-Z]*\s*|\s*```$')


class SelectorProposer(Protocol):
    """External capability proposing a selector for a snippet."""

    def propose_selector(self, snippet: str, target: Target, page_type: PageType) -> str | None:
        """Return a proposed selector, None for no answer.

        Raises:
            EscalationError: If the proposal could not be obtained

        """
        ...


def sanitize_proposal(raw: str | None) -> str | None:
    """Strip code fences, surrounding quotes and whitespace from a proposal."""
    if not raw:
        return None
    cleaned = _FENCE.sub('', raw.strip()).strip()
    cleaned = cleaned.removeprefix('selector:').strip()
    if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in '"\'`':
        cleaned = cleaned[1:-1].strip()
    return cleaned or None


def select_snippet_root(tree: BeautifulSoup, target: Target, page_type: PageType) -> tuple[Tag, int]:
    """Pick the subtree most likely to contain the target and its size cap.

    Args:
        tree: Parsed page
        target: Target being escalated
        page_type: Page type of the tree

    Returns:
        Tuple of (subtree, maximum snippet length).

    """
    if page_type == PageType.WATCH and target in WATCH_METADATA_TARGETS:
        region = select_first(tree, WATCH_METADATA_REGION)
        if region is not None:
            return region, WATCH_METADATA_CAP

    if target in CONTENT_TARGETS:
        region = select_first(tree, CONTENT_REGION_BY_TARGET.get(target, '')) or select_first(tree, CONTENT_REGION)
        if region is not None:
            return region, CONTENT_CAP

    return tree.body or tree, DOCUMENT_CAP


class EscalationClient:
    """Asks an external proposer for a selector and keeps only validated answers.

    Attributes:
        proposer: Injected proposal capability
        cleaner: Tree diet applied to snippets, None sends raw markup
        debug: Debug output manager

    """

    def __init__(
        self,
        proposer: SelectorProposer,
        cleaner: HTMLCleaner | None = None,
        use_tree_diet: bool = True,
        debug: DebugManager | None = None,
    ):
        """Initialize the client.

        Args:
            proposer: Agent or service proposer
            cleaner: Cleaner to use for the tree diet
            use_tree_diet: Whether to clean snippets before sending them
            debug: Debug output manager, disabled by default

        """
        self.proposer = proposer
        self.cleaner = (cleaner or HTMLCleaner()) if use_tree_diet else None
        self.debug = debug or DebugManager(enabled=False)

    def build_snippet(self, tree: BeautifulSoup, target: Target, page_type: PageType) -> str:
        """Serialize the relevant region of the tree, dieted and capped."""
        root, cap = select_snippet_root(tree, target, page_type)
        markup = self.cleaner.clean(root) if self.cleaner else str(root)
        return markup[:cap]

    def discover(self, tree: BeautifulSoup, target: Target, page_type: PageType) -> str | None:
        """Request a selector for a target and validate it against the tree.

        Args:
            tree: Live tree the selector must match
            target: Target to locate
            page_type: Page type of the tree

        Returns:
            A selector matching at least one node, or None.

        """
        with logfire.span('escalation {target} on {page_type}', target=target.value, page_type=page_type.value):
            snippet = self.build_snippet(tree, target, page_type)

            try:
                proposal = sanitize_proposal(self.proposer.propose_selector(snippet, target, page_type))
            except EscalationError as e:
                logfire.warn(
                    'Escalation request failed', target=target.value, page_type=page_type.value, error=e.reason
                )
                self.debug.save_escalation(page_type.value, target.value, snippet, None, False)
                return None

            matches = probe(tree, proposal)
            validated = matches > 0
            self.debug.save_escalation(page_type.value, target.value, snippet, proposal, validated)

            if not validated:
                logfire.warn(
                    'Escalation proposal rejected',
                    target=target.value,
                    page_type=page_type.value,
                    selector=proposal,
                )
                return None

            logfire.info('Escalation proposal validated', target=target.value, selector=proposal, matches=matches)
            return proposal
