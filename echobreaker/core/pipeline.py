"""Collection orchestrator.

Decides what to collect for a page type, drives the resolver and the
extractor over the page tree and hands the resulting batch to a transport.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

import logfire
from bs4 import BeautifulSoup, Tag
from rich.console import Console
from rich.theme import Theme

from echobreaker.config import CollectorConfig
from echobreaker.core.escalation import AgentSelectorProposer, EscalationClient, ServiceSelectorProposer
from echobreaker.core.extraction import RecordExtractor
from echobreaker.core.page_type import detect_page_type
from echobreaker.core.probe import select_all
from echobreaker.core.resolution import FailureTracker, ResolverState, SelectorDiscoverer, SelectorResolver
from echobreaker.models import CollectionBatch, ExtractedRecord, FieldQueries, PageType, SourcePhase, Target
from echobreaker.storage import DebugManager, JsonFileStore, PendingQueue, SelectorCache
from echobreaker.storage.cache import utc_now
from echobreaker.transport import CrawlTransport, Transport
from echobreaker.utils.files import get_cache_path, get_pending_path, init_echobreaker

CONSOLE_THEME = Theme(
    {
        'info': 'dim cyan',
        'warning': 'magenta',
        'danger': 'bold red',
        'success': 'bold green',
        'step': 'bold blue',
    }
)


@dataclass(frozen=True)
class ContainerPass:
    """One container sweep of a collection pass.

    Attributes:
        target: Container target to resolve
        phase: Source phase given to records found in the sweep
        output: Batch list receiving non-short records

    """

    target: Target
    phase: SourcePhase
    output: str = 'videos'


PAGE_PASSES: dict[PageType, tuple[ContainerPass, ...]] = {
    PageType.HOME: (
        ContainerPass(Target.VIDEO_CONTAINER, SourcePhase.HOME_FEED),
        ContainerPass(Target.SHORTS_CONTAINER, SourcePhase.SHORTS, output='shorts'),
    ),
    PageType.WATCH: (
        ContainerPass(Target.SIDEBAR_RECOMMENDATIONS, SourcePhase.RECOMMENDED, output='recommended_videos'),
    ),
    PageType.PLAYLIST: (ContainerPass(Target.VIDEO_CONTAINER, SourcePhase.PLAYLIST),),
    PageType.SHORTS: (ContainerPass(Target.SHORTS_CONTAINER, SourcePhase.SHORTS, output='shorts'),),
    PageType.SUBSCRIPTIONS: (ContainerPass(Target.VIDEO_CONTAINER, SourcePhase.SUBSCRIPTIONS),),
    PageType.HISTORY: (ContainerPass(Target.VIDEO_CONTAINER, SourcePhase.WATCH_HISTORY),),
    PageType.SEARCH: (
        ContainerPass(Target.VIDEO_CONTAINER, SourcePhase.SEARCH),
        ContainerPass(Target.SHORTS_CONTAINER, SourcePhase.SHORTS, output='shorts'),
    ),
    PageType.CHANNEL: (ContainerPass(Target.VIDEO_CONTAINER, SourcePhase.VIDEO),),
    PageType.OTHER: (),
}

# Pages whose URL names the video currently playing
CURRENT_VIDEO_PHASES: dict[PageType, SourcePhase] = {
    PageType.WATCH: SourcePhase.VIDEO,
    PageType.SHORTS: SourcePhase.SHORTS,
}

FIELD_TARGETS = (Target.VIDEO_LINK, Target.VIDEO_TITLE, Target.CHANNEL_NAME, Target.METADATA)


@dataclass
class OrchestratorState:
    """Mutable state of one page session.

    Attributes:
        is_collecting: True while a collection pass runs; overlapping calls are dropped
        current_url: URL of the last handled navigation
        last_page_type: Page type of the last completed pass
        last_sync_at: When the last pass completed
        last_counts: Per-list counts of the last batch
        last_delivered: Whether the transport accepted the last batch

    """

    is_collecting: bool = False
    current_url: str | None = None
    last_page_type: PageType | None = None
    last_sync_at: datetime | None = None
    last_counts: dict[str, int] = field(default_factory=dict)
    last_delivered: bool | None = None


class CollectionOrchestrator:
    """Runs collection passes for a page session.

    Attributes:
        config: Collector settings
        resolver: Selector resolver (owns the cache and failure counters)
        extractor: Record extractor
        transport: Batch destination, None keeps batches local
        state: Session state
        console: Rich console instance for formatted output

    """

    def __init__(
        self,
        config: CollectorConfig | None = None,
        resolver: SelectorResolver | None = None,
        extractor: RecordExtractor | None = None,
        transport: Transport | None = None,
        state: OrchestratorState | None = None,
        console: Console | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the orchestrator.

        Args:
            config: Collector settings, defaults apply when omitted
            resolver: Selector resolver, a fresh in-memory one when omitted
            extractor: Record extractor
            transport: Batch destination
            state: Session state
            console: Rich console instance for formatted output
            sleep: Blocking wait used for the settle delay
            clock: Time source

        """
        self.config = config or CollectorConfig(escalation='none')
        self.resolver = resolver or SelectorResolver(
            state=ResolverState(failures=FailureTracker(self.config.escalation_threshold))
        )
        self.extractor = extractor or RecordExtractor(clock=clock)
        self.transport = transport
        self.state = state or OrchestratorState()
        self.console = console or Console(theme=CONSOLE_THEME)
        self.sleep = sleep
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(
        cls,
        config: CollectorConfig,
        console: Console | None = None,
        send: bool = True,
    ) -> 'CollectionOrchestrator':
        """Wire a persistent orchestrator: JSON cache, escalation and crawl transport.

        Args:
            config: Collector settings
            console: Rich console instance for formatted output
            send: Whether batches are submitted to the companion server

        Returns:
            The orchestrator.

        """
        init_echobreaker()
        console = console or Console(theme=CONSOLE_THEME)

        cache = SelectorCache(store=JsonFileStore(get_cache_path()), ttl=config.cache_ttl)
        state = ResolverState(cache=cache, failures=FailureTracker(config.escalation_threshold))
        resolver = SelectorResolver(state=state, escalation=build_escalation(config, console))

        transport = None
        if send:
            transport = CrawlTransport(config.api_base_url, pending=PendingQueue(JsonFileStore(get_pending_path())))

        return cls(config=config, resolver=resolver, transport=transport, console=console)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def collect(self, url: str, html: str | BeautifulSoup) -> CollectionBatch:
        """Run one collection pass over a page and hand the batch off.

        Never raises: failures produce an empty batch and a logged error.
        A call made while another pass is running returns an empty batch
        and changes nothing.

        Args:
            url: Page URL, used for page-type detection
            html: Page markup or an already parsed tree

        Returns:
            The collected batch.

        """
        page_type = detect_page_type(url)

        if self.state.is_collecting:
            logfire.warn('Collection already in progress, call dropped', url=url)
            return CollectionBatch(url=url, page_type=page_type)

        self.state.is_collecting = True
        try:
            with logfire.span('collect {page_type}', page_type=page_type.value, url=url):
                self.console.print(f'[step]Collecting {page_type.value} page[/step] [info]{url}[/info]')
                self.logger.info(f'Collecting {page_type.value} page: {url}')
                try:
                    batch = self._collect(url, page_type, html)
                except Exception as e:
                    logfire.error('Collection failed', url=url, page_type=page_type.value, error=str(e))
                    self.logger.exception(f'Collection failed for {url}')
                    self.console.print(f'[danger]✗ Collection failed: {e}[/danger]')
                    batch = CollectionBatch(url=url, page_type=page_type)

                self.state.last_delivered = self._hand_off(batch)
                self.state.last_page_type = page_type
                self.state.last_sync_at = self.clock()
                self.state.last_counts = batch.counts()
                return batch
        finally:
            self.state.is_collecting = False

    def handle_navigation(self, url: str, load_html: Callable[[], str | BeautifulSoup]) -> CollectionBatch | None:
        """Collect after the page has had time to render.

        Args:
            url: URL navigated to
            load_html: Returns the page markup once the settle delay has passed

        Returns:
            The batch, or None when the URL did not change.

        """
        if url == self.state.current_url:
            return None
        self.state.current_url = url

        self.sleep(self.config.settle_delay)
        return self.collect(url, load_html())

    def maybe_sync(
        self,
        url: str,
        load_html: Callable[[], str | BeautifulSoup],
        now: datetime | None = None,
    ) -> CollectionBatch | None:
        """Periodic trigger: collect if auto sync is on and the interval has elapsed.

        Returns:
            The batch, or None when no collection was due.

        """
        if not self.config.auto_sync:
            return None

        now = now or self.clock()
        last = self.state.last_sync_at
        if last is not None and now - last < self.config.sync_interval:
            return None
        return self.collect(url, load_html())

    def status(self) -> dict:
        """Snapshot of the session for display."""
        pending = getattr(self.transport, 'pending', None)
        return {
            'is_collecting': self.state.is_collecting,
            'page_type': self.state.last_page_type.value if self.state.last_page_type else None,
            'last_sync_at': self.state.last_sync_at.isoformat() if self.state.last_sync_at else None,
            'last_counts': dict(self.state.last_counts),
            'last_delivered': self.state.last_delivered,
            'pending': len(pending) if pending is not None else 0,
            'failures': self.resolver.state.failures.snapshot(),
            'auto_sync': self.config.auto_sync,
        }

    # ------------------------------------------------------------------
    # Collection pass
    # ------------------------------------------------------------------

    def _collect(self, url: str, page_type: PageType, html: str | BeautifulSoup) -> CollectionBatch:
        tree = html if isinstance(html, BeautifulSoup) else BeautifulSoup(html, 'lxml')
        batch = CollectionBatch(url=url, page_type=page_type, collected_at=self.clock())
        processed: set[int] = set()

        queries = self._field_queries(tree, page_type)

        current_phase = CURRENT_VIDEO_PHASES.get(page_type)
        if current_phase is not None:
            current = self.extractor.extract_current_video(tree, url, queries, current_phase)
            if current is not None:
                self._route(batch, current, 'videos')

        for sweep in PAGE_PASSES[page_type]:
            self._sweep(tree, page_type, sweep, queries, batch, processed)

        self._collect_subscriptions(tree, page_type, batch)

        counts = batch.counts()
        logfire.info('Collection pass complete', page_type=page_type.value, **counts)
        self.console.print(
            f'[success]✓ Collected {counts["videos"]} videos, {counts["shorts"]} shorts, '
            f'{counts["recommended"]} recommended, {counts["subscriptions"]} channels[/success]'
        )
        return batch

    def _field_queries(self, tree: BeautifulSoup, page_type: PageType) -> FieldQueries:
        if page_type == PageType.OTHER:
            return FieldQueries()
        resolved = self.resolver.resolve_many(tree, page_type, FIELD_TARGETS)
        return FieldQueries(
            link=resolved[Target.VIDEO_LINK],
            title=resolved[Target.VIDEO_TITLE],
            channel=resolved[Target.CHANNEL_NAME],
            metadata=resolved[Target.METADATA],
        )

    def _sweep(
        self,
        tree: BeautifulSoup,
        page_type: PageType,
        sweep: ContainerPass,
        queries: FieldQueries,
        batch: CollectionBatch,
        processed: set[int],
    ) -> None:
        query = self.resolver.resolve(tree, page_type, sweep.target)
        nodes = select_all(tree, query)
        if not nodes:
            logfire.info('No containers matched', page_type=page_type.value, target=sweep.target.value, selector=query)
            return

        limit = self._limit(sweep.output)
        attempted = 0
        discarded = 0
        for node in nodes:
            if attempted >= limit:
                logfire.debug('Container cap reached', target=sweep.target.value, limit=limit, nodes=len(nodes))
                break
            if self._already_processed(node, processed):
                continue
            processed.add(id(node))
            attempted += 1

            record = self.extractor.extract(node, queries, sweep.phase)
            if record is None:
                discarded += 1
                continue
            self._route(batch, record, sweep.output)

        logfire.debug('Container sweep done', target=sweep.target.value, nodes=len(nodes), discarded=discarded)

    @staticmethod
    def _already_processed(node: Tag, processed: set[int]) -> bool:
        # Nested matches (a lockup inside a grid item) belong to the outer node
        if id(node) in processed:
            return True
        return any(id(parent) in processed for parent in node.parents)

    def _limit(self, output: str) -> int:
        return self.config.max_recommendations if output == 'recommended_videos' else self.config.max_videos

    def _route(self, batch: CollectionBatch, record: ExtractedRecord, output: str) -> None:
        """Append a record to exactly one list, shorts taking precedence, within the caps."""
        name = 'shorts' if record.is_short else output
        records: list[ExtractedRecord] = getattr(batch, name)
        if len(records) < self._limit(name):
            records.append(record)

    def _collect_subscriptions(self, tree: BeautifulSoup, page_type: PageType, batch: CollectionBatch) -> None:
        query = self.resolver.resolve(tree, page_type, Target.SUBSCRIPTION_CHANNELS)
        seen: set[str] = set()
        for node in select_all(tree, query):
            channel = self.extractor.extract_channel(node)
            if channel is None or channel.channel_id in seen:
                continue
            seen.add(channel.channel_id)
            batch.subscriptions.append(channel)
            if len(batch.subscriptions) >= self.config.max_videos:
                break

    def _hand_off(self, batch: CollectionBatch) -> bool | None:
        if self.transport is None or batch.total == 0:
            return None
        try:
            delivered = self.transport.send(batch)
        except Exception as e:
            logfire.error('Batch hand-off failed', items=batch.total, error=str(e))
            self.logger.exception('Batch hand-off failed')
            self.console.print(f'[danger]✗ Batch hand-off failed: {e}[/danger]')
            return False
        if delivered:
            self.console.print(f'[success]✓ Batch delivered ({batch.total} items)[/success]')
        else:
            self.console.print('[warning]⚠ Batch delivery failed, kept for later[/warning]')
        return delivered


def build_escalation(config: CollectorConfig, console: Console | None = None) -> SelectorDiscoverer | None:
    """Escalation capability for the configured mode, None when disabled."""
    debug = DebugManager(console=console, enabled=config.debug)
    if config.escalation == 'service':
        proposer = ServiceSelectorProposer(config.api_base_url, timeout=config.escalation_timeout)
        return EscalationClient(proposer, debug=debug)
    if config.escalation == 'agent':
        return EscalationClient(AgentSelectorProposer(llm_config=config.llm, console=console), debug=debug)
    return None
