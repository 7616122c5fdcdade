"""Command-line entry point for EchoBreaker."""

import argparse
import json
import sys
import time
from collections.abc import Callable
from pathlib import Path

import logfire
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from echobreaker.config import CollectorConfig
from echobreaker.core.fetcher import FETCHERS, HTMLFetcher, create_fetcher
from echobreaker.core.pipeline import CONSOLE_THEME, CollectionOrchestrator
from echobreaker.models import CollectionBatch, ExtractedRecord
from echobreaker.patterns import PatternLibrary
from echobreaker.storage import JsonFileStore, PendingQueue, SelectorCache
from echobreaker.transport import CrawlTransport
from echobreaker.utils.exceptions import BotDetectionError
from echobreaker.utils.files import get_cache_path, get_pending_path, init_echobreaker
from echobreaker.utils.logging import setup_local_logging


def _fetch_loader(fetcher: HTMLFetcher, url: str, console: Console) -> Callable[[], str]:
    def load() -> str:
        try:
            result = fetcher.fetch(url)
        except BotDetectionError as e:
            console.print(f'[danger]✗ Blocked: {", ".join(e.indicators)}[/danger]')
            return ''
        if not result.success:
            console.print(f'[danger]✗ Fetch failed: {result.block_reason}[/danger]')
            return ''
        return result.html or ''

    return load


def _print_records(console: Console, title: str, records: list[ExtractedRecord]) -> None:
    if not records:
        return
    table = Table(title=f'{title} ({len(records)})')
    table.add_column('Video ID', style='cyan', no_wrap=True)
    table.add_column('Title')
    table.add_column('Channel', style='magenta')
    table.add_column('Views', justify='right')
    table.add_column('Uploaded')
    table.add_column('Duration', justify='right')
    table.add_column('Weight', justify='right')

    for record in records:
        table.add_row(
            record.id,
            record.title[:60],
            record.channel_name,
            record.metadata.view_count_text or '',
            record.metadata.upload_date or '',
            record.metadata.duration or '',
            str(record.significance_weight),
        )
    console.print(table)


def print_batch(console: Console, batch: CollectionBatch) -> None:
    """Render a batch as rich tables."""
    console.print(Panel(f'{batch.page_type.value} · {batch.url}', style='bold blue'))
    _print_records(console, 'Videos', batch.videos)
    _print_records(console, 'Shorts', batch.shorts)
    _print_records(console, 'Recommended', batch.recommended_videos)

    if batch.subscriptions:
        table = Table(title=f'Subscriptions ({len(batch.subscriptions)})')
        table.add_column('Channel ID', style='cyan')
        table.add_column('Name')
        for channel in batch.subscriptions:
            table.add_row(channel.channel_id, channel.channel_name)
        console.print(table)

    if batch.total == 0:
        console.print('[warning]No records collected[/warning]')


def cmd_collect(args: argparse.Namespace, config: CollectorConfig, console: Console) -> int:
    """Collect one page from a URL or a saved HTML file."""
    orchestrator = CollectionOrchestrator.from_config(config, console=console, send=not args.no_send)

    if args.html_file:
        path = Path(args.html_file)
        if not path.exists():
            console.print(f'[danger]File not found: {path}[/danger]')
            return 1
        html = path.read_text(encoding='utf-8')
    else:
        with create_fetcher(args.fetcher) as fetcher:
            html = _fetch_loader(fetcher, args.url, console)()
        if not html:
            return 1

    batch = orchestrator.collect(args.url, html)
    print_batch(console, batch)

    if args.output:
        Path(args.output).write_text(json.dumps(batch.to_payload(), indent=2, ensure_ascii=False), encoding='utf-8')
        console.print(f'[success]✓ Batch written to {args.output}[/success]')
    return 0


def cmd_watch(args: argparse.Namespace, config: CollectorConfig, console: Console) -> int:
    """Navigate through a list of URLs, then keep syncing the last one."""
    path = Path(args.file)
    if not path.exists():
        console.print(f'[danger]File not found: {path}[/danger]')
        return 1
    urls = [line.strip() for line in path.read_text().splitlines() if line.strip() and not line.startswith('#')]
    if not urls:
        console.print('[danger]No URLs provided[/danger]')
        return 1

    orchestrator = CollectionOrchestrator.from_config(config, console=console, send=not args.no_send)

    with create_fetcher(args.fetcher) as fetcher:
        for url in urls:
            orchestrator.handle_navigation(url, _fetch_loader(fetcher, url, console))

        for _ in range(args.iterations):
            time.sleep(args.poll)
            orchestrator.maybe_sync(urls[-1], _fetch_loader(fetcher, urls[-1], console))

    console.print_json(data=orchestrator.status())
    return 0


def cmd_cache(args: argparse.Namespace, config: CollectorConfig, console: Console) -> int:
    """Show or reset the selector cache."""
    cache = SelectorCache(store=JsonFileStore(get_cache_path()), ttl=config.cache_ttl)

    if args.action == 'reset':
        cache.clear()
        console.print('[success]✓ Selector cache cleared[/success]')
        return 0

    entries = cache.entries()
    if not entries:
        console.print('[warning]No cached selectors[/warning]')
        return 0

    table = Table(title='Cached Selectors')
    table.add_column('Page', style='cyan')
    table.add_column('Target', style='magenta')
    table.add_column('Selector')
    table.add_column('Saved', style='dim')
    table.add_column('Status')
    for entry in entries:
        status = '[danger]expired[/danger]' if cache.is_expired(entry) else '[success]valid[/success]'
        saved = entry.saved_at.isoformat(timespec='seconds')
        table.add_row(entry.page_type.value, entry.target.value, entry.query, saved, status)
    console.print(table)
    return 0


def cmd_flush(args: argparse.Namespace, config: CollectorConfig, console: Console) -> int:
    """Resubmit batches kept after failed deliveries."""
    transport = CrawlTransport(config.api_base_url, pending=PendingQueue(JsonFileStore(get_pending_path())))
    before = len(transport.pending)
    if before == 0:
        console.print('[info]No pending batches[/info]')
        return 0

    delivered = transport.flush_pending()
    style = 'success' if delivered == before else 'warning'
    console.print(f'[{style}]Delivered {delivered}/{before} pending batches[/{style}]')
    return 0 if delivered == before else 1


def cmd_patterns(args: argparse.Namespace, config: CollectorConfig, console: Console) -> int:
    """List the default selector table."""
    library = PatternLibrary()
    table = Table(title=f'Pattern Library {library.version}')
    table.add_column('Target', style='magenta')
    table.add_column('Page', style='cyan')
    table.add_column('Selector')
    for target in library.targets():
        for page, selector in library.patterns[target].items():
            table.add_row(target, page, selector)
    console.print(table)
    return 0


COMMANDS = {
    'collect': cmd_collect,
    'watch': cmd_watch,
    'cache': cmd_cache,
    'flush': cmd_flush,
    'patterns': cmd_patterns,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog='echobreaker', description='Collect feed records with self-healing selectors')
    parser.add_argument('--debug', action='store_true', help='Save escalation snippets to .echobreaker/debug_html/')
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        type=str.upper,
        help='File log level (default: INFO)',
    )
    parser.add_argument(
        '--escalation',
        choices=['service', 'agent', 'none'],
        help='Escalation mode (default: ECHOBREAKER_ESCALATION or service)',
    )

    sub = parser.add_subparsers(dest='command', required=True)

    collect = sub.add_parser('collect', help='Collect one page')
    collect.add_argument('--url', required=True, help='Page URL (used for page-type detection)')
    collect.add_argument('--html-file', help='Saved page markup to use instead of fetching')
    collect.add_argument('--output', help='Write the batch payload to this JSON file')

    watch = sub.add_parser('watch', help='Navigate through URLs from a file, then sync periodically')
    watch.add_argument('--file', required=True, help='File containing URLs (one per line)')
    watch.add_argument('--iterations', type=int, default=0, help='Periodic sync checks after navigation')
    watch.add_argument('--poll', type=float, default=60.0, help='Seconds between sync checks')

    for command in (collect, watch):
        command.add_argument('--fetcher', choices=list(FETCHERS), default='simple', help='HTML fetcher')
        command.add_argument('--no-send', action='store_true', help='Keep batches local')

    cache = sub.add_parser('cache', help='Inspect or reset the selector cache')
    cache.add_argument('action', choices=['show', 'reset'], nargs='?', default='show')

    sub.add_parser('flush', help='Resubmit pending batches')
    sub.add_parser('patterns', help='List default selectors')

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    console = Console(theme=CONSOLE_THEME)

    overrides: dict = {'debug': args.debug}
    if args.escalation:
        overrides['escalation'] = args.escalation
    try:
        config = CollectorConfig.from_env(**overrides)
    except ValueError as e:
        console.print(f'[danger]Configuration error: {e}[/danger]')
        sys.exit(2)

    if config.logfire_token:
        logfire.configure(token=config.logfire_token, service_name='echobreaker')
    else:
        logfire.configure(send_to_logfire=False, console=False)

    init_echobreaker()
    log_file = setup_local_logging(args.log_level)
    console.print(f'[info]Logging to {log_file}[/info]')

    sys.exit(COMMANDS[args.command](args, config, console))


if __name__ == '__main__':
    main()
