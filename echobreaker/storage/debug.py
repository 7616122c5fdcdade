"""Debug output for escalation requests.

Saves the snippet sent to the escalation service and the selector it
proposed, so a failed proposal can be inspected after the fact.
"""

import json
from datetime import datetime
from pathlib import Path

from rich.console import Console

from echobreaker.utils.files import get_debug_path


class DebugManager:
    """Manages debug output for escalation.

    Does nothing unless enabled.
    """

    def __init__(self, console: Console | None = None, enabled: bool = False, debug_dir: Path | None = None):
        """Initialize DebugManager.

        Args:
            console: Rich console instance for output.
            enabled: Whether debug mode is enabled.
            debug_dir: Directory to write into, defaults to .echobreaker/debug_html

        """
        self.console = console or Console()
        self.enabled = enabled
        self.debug_dir = self._ensure_debug_dir(debug_dir) if enabled else None

    def _ensure_debug_dir(self, debug_dir: Path | None) -> Path:
        directory = debug_dir or get_debug_path()
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def _base_name(self, page_type: str, target: str) -> str:
        stamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
        return f'{page_type}_{target}_{stamp}'

    def save_escalation(self, page_type: str, target: str, snippet: str, proposal: str | None, validated: bool):
        """Save an escalation snippet and its outcome.

        Args:
            page_type: Page type of the request
            target: Target of the request
            snippet: HTML snippet sent to the service
            proposal: Selector the service proposed, if any
            validated: Whether the proposal matched the live tree

        """
        if not self.enabled or not self.debug_dir:
            return

        base = self._base_name(page_type, target)
        html_path = self.debug_dir / f'{base}.html'
        meta_path = self.debug_dir / f'{base}.json'

        try:
            html_path.write_text(
                f'<!-- {page_type} / {target} -->\n<!-- Snippet length: {len(snippet)} chars -->\n\n{snippet}',
                encoding='utf-8',
            )
            with open(meta_path, 'w', encoding='utf-8') as f:
                json.dump(
                    {'page_type': page_type, 'target': target, 'proposal': proposal, 'validated': validated},
                    f,
                    indent=2,
                    ensure_ascii=False,
                )
            self.console.print(f'  [dim]↻ Escalation debug saved to: {html_path}[/dim]')
        except OSError as e:
            self.console.print(f'[warning]Failed to save escalation debug output: {e}[/warning]')
