"""Utility functions for file and directory management in EchoBreaker."""

from pathlib import Path

STATE_DIR_NAME = '.echobreaker'


def get_project_root() -> Path:
    """Find the project root by searching upwards from the Current Working Directory.

    Stops at the first directory containing a marker file.
    """
    current_path = Path.cwd()

    markers = {'.git', 'pyproject.toml', STATE_DIR_NAME, 'requirements.txt'}

    for parent in [current_path] + list(current_path.parents):
        if any((parent / marker).exists() for marker in markers):
            return parent

    # No markers found (e.g. running in /tmp)
    return current_path


def get_state_path() -> Path:
    """Return the .echobreaker directory in the project root."""
    return get_project_root() / STATE_DIR_NAME


def get_cache_path() -> Path:
    """Return the path to the persistent selector cache file."""
    return get_state_path() / 'selectors' / 'selector_cache.json'


def get_pending_path() -> Path:
    """Return the path to the queue of batches awaiting resubmission."""
    return get_state_path() / 'pending.json'


def get_debug_path() -> Path:
    """Return the path to the debug snippet directory."""
    return get_state_path() / 'debug_html'


def get_logs_path() -> Path:
    """Return the path to the logs directory."""
    return get_state_path() / 'logs'


def init_echobreaker() -> Path:
    """Initialize the .echobreaker directory and return it."""
    state_dir = get_state_path()

    for directory in (state_dir / 'selectors', get_debug_path(), get_logs_path()):
        directory.mkdir(parents=True, exist_ok=True)

    # Keep collected state out of source control
    gitignore = state_dir / '.gitignore'
    if not gitignore.exists():
        gitignore.write_text('# Automatically created by echobreaker\n*\n')

    return state_dir
