"""HTML cleaning for escalation snippets."""

from echobreaker.core.cleaning.cleaner import HTMLCleaner

__all__ = ['HTMLCleaner']
