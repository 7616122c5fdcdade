"""Shrinks page subtrees before they are sent for selector discovery."""

import re

from bs4 import BeautifulSoup, Comment, Tag
from rich.console import Console

NOISE_TAGS = ['script', 'style', 'svg', 'img', 'yt-icon', 'iframe', 'noscript', 'link', 'meta', 'path']
KEEP_ATTRIBUTES = {'id', 'class', 'href', 'title', 'aria-label', 'is-shorts', 'overlay-style', 'video-id'}

# Sibling renderers beyond this many add size without teaching anything new
MAX_REPEATED_SIBLINGS = 3


class HTMLCleaner:
    """Applies the tree diet to a subtree.

    The live tree is never modified: the subtree is re-parsed from its
    serialization and the copy is cleaned.

    Attributes:
        console: Rich console instance for formatted output

    """

    def __init__(self, console: Console | None = None, verbose: bool = False):
        """Initialize the HTML cleaner.

        Args:
            console: Rich console instance for formatted output. Defaults to None (creates new Console).
            verbose: Print size savings for every cleaned snippet

        """
        self.console = console or Console()
        self.verbose = verbose

    def clean(self, node: Tag) -> str:
        """Serialize a cleaned copy of a subtree.

        Args:
            node: Subtree to clean (left untouched)

        Returns:
            Cleaned HTML string.

        """
        original = str(node)
        soup = BeautifulSoup(original, 'lxml')

        # Step 1: Remove subtrees that never help locate content
        for tag in soup.find_all(NOISE_TAGS):
            tag.decompose()

        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        # Step 2: Keep only attributes a selector could use
        for tag in soup.find_all(True):
            if tag.attrs:
                tag.attrs = {
                    attr: value
                    for attr, value in tag.attrs.items()
                    if attr in KEEP_ATTRIBUTES or attr.startswith('data-')
                }

        # Step 3: Keep a few examples of repeated renderers
        self._trim_repeated_siblings(soup)

        cleaned = self._collapse_whitespace(str(self._unwrap_document(soup)))

        if self.verbose:
            savings = (1 - len(cleaned) / len(original)) * 100 if original else 0
            self.console.print(
                f'  ↻ Tree diet: {len(original):,} → {len(cleaned):,} chars ({savings:.0f}% savings)'
            )

        return cleaned

    def _trim_repeated_siblings(self, soup: BeautifulSoup) -> None:
        for parent in soup.find_all(True):
            seen: dict[str, int] = {}
            for child in parent.find_all(True, recursive=False):
                if '-' not in child.name:
                    continue
                seen[child.name] = seen.get(child.name, 0) + 1
                if seen[child.name] > MAX_REPEATED_SIBLINGS:
                    child.decompose()

    @staticmethod
    def _unwrap_document(soup: BeautifulSoup) -> Tag | BeautifulSoup:
        # lxml wraps fragments in <html><body>; hand back the fragment itself
        body = soup.body
        if body is not None and len(body.find_all(True, recursive=False)) == 1:
            return body.find(True, recursive=False)
        return body or soup

    @staticmethod
    def _collapse_whitespace(html: str) -> str:
        html = re.sub(r'[ \t]+', ' ', html)
        html = re.sub(r'\n+', '\n', html)
        lines = [line.strip() for line in html.split('\n') if line.strip()]
        return '\n'.join(lines)
