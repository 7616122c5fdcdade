"""Runtime checks of whether a selector currently matches the page tree.

Selectors come from defaults, the cache or an escalation service and are
never trusted without a probe. A comma-joined selector is treated as a set
of independent alternatives: each one is evaluated on its own so that a
single malformed alternative cannot poison the others.
"""

import logfire
from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError


def split_alternatives(query: str) -> list[str]:
    """Split a selector on top-level commas.

    Commas inside attribute brackets, pseudo-class parentheses or quotes do
    not split. When brackets or quotes never close, nesting cannot be
    trusted and every comma splits.

    Args:
        query: Selector, possibly comma-joined

    Returns:
        Non-empty stripped alternatives in their original order.

    """
    alternatives: list[str] = []
    depth = 0
    quote: str | None = None
    current: list[str] = []

    for char in query:
        if quote:
            if char == quote:
                quote = None
        elif char in ('"', "'"):
            quote = char
        elif char in '[(':
            depth += 1
        elif char in '])':
            depth = max(depth - 1, 0)
        elif char == ',' and depth == 0:
            alternatives.append(''.join(current).strip())
            current = []
            continue
        current.append(char)

    alternatives.append(''.join(current).strip())
    if depth or quote:
        alternatives = [piece.strip() for piece in query.split(',')]
    return [alt for alt in alternatives if alt]


def _select_alternative(root: BeautifulSoup | Tag, alternative: str) -> list[Tag]:
    try:
        return list(root.select(alternative))
    except (SelectorSyntaxError, ValueError, NotImplementedError) as e:
        logfire.debug('Selector alternative rejected', selector=alternative, error=str(e))
        return []


def select_all(root: BeautifulSoup | Tag, query: str | None) -> list[Tag]:
    """Select every node matched by any alternative, in document order, without duplicates.

    Args:
        root: Tree or subtree to search
        query: Selector, possibly comma-joined; None or blank matches nothing

    Returns:
        Matching nodes.

    """
    if not query or not query.strip():
        return []

    seen: set[int] = set()
    matches: list[Tag] = []
    for alternative in split_alternatives(query):
        for node in _select_alternative(root, alternative):
            if id(node) not in seen:
                seen.add(id(node))
                matches.append(node)

    if len(matches) > 1:
        order = {id(node): index for index, node in enumerate(root.find_all(True))}
        matches.sort(key=lambda node: order.get(id(node), len(order)))
    return matches


def select_first(root: BeautifulSoup | Tag, query: str | None) -> Tag | None:
    """First node matched by any alternative, trying alternatives in order."""
    if not query or not query.strip():
        return None

    for alternative in split_alternatives(query):
        found = _select_alternative(root, alternative)
        if found:
            return found[0]
    return None


def probe(root: BeautifulSoup | Tag, query: str | None) -> int:
    """Count nodes matched by a selector. Never raises.

    Args:
        root: Tree to probe
        query: Selector to test

    Returns:
        Number of distinct matching nodes (0 for blank or malformed selectors).

    """
    return len(select_all(root, query))
