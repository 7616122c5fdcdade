"""In-memory resolution failure counters."""

from echobreaker.models import PageType, Target

ESCALATION_THRESHOLD = 2


class FailureTracker:
    """Consecutive-miss counters keyed by (page type, target).

    Counters live only as long as the page session that owns them.
    """

    def __init__(self, threshold: int = ESCALATION_THRESHOLD):
        """Initialize empty counters.

        Args:
            threshold: Count at which a key becomes eligible for escalation

        """
        self.threshold = threshold
        self._counts: dict[tuple[PageType, Target], int] = {}

    def count(self, page_type: PageType, target: Target) -> int:
        """Current count for a key."""
        return self._counts.get((page_type, target), 0)

    def increment(self, page_type: PageType, target: Target) -> int:
        """Record a miss and return the new count."""
        key = (page_type, target)
        self._counts[key] = self._counts.get(key, 0) + 1
        return self._counts[key]

    def reset(self, page_type: PageType, target: Target) -> None:
        """Record a hit."""
        self._counts.pop((page_type, target), None)

    def should_escalate(self, page_type: PageType, target: Target) -> bool:
        """Whether the key has failed often enough to escalate."""
        return self.count(page_type, target) >= self.threshold

    def snapshot(self) -> dict[str, int]:
        """Non-zero counters keyed by '{page_type}_{target}'."""
        return {f'{page.value}_{target.value}': count for (page, target), count in self._counts.items()}
