"""Hand-off of collection batches to the companion server."""

from typing import Any, Protocol

import logfire
import requests
from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from echobreaker.models import CollectionBatch
from echobreaker.storage import PendingQueue
from echobreaker.utils.exceptions import TransportError

CRAWL_PATH = '/api/crawl'
RETRYABLE_STATUS = frozenset({408, 425, 429, 500, 502, 503, 504})


def is_transient(error: BaseException) -> bool:
    """Whether a submission failure may succeed on another attempt.

    Connection errors and timeouts (no status) and server-side statuses are
    retried. Other rejections mean the payload itself was refused.
    """
    if not isinstance(error, TransportError):
        return False
    return error.status_code is None or error.status_code in RETRYABLE_STATUS


def log_crawl_retry(retry_state: RetryCallState) -> None:
    """Log a failed submission attempt before the next one."""
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logfire.warn(
        'Retrying batch submission',
        attempt=retry_state.attempt_number,
        endpoint=getattr(error, 'url', None),
        status=getattr(error, 'status_code', None),
        error=str(error) if error else 'Unknown error',
    )


class Transport(Protocol):
    """Destination of collection batches."""

    def send(self, batch: CollectionBatch) -> bool:
        """Deliver a batch, returning whether it was accepted."""
        ...


class NullTransport:
    """Accepts every batch without sending it anywhere."""

    def __init__(self):
        """Initialize with an empty delivery log."""
        self.sent: list[CollectionBatch] = []

    def send(self, batch: CollectionBatch) -> bool:
        """Record the batch."""
        self.sent.append(batch)
        return True


class CrawlTransport:
    """POSTs batches to `/api/crawl` and retains failed ones for later.

    A failed batch goes to the pending queue. After every successful
    delivery the queue is flushed oldest first, stopping at the first
    failure so order is preserved.

    Attributes:
        endpoint: Full URL of the crawl endpoint
        pending: Queue of undelivered payloads
        timeout: Request timeout in seconds
        session: Requests session used for every call

    """

    def __init__(
        self,
        api_base_url: str,
        pending: PendingQueue | None = None,
        timeout: float = 30.0,
        max_attempts: int = 3,
        wait_min: float = 1.0,
        wait_max: float = 10.0,
        session: requests.Session | None = None,
    ):
        """Initialize the transport.

        Args:
            api_base_url: Base URL of the companion server
            pending: Pending queue, in-memory when omitted
            timeout: Request timeout in seconds
            max_attempts: Attempts per payload before it counts as failed
            wait_min: Minimum backoff between attempts in seconds
            wait_max: Maximum backoff between attempts in seconds
            session: Session to reuse, a new one is created when omitted

        """
        self.endpoint = api_base_url.rstrip('/') + CRAWL_PATH
        self.pending = pending if pending is not None else PendingQueue()
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.wait_min = wait_min
        self.wait_max = wait_max
        self.session = session or requests.Session()

    def _post(self, payload: dict[str, Any]) -> None:
        try:
            response = self.session.post(self.endpoint, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(self.endpoint, None, str(e)) from e
        if not response.ok:
            raise TransportError(self.endpoint, response.status_code, response.reason or 'request rejected')

    def _retryer(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(min=self.wait_min, max=self.wait_max),
            retry=retry_if_exception(is_transient),
            before_sleep=log_crawl_retry,
            reraise=True,
        )

    def _submit(self, payload: dict[str, Any]) -> None:
        self._retryer()(self._post, payload)

    def send(self, batch: CollectionBatch) -> bool:
        """Submit a batch, queueing it locally on failure.

        Args:
            batch: Batch to deliver

        Returns:
            True if the server accepted the batch.

        """
        payload = batch.to_payload()

        with logfire.span('send batch', endpoint=self.endpoint, **batch.counts()):
            try:
                self._submit(payload)
            except TransportError as e:
                queued = self.pending.push(payload)
                logfire.warn('Batch submission failed, kept for later', error=str(e), pending=queued)
                return False

            logfire.info('Batch submitted', page_type=batch.page_type.value, total=batch.total)

        self.flush_pending()
        return True

    def flush_pending(self) -> int:
        """Resubmit retained payloads oldest first, stopping at the first failure.

        Returns:
            Number of payloads delivered.

        """
        remaining = self.pending.items()
        delivered = 0

        while remaining:
            try:
                self._submit(remaining[0])
            except TransportError as e:
                logfire.warn('Pending flush stopped', error=str(e), remaining=len(remaining))
                break
            remaining = remaining[1:]
            delivered += 1

        if delivered:
            self.pending.replace(remaining)
            logfire.info('Pending batches flushed', delivered=delivered, remaining=len(remaining))
        return delivered
