"""Selector proposals from the companion server's DOM-analysis endpoint."""

import logfire
import requests

from echobreaker.core.escalation.config import DEFAULT_ESCALATION_TIMEOUT
from echobreaker.models import PageType, Target
from echobreaker.utils.exceptions import EscalationError

ANALYZE_DOM_PATH = '/api/analyze-dom'


class ServiceSelectorProposer:
    """Posts a snippet to `/api/analyze-dom` and reads back `{selector}`.

    Attributes:
        endpoint: Full URL of the analysis endpoint
        timeout: Request timeout in seconds
        session: Requests session used for every call

    """

    def __init__(
        self,
        api_base_url: str,
        timeout: float = DEFAULT_ESCALATION_TIMEOUT,
        session: requests.Session | None = None,
    ):
        """Initialize the proposer.

        Args:
            api_base_url: Base URL of the companion server
            timeout: Request timeout in seconds
            session: Session to reuse, a new one is created when omitted

        """
        self.endpoint = api_base_url.rstrip('/') + ANALYZE_DOM_PATH
        self.timeout = timeout
        self.session = session or requests.Session()

    def propose_selector(self, snippet: str, target: Target, page_type: PageType) -> str | None:
        """Request a selector for a target.

        Returns:
            The proposed selector, None when the service has no answer.

        Raises:
            EscalationError: On network failure, timeout, non-2xx status or an unreadable body

        """
        payload = {'htmlSnippet': snippet, 'target': target.value, 'pageType': page_type.value}

        try:
            response = self.session.post(self.endpoint, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise EscalationError(target.value, page_type.value, str(e)) from e
        except ValueError as e:
            raise EscalationError(target.value, page_type.value, f'invalid JSON response: {e}') from e

        if not isinstance(body, dict):
            raise EscalationError(target.value, page_type.value, 'response is not an object')

        selector = body.get('selector')
        logfire.debug('Service proposal received', target=target.value, page_type=page_type.value, selector=selector)
        return selector if isinstance(selector, str) else None
