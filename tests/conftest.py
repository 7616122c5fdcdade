from datetime import UTC, datetime

import pytest
from bs4 import BeautifulSoup

from echobreaker.core.escalation.config import LLMConfig
from echobreaker.core.resolution import ResolverState, SelectorResolver
from echobreaker.storage import MemoryStore, SelectorCache

FIXED_NOW = datetime(2025, 11, 20, 12, 0, tzinfo=UTC)


class Clock:
    """Settable time source."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class StubDiscoverer:
    """Escalation stand-in returning a fixed answer and recording calls."""

    def __init__(self, answer: str | None = None):
        self.answer = answer
        self.calls: list[tuple] = []

    def discover(self, tree, target, page_type):
        self.calls.append((target, page_type))
        return self.answer


class StubProposer:
    """Proposer stand-in returning a fixed proposal or raising."""

    def __init__(self, proposal: str | None = None, error: Exception | None = None):
        self.proposal = proposal
        self.error = error
        self.calls: list[tuple] = []

    def propose_selector(self, snippet, target, page_type):
        self.calls.append((snippet, target, page_type))
        if self.error is not None:
            raise self.error
        return self.proposal


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def stub_discoverer():
    return StubDiscoverer


@pytest.fixture
def stub_proposer():
    return StubProposer


@pytest.fixture
def make_tree():
    def _make(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, 'lxml')

    return _make


@pytest.fixture
def cache(clock):
    return SelectorCache(store=MemoryStore(), clock=clock)


@pytest.fixture
def make_resolver(cache):
    def _make(escalation=None, patterns=None) -> SelectorResolver:
        return SelectorResolver(state=ResolverState(cache=cache), patterns=patterns, escalation=escalation)

    return _make


@pytest.fixture
def mock_llm_config():
    return LLMConfig(provider='groq', model_name='llama-3.3-70b-versatile', api_key='test-key', temperature=0.0)


@pytest.fixture
def home_html():
    """Home feed: five grid items (full, legacy, class-id, id-only, no id) and a guide."""
    return """
    <html>
    <head><title>YouTube</title></head>
    <body>
    <div id="guide">
      <ytd-guide-renderer>
        <ytd-guide-entry-renderer>
          <a id="endpoint" href="/feed/subscriptions" title="Subscriptions">Subscriptions</a>
        </ytd-guide-entry-renderer>
        <ytd-guide-entry-renderer>
          <a id="endpoint" href="/@alpha" title="Alpha Channel">
            <img src="https://yt3.ggpht.com/alpha.jpg">
            <yt-formatted-string class="title">Alpha Channel</yt-formatted-string>
          </a>
        </ytd-guide-entry-renderer>
        <ytd-guide-entry-renderer>
          <a id="endpoint" href="/channel/UC4QobU6STFB0P71PMvOGN5A" title="jawed">
            <yt-formatted-string class="title">jawed</yt-formatted-string>
          </a>
        </ytd-guide-entry-renderer>
      </ytd-guide-renderer>
    </div>
    <ytd-rich-grid-renderer>
      <div id="contents">
        <ytd-rich-item-renderer>
          <a id="thumbnail" href="/watch?v=dQw4w9WgXcQ">
            <ytd-thumbnail-overlay-time-status-renderer>
              <span id="text"> 3:33 </span>
            </ytd-thumbnail-overlay-time-status-renderer>
          </a>
          <a id="video-title-link" href="/watch?v=dQw4w9WgXcQ" title="Never Gonna Give You Up">
            <yt-formatted-string id="video-title">Never Gonna Give You Up</yt-formatted-string>
          </a>
          <ytd-channel-name><a href="/@alpha">Alpha Channel</a></ytd-channel-name>
          <div id="metadata-line">
            <span class="inline-metadata-item">1.2M views</span>
            <span class="inline-metadata-item">2 days ago</span>
          </div>
        </ytd-rich-item-renderer>
        <ytd-rich-item-renderer>
          <a id="thumbnail" href="https://www.youtube.com/watch?v=jNQXAC9IVRw&amp;pp=sAQA"></a>
          <a id="video-title-link" href="/watch?v=jNQXAC9IVRw"
             aria-label="Me at the zoo by jawed 3 days ago 19 seconds"></a>
          <div id="channel-name">
            <div id="text-container"><a href="/channel/UC4QobU6STFB0P71PMvOGN5A">jawed</a></div>
          </div>
          <div id="metadata-line"><span>조회수 123만회</span><span>3일 전</span></div>
        </ytd-rich-item-renderer>
        <ytd-rich-item-renderer>
          <div class="yt-lockup-view-model-wiz content-id-9bZkp7q19f0">
            <h3><span>Gangnam Style</span></h3>
          </div>
        </ytd-rich-item-renderer>
        <ytd-rich-item-renderer data-video-id="kJQP7kiw5Fk"></ytd-rich-item-renderer>
        <ytd-rich-item-renderer><span>Sponsored</span></ytd-rich-item-renderer>
      </div>
    </ytd-rich-grid-renderer>
    </body>
    </html>
    """


@pytest.fixture
def watch_html():
    """Watch page: current video metadata and three sidebar items, one of them a short."""
    return """
    <html>
    <head>
      <title>Never Gonna Give You Up - YouTube</title>
      <meta property="og:title" content="Never Gonna Give You Up">
    </head>
    <body>
    <ytd-watch-flexy video-id="dQw4w9WgXcQ">
      <div id="primary">
        <ytd-watch-metadata>
          <h1 class="ytd-watch-metadata"><yt-formatted-string>Never Gonna Give You Up</yt-formatted-string></h1>
          <div id="owner">
            <ytd-channel-name id="channel-name"><a href="/@RickAstleyYT">Rick Astley</a></ytd-channel-name>
          </div>
          <div id="info-container">
            <yt-formatted-string id="info"><span>1,234,567 views</span> <span>15 years ago</span></yt-formatted-string>
          </div>
        </ytd-watch-metadata>
      </div>
      <div id="secondary">
        <ytd-compact-video-renderer>
          <a id="thumbnail" href="/watch?v=jNQXAC9IVRw"></a>
          <span id="video-title" title="Me at the zoo">Me at the zoo</span>
          <ytd-channel-name><a href="/@jawed">jawed</a></ytd-channel-name>
          <div id="metadata-line"><span>500K views</span><span>1 year ago</span></div>
        </ytd-compact-video-renderer>
        <ytd-compact-video-renderer>
          <a id="thumbnail" href="/watch?v=9bZkp7q19f0"></a>
          <span id="video-title">Gangnam Style</span>
        </ytd-compact-video-renderer>
        <ytd-compact-video-renderer>
          <a id="thumbnail" href="/shorts/Xy_12-abCDe"></a>
          <span id="video-title">A short</span>
        </ytd-compact-video-renderer>
      </div>
    </ytd-watch-flexy>
    </body>
    </html>
    """


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line('markers', 'integration: marks tests as integration tests')
    config.addinivalue_line('markers', 'unit: marks tests as unit tests')


def pytest_collection_modifyitems(config, items):
    """Apply directory-based marks to collected test items."""
    for item in items:
        if hasattr(item, 'fspath'):
            file_path = str(item.fspath)

            if '/tests/integration/' in file_path:
                item.add_marker(pytest.mark.integration)
            elif '/tests/unit/' in file_path:
                item.add_marker(pytest.mark.unit)
