import pytest
import requests

from echobreaker.models import CollectionBatch, ExtractedRecord, PageType
from echobreaker.storage import MemoryStore, PendingQueue
from echobreaker.transport import CrawlTransport, NullTransport, is_transient
from echobreaker.utils.exceptions import TransportError


@pytest.fixture
def batch():
    return CollectionBatch(
        url='https://www.youtube.com/',
        page_type=PageType.HOME,
        videos=[ExtractedRecord(id='dQw4w9WgXcQ', title='Never Gonna Give You Up')],
    )


@pytest.fixture
def session(mocker):
    session = mocker.Mock()
    session.post.return_value.ok = True
    return session


@pytest.fixture
def make_transport(session):
    def _make(pending=None):
        return CrawlTransport(
            'http://localhost:3000',
            pending=pending,
            max_attempts=1,
            wait_min=0,
            wait_max=0,
            session=session,
        )

    return _make


def _response(mocker, ok=True, status_code=200, reason='OK'):
    response = mocker.Mock()
    response.ok = ok
    response.status_code = status_code
    response.reason = reason
    return response


def test_send_posts_payload(make_transport, session, batch):
    assert make_transport().send(batch) is True

    url = session.post.call_args.args[0]
    payload = session.post.call_args.kwargs['json']
    assert url == 'http://localhost:3000/api/crawl'
    assert payload['pageType'] == 'home'
    assert payload['videos'][0]['videoId'] == 'dQw4w9WgXcQ'


def test_failed_send_is_queued(make_transport, session, batch):
    session.post.side_effect = requests.ConnectionError('connection refused')
    transport = make_transport()

    assert transport.send(batch) is False
    [queued] = transport.pending.items()
    assert queued['pageUrl'] == 'https://www.youtube.com/'
    assert 'timestamp' in queued


def test_rejected_status_is_a_failure(make_transport, session, batch, mocker):
    session.post.return_value = _response(mocker, ok=False, status_code=500, reason='Internal Server Error')
    transport = make_transport()

    assert transport.send(batch) is False
    assert len(transport.pending) == 1


def test_empty_queue_passed_in_is_used(make_transport, batch, session):
    queue = PendingQueue(store=MemoryStore())
    session.post.side_effect = requests.ConnectionError('down')

    make_transport(pending=queue).send(batch)
    assert len(queue) == 1


def test_success_flushes_pending_oldest_first(make_transport, session, batch):
    queue = PendingQueue(store=MemoryStore())
    queue.push({'pageUrl': 'first'})
    queue.push({'pageUrl': 'second'})

    assert make_transport(pending=queue).send(batch) is True

    sent = [call.kwargs['json']['pageUrl'] for call in session.post.call_args_list]
    assert sent == ['https://www.youtube.com/', 'first', 'second']
    assert len(queue) == 0


def test_flush_stops_at_first_failure(make_transport, session, mocker):
    queue = PendingQueue(store=MemoryStore())
    for name in ('first', 'second', 'third'):
        queue.push({'pageUrl': name})

    session.post.side_effect = [
        _response(mocker),
        _response(mocker, ok=False, status_code=503, reason='Service Unavailable'),
    ]

    assert make_transport(pending=queue).flush_pending() == 1
    assert [item['pageUrl'] for item in queue.items()] == ['second', 'third']
    assert session.post.call_count == 2


def test_retries_before_giving_up(session, batch):
    session.post.side_effect = requests.Timeout('read timed out')
    transport = CrawlTransport('http://localhost:3000', max_attempts=3, wait_min=0, wait_max=0, session=session)

    assert transport.send(batch) is False
    assert session.post.call_count == 3


def test_refused_payload_is_not_retried(session, batch, mocker):
    session.post.return_value = _response(mocker, ok=False, status_code=400, reason='Bad Request')
    transport = CrawlTransport('http://localhost:3000', max_attempts=3, wait_min=0, wait_max=0, session=session)

    assert transport.send(batch) is False
    assert session.post.call_count == 1


def test_server_error_is_retried_until_accepted(session, batch, mocker):
    session.post.side_effect = [
        _response(mocker, ok=False, status_code=503, reason='Service Unavailable'),
        _response(mocker),
    ]
    transport = CrawlTransport('http://localhost:3000', max_attempts=3, wait_min=0, wait_max=0, session=session)

    assert transport.send(batch) is True
    assert session.post.call_count == 2
    assert len(transport.pending) == 0


@pytest.mark.parametrize(
    ('error', 'expected'),
    [
        (TransportError('http://x/api/crawl', None, 'timed out'), True),
        (TransportError('http://x/api/crawl', 429, 'Too Many Requests'), True),
        (TransportError('http://x/api/crawl', 502, 'Bad Gateway'), True),
        (TransportError('http://x/api/crawl', 422, 'Unprocessable Entity'), False),
        (ValueError('not a transport failure'), False),
    ],
)
def test_is_transient(error, expected):
    assert is_transient(error) is expected


def test_null_transport_records_batches(batch):
    transport = NullTransport()
    assert transport.send(batch) is True
    assert transport.sent == [batch]
