from datetime import timedelta

import pytest

from echobreaker.core.extraction import RecordExtractor, first_success
from echobreaker.core.extraction import strategies as s
from echobreaker.models import UNKNOWN_CHANNEL, UNTITLED, FieldQueries, SourcePhase

WATCH_URL = 'https://www.youtube.com/watch?v=dQw4w9WgXcQ'


@pytest.fixture
def extractor(clock):
    return RecordExtractor(clock=clock)


@pytest.fixture
def home_items(make_tree, home_html):
    return make_tree(home_html).select('ytd-rich-item-renderer')


@pytest.fixture
def first_node(make_tree):
    def _first(html: str, query: str = 'div'):
        return make_tree(html).select_one(query)

    return _first


@pytest.mark.parametrize(
    ('href', 'expected'),
    [
        ('/watch?v=dQw4w9WgXcQ', 'dQw4w9WgXcQ'),
        ('https://www.youtube.com/watch?v=dQw4w9WgXcQ&list=PL1&index=2', 'dQw4w9WgXcQ'),
        ('/shorts/Xy_12-abCDe', 'Xy_12-abCDe'),
        ('https://youtu.be/dQw4w9WgXcQ?t=10', 'dQw4w9WgXcQ'),
        ('https://www.youtube.com/embed/dQw4w9WgXcQ', 'dQw4w9WgXcQ'),
        ('https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg', 'dQw4w9WgXcQ'),
        ('/watch?v=tooShort', None),
        ('/@alpha', None),
        (None, None),
    ],
)
def test_video_id_from_url(href, expected):
    assert s.video_id_from_url(href) == expected


@pytest.mark.parametrize(
    ('href', 'expected'),
    [
        ('/@alpha', '@alpha'),
        ('https://www.youtube.com/@RickAstleyYT/videos', '@RickAstleyYT'),
        ('/channel/UC4QobU6STFB0P71PMvOGN5A', 'UC4QobU6STFB0P71PMvOGN5A'),
        ('/feed/subscriptions', None),
        ('', None),
    ],
)
def test_channel_id_from_url(href, expected):
    assert s.channel_id_from_url(href) == expected


def test_first_success_skips_empty_values():
    strategies = [lambda node: None, lambda node: '', lambda node: 'found', lambda node: 'late']
    assert first_success(strategies, None) == 'found'
    assert first_success([lambda node: None], None) is None


@pytest.mark.parametrize(
    ('label', 'expected'),
    [
        ('Me at the zoo by jawed 3 days ago 19 seconds', 'Me at the zoo'),
        ('강남스타일 게시자: officialpsy 1년 전', '강남스타일'),
        ('Plain title', 'Plain title'),
    ],
)
def test_truncate_label(label, expected):
    assert s.truncate_label(label) == expected


def test_extracts_current_markup(extractor, home_items, clock):
    record = extractor.extract(home_items[0], source_phase=SourcePhase.HOME_FEED)

    assert record.id == 'dQw4w9WgXcQ'
    assert record.title == 'Never Gonna Give You Up'
    assert record.channel_name == 'Alpha Channel'
    assert record.channel_id == '@alpha'
    assert record.is_short is False
    assert record.source_phase == SourcePhase.HOME_FEED
    assert record.significance_weight == 50
    assert record.metadata.view_count == 1_200_000
    assert record.metadata.view_count_text == '1.2M views'
    assert record.metadata.upload_date == '2 days ago'
    assert record.metadata.uploaded_at == clock.now - timedelta(days=2)
    assert record.metadata.duration == '3:33'


def test_extracts_aria_label_and_localized_metadata(extractor, home_items):
    record = extractor.extract(home_items[1], source_phase=SourcePhase.HOME_FEED)

    assert record.id == 'jNQXAC9IVRw'
    assert record.title == 'Me at the zoo'
    assert record.channel_name == 'jawed'
    assert record.channel_id == 'UC4QobU6STFB0P71PMvOGN5A'
    assert record.metadata.view_count == 1_230_000
    assert record.metadata.upload_date == '3일 전'
    assert record.metadata.duration is None


def test_identifier_from_class_name_and_legacy_title(extractor, home_items):
    record = extractor.extract(home_items[2])

    assert record.id == '9bZkp7q19f0'
    assert record.title == 'Gangnam Style'
    assert record.channel_name == UNKNOWN_CHANNEL


def test_missing_fields_fall_back_to_defaults(extractor, home_items):
    record = extractor.extract(home_items[3])

    assert record.id == 'kJQP7kiw5Fk'
    assert record.title == UNTITLED
    assert record.channel_name == UNKNOWN_CHANNEL
    assert record.channel_id is None
    assert record.metadata.view_count is None
    assert record.metadata.upload_date is None


def test_node_without_identifier_is_discarded(extractor, home_items):
    assert extractor.extract(home_items[4]) is None


def test_identifier_from_raw_markup(extractor, first_node):
    node = first_node('<div><img src="https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg"></div>')
    assert extractor.extract(node).id == 'dQw4w9WgXcQ'


def test_resolved_link_query_is_tried_first(extractor, first_node):
    node = first_node(
        '<div><a class="custom" href="/watch?v=dQw4w9WgXcQ"></a>'
        '<a id="thumbnail" href="/watch?v=jNQXAC9IVRw"></a></div>'
    )
    assert extractor.extract(node, FieldQueries(link='a.custom')).id == 'dQw4w9WgXcQ'
    assert extractor.extract(node).id == 'jNQXAC9IVRw'


def test_title_from_resolved_query(extractor, first_node):
    node = first_node('<div><a href="/watch?v=dQw4w9WgXcQ"></a><p class="new-title">Fresh markup</p></div>')
    assert extractor.extract(node, FieldQueries(title='p.new-title')).title == 'Fresh markup'


@pytest.mark.parametrize(
    ('html', 'query'),
    [
        ('<div><a href="/shorts/Xy_12-abCDe">short</a></div>', 'div'),
        (
            '<ytm-shorts-lockup-view-model><a href="/watch?v=Xy_12-abCDe"></a></ytm-shorts-lockup-view-model>',
            'ytm-shorts-lockup-view-model',
        ),
        ('<div class="reel-shelf-item"><a href="/watch?v=Xy_12-abCDe"></a></div>', 'div'),
        (
            '<div><a href="/watch?v=Xy_12-abCDe"></a><ytd-thumbnail-overlay-time-status-renderer '
            'overlay-style="SHORTS"></ytd-thumbnail-overlay-time-status-renderer></div>',
            'div',
        ),
    ],
)
def test_shorts_are_detected_by_any_signal(extractor, first_node, html, query):
    record = extractor.extract(first_node(html, query), source_phase=SourcePhase.HOME_FEED)

    assert record.is_short is True
    assert record.source_phase == SourcePhase.SHORTS
    assert record.significance_weight == 40


def test_current_video_on_watch_page(extractor, make_tree, watch_html, clock):
    record = extractor.extract_current_video(make_tree(watch_html), WATCH_URL)

    assert record.id == 'dQw4w9WgXcQ'
    assert record.title == 'Never Gonna Give You Up'
    assert record.channel_name == 'Rick Astley'
    assert record.channel_id == '@RickAstleyYT'
    assert record.source_phase == SourcePhase.VIDEO
    assert record.significance_weight == 100
    assert record.metadata.view_count == 1_234_567
    assert record.metadata.upload_date == '15 years ago'
    assert record.metadata.uploaded_at == clock.now - timedelta(days=15 * 365)


def test_current_video_with_resolved_queries(extractor, make_tree, watch_html):
    queries = FieldQueries(
        title='h1.ytd-watch-metadata yt-formatted-string',
        channel='#owner #channel-name a',
        metadata='#info-container yt-formatted-string',
    )
    record = extractor.extract_current_video(make_tree(watch_html), WATCH_URL, queries)

    assert record.title == 'Never Gonna Give You Up'
    assert record.channel_id == '@RickAstleyYT'
    assert record.metadata.view_count == 1_234_567


def test_current_video_id_from_player_element(extractor, make_tree, watch_html):
    record = extractor.extract_current_video(make_tree(watch_html), 'https://www.youtube.com/watch')
    assert record.id == 'dQw4w9WgXcQ'


def test_current_video_falls_back_to_document_title(extractor, make_tree):
    tree = make_tree('<html><head><title>Some Upload - YouTube</title></head><body></body></html>')
    record = extractor.extract_current_video(tree, WATCH_URL)

    assert record.title == 'Some Upload'
    assert record.channel_name == UNKNOWN_CHANNEL


def test_current_short(extractor, make_tree):
    record = extractor.extract_current_video(make_tree('<body></body>'), 'https://www.youtube.com/shorts/Xy_12-abCDe')

    assert record.id == 'Xy_12-abCDe'
    assert record.is_short is True
    assert record.source_phase == SourcePhase.SHORTS
    assert record.title == UNTITLED


def test_current_video_without_identifier(extractor, make_tree):
    assert extractor.extract_current_video(make_tree('<body></body>'), 'https://www.youtube.com/watch') is None


def test_extract_channel_from_guide(extractor, make_tree, home_html):
    links = make_tree(home_html).select('ytd-guide-entry-renderer a')
    channels = [extractor.extract_channel(link) for link in links]

    assert channels[0] is None
    assert channels[1].channel_id == '@alpha'
    assert channels[1].channel_name == 'Alpha Channel'
    assert channels[1].thumbnail_url == 'https://yt3.ggpht.com/alpha.jpg'
    assert channels[2].channel_id == 'UC4QobU6STFB0P71PMvOGN5A'
    assert channels[2].channel_name == 'jawed'


@pytest.mark.parametrize('label', ['Subscriptions', '구독'])
def test_extract_channel_skips_section_header(extractor, first_node, label):
    node = first_node(
        '<ytd-guide-entry-renderer><a href="/channel/UC4QobU6STFB0P71PMvOGN5A">'
        f'<yt-formatted-string class="title">{label}</yt-formatted-string></a></ytd-guide-entry-renderer>',
        'ytd-guide-entry-renderer',
    )
    assert extractor.extract_channel(node) is None
