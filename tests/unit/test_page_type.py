import pytest

from echobreaker.core.page_type import detect_page_type
from echobreaker.models import PageType


@pytest.mark.parametrize(
    ('url', 'expected'),
    [
        ('https://www.youtube.com/', PageType.HOME),
        ('https://www.youtube.com', PageType.HOME),
        ('https://www.youtube.com/watch?v=dQw4w9WgXcQ', PageType.WATCH),
        ('https://www.youtube.com/watch?v=dQw4w9WgXcQ&list=PL123', PageType.WATCH),
        ('https://www.youtube.com/shorts/Xy_12-abCDe', PageType.SHORTS),
        ('https://www.youtube.com/playlist?list=PL123', PageType.PLAYLIST),
        ('https://www.youtube.com/playlist', PageType.OTHER),
        ('https://www.youtube.com/feed/subscriptions', PageType.SUBSCRIPTIONS),
        ('https://www.youtube.com/feed/history', PageType.HISTORY),
        ('https://www.youtube.com/results?search_query=lofi', PageType.SEARCH),
        ('https://www.youtube.com/@RickAstleyYT', PageType.CHANNEL),
        ('https://www.youtube.com/@RickAstleyYT/videos', PageType.CHANNEL),
        ('https://www.youtube.com/channel/UC4QobU6STFB0P71PMvOGN5A', PageType.CHANNEL),
        ('https://www.youtube.com/c/LegacyName', PageType.CHANNEL),
        ('https://www.youtube.com/user/legacy', PageType.CHANNEL),
        ('https://www.youtube.com/feed/trending', PageType.OTHER),
        ('https://www.youtube.com/account', PageType.OTHER),
        ('/watch?v=dQw4w9WgXcQ', PageType.WATCH),
        ('', PageType.HOME),
    ],
)
def test_detect_page_type(url, expected):
    assert detect_page_type(url) == expected
