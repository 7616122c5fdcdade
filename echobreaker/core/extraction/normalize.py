"""Normalizers for free-text fields scraped from the feed.

View counts come in Latin-abbreviation form ('1.2M views', '500K') and in
CJK numeral-unit form ('조회수 123만회'). Upload recency is a relative
phrase ('2 days ago', '3일 전'). Durations are kept as displayed.
"""

import re
from datetime import datetime, timedelta

VIEW_UNITS: dict[str, int] = {
    'k': 1_000,
    'm': 1_000_000,
    'b': 1_000_000_000,
    '천': 1_000,
    '만': 10_000,
    '억': 100_000_000,
}

_NUMBER_WITH_UNIT = re.compile(r'(\d+(?:[.,]\d+)*)\s*([KkMmBb천만억])?(?![A-Za-z])')
_GROUPED_THOUSANDS = re.compile(r'\d{1,3}(?:\.\d{3})+')
_NO_VIEWS = re.compile(r'\bno views\b|조회수\s*없음', re.IGNORECASE)
_VIEW_TEXT = re.compile(r'\bviews?\b|\bwatching\b|조회수|\d\s*[천만억]?\s*회(?:\s|$|·)', re.IGNORECASE)

_RELATIVE_EN = re.compile(r'(\d+)\s*(second|minute|hour|day|week|month|year)s?\s+ago', re.IGNORECASE)
_RELATIVE_KO = re.compile(r'(\d+)\s*(초|분|시간|일|주|개월|달|년)\s*전')
_DURATION = re.compile(r'\d{1,3}(?::\d{2}){1,2}')
_WHITESPACE = re.compile(r'\s+')

_UNIT_DELTAS: dict[str, timedelta] = {
    'second': timedelta(seconds=1),
    'minute': timedelta(minutes=1),
    'hour': timedelta(hours=1),
    'day': timedelta(days=1),
    'week': timedelta(weeks=1),
    'month': timedelta(days=30),
    'year': timedelta(days=365),
    '초': timedelta(seconds=1),
    '분': timedelta(minutes=1),
    '시간': timedelta(hours=1),
    '일': timedelta(days=1),
    '주': timedelta(weeks=1),
    '개월': timedelta(days=30),
    '달': timedelta(days=30),
    '년': timedelta(days=365),
}


def collapse_whitespace(text: str | None) -> str:
    """Strip and collapse internal whitespace."""
    return _WHITESPACE.sub(' ', text or '').strip()


def _to_number(raw: str, has_unit: bool) -> float:
    if ',' in raw and '.' not in raw:
        head, _, tail = raw.rpartition(',')
        # '1,2M' uses a decimal comma, '1,234' groups thousands
        if has_unit and len(tail) <= 2 and ',' not in head:
            return float(f'{head}.{tail}')
        return float(raw.replace(',', ''))
    if not has_unit and _GROUPED_THOUSANDS.fullmatch(raw):
        return float(raw.replace('.', ''))
    return float(raw.replace(',', ''))


def parse_view_count(text: str | None) -> int | None:
    """Normalize a displayed view count to an absolute integer.

    Args:
        text: View count as displayed, e.g. '1.2M views', '조회수 123만회'

    Returns:
        The view count, or None when no number can be read from the text.

    """
    if not text:
        return None
    if _NO_VIEWS.search(text):
        return 0

    match = _NUMBER_WITH_UNIT.search(text)
    if not match:
        return None

    raw, unit = match.group(1), match.group(2)
    try:
        value = _to_number(raw, has_unit=unit is not None)
    except ValueError:
        return None

    multiplier = VIEW_UNITS[unit.lower()] if unit else 1
    return int(round(value * multiplier))


def looks_like_view_count(text: str | None) -> bool:
    """Whether a metadata text is a view count rather than a date or a badge."""
    if not text:
        return False
    return bool(_VIEW_TEXT.search(text) or _NO_VIEWS.search(text))


def find_relative_date(text: str | None) -> str | None:
    """Return the relative-date phrase inside a metadata text, e.g. '2 days ago'."""
    if not text:
        return None
    match = _RELATIVE_EN.search(text) or _RELATIVE_KO.search(text)
    return match.group(0) if match else None


def parse_relative_date(text: str | None, now: datetime) -> datetime | None:
    """Turn a relative-date phrase into an approximate absolute time.

    Months count as 30 days and years as 365.

    Args:
        text: Text containing a phrase such as '3 weeks ago' or '2개월 전'
        now: Reference time (normally the extraction time)

    Returns:
        Approximate upload time, or None if no phrase is found.

    """
    if not text:
        return None

    match = _RELATIVE_EN.search(text)
    if match:
        unit = match.group(2).lower()
    else:
        match = _RELATIVE_KO.search(text)
        if not match:
            return None
        unit = match.group(2)

    return now - int(match.group(1)) * _UNIT_DELTAS[unit]


def clean_duration(text: str | None) -> str | None:
    """Normalize a time-overlay label.

    Returns the clock-style duration inside the text when there is one
    ('12:34'), otherwise the collapsed label itself ('LIVE'), or None for
    blank text.
    """
    cleaned = collapse_whitespace(text)
    if not cleaned:
        return None
    match = _DURATION.search(cleaned)
    return match.group(0) if match else cleaned
