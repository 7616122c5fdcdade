"""Record extraction with per-field fallback chains."""

from echobreaker.core.extraction.extractor import RecordExtractor
from echobreaker.core.extraction.normalize import clean_duration, parse_relative_date, parse_view_count
from echobreaker.core.extraction.strategies import first_success

__all__ = ['RecordExtractor', 'clean_duration', 'first_success', 'parse_relative_date', 'parse_view_count']
