import math

from bs4 import BeautifulSoup


def strip_tags(html: str) -> str:
    """Strip HTML tags, collapsing whitespace runs to single spaces."""
    if not html:
        return ''
    text = BeautifulSoup(html, 'html.parser').get_text(separator=' ')
    return ' '.join(text.split())


def count_words(html: str) -> int:
    """Strip HTML tags and count words."""
    return len(strip_tags(html).split())


def reading_time_minutes(word_count: int, wpm: int = 200) -> int:
    """Estimated reading time in minutes, never less than one."""
    return max(1, math.ceil(word_count / wpm))


def make_excerpt(html: str, length: int = 160) -> str:
    text = strip_tags(html)
    if len(text) > length:
        return text[:length] + '...'
    return text
