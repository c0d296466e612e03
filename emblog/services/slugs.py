"""Slug generation for article titles.

A slug is the transliterated title followed by a time-based token, e.g.
``hello-world-m1x8k2p0q-4fz7``. The token makes slugs unique without
looking at existing rows; the unique index on ``articles.slug`` is the
backstop.
"""

import re
import secrets
import time
import unicodedata

_ALPHABET = '0123456789abcdefghijklmnopqrstuvwxyz'
_NON_ALNUM = re.compile(r'[^a-z0-9]+')
_MAX_BASE_LENGTH = 80


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError('number must be non-negative')
    if number == 0:
        return '0'
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_ALPHABET[rem])
    return ''.join(reversed(digits))


def slugify(title: str) -> str:
    """Lowercase ASCII transliteration of ``title`` with dashes between words."""
    text = unicodedata.normalize('NFKD', title or '')
    text = text.encode('ascii', 'ignore').decode('ascii').lower()
    slug = _NON_ALNUM.sub('-', text).strip('-')
    slug = slug[:_MAX_BASE_LENGTH].rstrip('-')
    return slug or 'article'


def uniqueness_token() -> str:
    stamp = to_base36(time.time_ns() // 1000)
    suffix = ''.join(secrets.choice(_ALPHABET) for _ in range(4))
    return f'{stamp}-{suffix}'


def unique_slug(title: str) -> str:
    return f'{slugify(title)}-{uniqueness_token()}'
