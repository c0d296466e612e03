"""Boundary parsing for loosely-typed request fields.

Multipart forms send ``keywords`` and ``links`` as JSON strings while JSON
bodies send real lists; both are turned into plain Python structures here
and validated before anything touches the database.
"""

import json
from urllib.parse import urlparse

from emblog.errors import ValidationError

MAX_KEYWORD_LENGTH = 50
MAX_LINK_LABEL_LENGTH = 50
MAX_LINK_URL_LENGTH = 500


def _decode_list(raw, field):
    if raw is None or raw == '':
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError(f'{field} must be a JSON list')
    if not isinstance(raw, list):
        raise ValidationError(f'{field} must be a list')
    return raw


def normalize_keywords(values):
    """Lowercase, trim and de-duplicate keywords, keeping first-seen order."""
    seen = []
    for value in values or []:
        keyword = str(value).strip().lower()
        if keyword and keyword not in seen:
            seen.append(keyword)
    return seen


def parse_keywords(raw, max_count=5):
    values = _decode_list(raw, 'keywords')
    for value in values:
        if not isinstance(value, str):
            raise ValidationError('keywords must be strings')
        if len(value.strip()) > MAX_KEYWORD_LENGTH:
            raise ValidationError(f'keywords must be at most {MAX_KEYWORD_LENGTH} characters')
    keywords = normalize_keywords(values)
    if len(keywords) > max_count:
        raise ValidationError(f'At most {max_count} keywords are allowed')
    return keywords


def parse_links(raw, max_count=10):
    """Validate a list of ``{label, url}`` records."""
    values = _decode_list(raw, 'links')
    if len(values) > max_count:
        raise ValidationError(f'At most {max_count} links are allowed')

    links = []
    for value in values:
        if not isinstance(value, dict):
            raise ValidationError('links must contain objects with label and url')
        label = str(value.get('label') or '').strip()
        url = str(value.get('url') or '').strip()
        if not label or not url:
            raise ValidationError('links require both label and url')
        if len(label) > MAX_LINK_LABEL_LENGTH or len(url) > MAX_LINK_URL_LENGTH:
            raise ValidationError('link label or url is too long')
        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValidationError(f'Invalid link url: {url}')
        links.append({'label': label, 'url': url})
    return links


def require_text(data, field, max_length=None):
    """Return the trimmed string ``data[field]`` or raise naming the field."""
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field} is required')
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f'{field} must be at most {max_length} characters')
    return value


def parse_positive_int(raw, default, maximum=None):
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if value < 1:
        return default
    if maximum is not None:
        value = min(value, maximum)
    return value
