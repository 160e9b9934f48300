"""Title-casing of free-text fields in incoming payloads"""
from django.conf import settings


def title_case(value):
    """Capitalise each whitespace-separated word, lower-casing the rest"""
    return ' '.join(word[:1].upper() + word[1:].lower() for word in value.split())


def _excluded(key):
    excluded = settings.KASAL_RENTAL['TITLE_CASE_EXCLUDED_KEYS']
    lowered = key.lower()
    return lowered in excluded or lowered.endswith('id') or lowered.endswith('_ids')


def sanitize_payload(data, key=None):
    """Return a copy of ``data`` with string values title-cased, skipping excluded keys"""
    if isinstance(data, dict):
        return {k: v if _excluded(k) else sanitize_payload(v, k) for k, v in data.items()}
    if isinstance(data, list):
        return [sanitize_payload(v, key) for v in data]
    if isinstance(data, str) and key is not None:
        return title_case(data.strip())
    return data
