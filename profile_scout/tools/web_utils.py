from __future__ import annotations

from typing import Any
from urllib.parse import urlparse


def is_valid_url(url: str) -> bool:
    """Basic URL validation."""
    try:
        result = urlparse(url)
        return all([result.scheme in ("http", "https"), result.netloc])
    except ValueError:
        return False


def normalize_text_list(raw_values: Any, *, max_items: int, min_len: int = 1) -> list[str]:
    """Collapse whitespace, drop blanks and case-insensitive repeats, cap length."""
    if not isinstance(raw_values, list):
        return []
    cleaned: list[str] = []
    seen: set[str] = set()
    for item in raw_values:
        if not isinstance(item, str):
            continue
        value = " ".join(item.split()).strip()
        if len(value) < min_len:
            continue
        key = value.lower()
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(value)
        if len(cleaned) >= max_items:
            break
    return cleaned
