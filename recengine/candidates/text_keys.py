from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from .models import Candidate

# Bullets, ASCII/CJK punctuation, quotes and brackets that never distinguish two titles
_STRIP_CHARS = "·•。！!？?，,、；;：:\"'（）()【】[]{}<>《》\\"
_STRIP_RE = re.compile("[" + re.escape(_STRIP_CHARS) + "]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text_key(value: Any) -> str:
    """Canonical comparison key for a free-text title or query.

    Returns ``""`` for anything that is not a string or holds no text; an
    empty key never matches another key.
    """
    if not isinstance(value, str):
        return ""
    key = _WHITESPACE_RE.sub("", value.strip().lower())
    return _STRIP_RE.sub("", key)


def composite_key(candidate: Candidate) -> str | None:
    title_key = normalize_text_key(candidate.title)
    if not title_key:
        return None
    query_key = normalize_text_key(candidate.search_query)
    return f"{title_key}|{query_key}|{candidate.kind}"


def capped_key_set(values: Iterable[Any], cap: int) -> set[str]:
    """Normalize *values*, drop empty keys and keep only the first *cap*."""
    keys: set[str] = set()
    if cap <= 0:
        return keys
    taken = 0
    for value in values:
        key = normalize_text_key(value)
        if not key:
            continue
        keys.add(key)
        taken += 1
        if taken >= cap:
            break
    return keys
