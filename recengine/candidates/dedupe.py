from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from ..config import DEFAULT_RESOLUTION_CONFIG
from .models import Candidate, DedupeMode, HistoryItem, parse_history
from .text_keys import capped_key_set, composite_key, normalize_text_key

logger = logging.getLogger(__name__)


def dedupe_candidates(
    candidates: Sequence[Candidate],
    count: int,
    user_history: Iterable[HistoryItem | dict[str, Any]] | None = None,
    exclude_titles: Iterable[Any] | None = None,
    mode: DedupeMode = DedupeMode.strict,
    lookup_cap: int | None = None,
) -> list[Candidate]:
    """Drop duplicate, excluded and already-seen candidates, keeping at most *count*.

    Lookup sets:
        exclude titles   - always rejected, in every mode
        history titles   - rejected on the first pass
        history queries  - rejected on the first pass (non-empty queries only)

    Each set keeps only the first ``lookup_cap`` non-empty keys.

    In strict mode one pass is made and the result may come up short. Fill
    mode re-scans the same input a second time, now tolerating history
    overlap, until *count* is reached. Input order is preserved within each
    pass and untitled candidates are never emitted.
    """
    if count <= 0:
        return []

    cap = DEFAULT_RESOLUTION_CONFIG.lookup_cap if lookup_cap is None else lookup_cap
    history = parse_history(user_history)

    exclude_keys = capped_key_set(exclude_titles or [], cap)
    history_title_keys = capped_key_set((h.title for h in history), cap)
    history_query_keys = capped_key_set((h.search_query for h in history), cap)

    seen: set[str] = set()
    output: list[Candidate] = []

    def try_add(candidate: Candidate, allow_history_overlap: bool) -> None:
        key = composite_key(candidate)
        if key is None or key in seen:
            return
        title_key = normalize_text_key(candidate.title)
        if title_key in exclude_keys:
            return
        if not allow_history_overlap:
            if title_key in history_title_keys:
                return
            query_key = normalize_text_key(candidate.search_query)
            if query_key and query_key in history_query_keys:
                return
        seen.add(key)
        output.append(candidate)

    for candidate in candidates:
        try_add(candidate, allow_history_overlap=False)
        if len(output) >= count:
            return output

    if mode == DedupeMode.strict:
        return output

    first_pass = len(output)
    for candidate in candidates:
        try_add(candidate, allow_history_overlap=True)
        if len(output) >= count:
            break

    if len(output) > first_pass:
        logger.debug("Fill pass re-admitted %d history-overlapping candidates", len(output) - first_pass)
    return output
