from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable, Mapping
from typing import Any

from ..candidates.models import Category, HistoryItem, UserPreference


def _interaction_title(item: Any) -> str:
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, HistoryItem):
        return item.title.strip()
    if isinstance(item, Mapping) and isinstance(item.get("title"), str):
        return item["title"].strip()
    return ""


def _weights(preference: UserPreference | Mapping[str, Any] | None) -> list[list[Any]]:
    if preference is None:
        return []
    raw = preference.preferences if isinstance(preference, UserPreference) else preference.get("preferences")
    if not isinstance(raw, Mapping):
        return []
    entries = []
    for key, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        entries.append([str(key), float(value)])
    return sorted(entries)


def _category(
    preference: UserPreference | Mapping[str, Any] | None,
    category: Category | str | None,
) -> str | None:
    if category is None and preference is not None:
        category = preference.category if isinstance(preference, UserPreference) else preference.get("category")
    if isinstance(category, Category):
        return category.value
    return category if isinstance(category, str) else None


def generate_preference_hash(
    preference: UserPreference | Mapping[str, Any] | None,
    recent_interactions: Iterable[Any] | None,
    category: Category | str | None = None,
) -> str:
    """Stable 16-hex-char key for a user's preference state.

    Built from the category, the weight map (sorted) and the *set* of
    recently clicked titles (sorted), so reordering clicks keeps the key
    while adding, removing or renaming one changes it.
    """
    titles = sorted({t for t in map(_interaction_title, recent_interactions or []) if t})
    canonical = json.dumps(
        {
            "category": _category(preference, category),
            "weights": _weights(preference),
            "titles": titles,
        },
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]
