from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from ..config import DEFAULT_RESOLUTION_CONFIG, ResolutionConfig
from .dedupe import dedupe_candidates
from .models import (
    Candidate,
    Category,
    Client,
    DedupeMode,
    EntertainmentType,
    FitnessType,
    HistoryItem,
    Locale,
    UserPreference,
    parse_history,
)
from .templates import TemplateBankError, get_template_pool
from .text_keys import normalize_text_key

logger = logging.getLogger(__name__)

# Every batch of these categories should show one item of each kind, in this order
REQUIRED_KINDS: dict[Category, tuple[str, ...]] = {
    Category.entertainment: (
        EntertainmentType.video.value,
        EntertainmentType.game.value,
        EntertainmentType.music.value,
        EntertainmentType.review.value,
    ),
    Category.fitness: (
        FitnessType.nearby_place.value,
        FitnessType.tutorial.value,
        FitnessType.equipment.value,
    ),
}


def required_kinds(
    category: Category,
    locale: Locale = Locale.en,
    client: Client = Client.web,
) -> tuple[str, ...]:
    kinds = REQUIRED_KINDS.get(category, ())
    # Chinese web users also get a theory article once the core kinds are covered
    if category == Category.fitness and locale == Locale.zh and client == Client.web:
        kinds = (*kinds, FitnessType.theory_article.value)
    return kinds


# ---------------------------------------------------------------------------
# Preference ordering
# ---------------------------------------------------------------------------

def _normalize_tag(tag: str) -> str:
    return tag.strip().lower()


def _preference_tags(user_preference: UserPreference | None) -> list[str]:
    if user_preference is None:
        return []
    return [t for t in user_preference.tags if t.strip()]


def _overlap_score(tags: Iterable[str], preference_tags: Sequence[str]) -> int:
    if not preference_tags:
        return 0
    wanted = {_normalize_tag(t) for t in preference_tags}
    return sum(1 for tag in tags if _normalize_tag(tag) in wanted)


def order_by_preference(pool: Sequence[Candidate], preference_tags: Sequence[str]) -> list[Candidate]:
    """Templates sharing more tags with the user come first; ties keep bank order."""
    return sorted(pool, key=lambda c: -_overlap_score(c.tags, preference_tags))


def personalize_query(candidate: Candidate, preference_tags: Sequence[str]) -> Candidate:
    """Append the first preference tag the template shares but its query lacks."""
    template_tags = {_normalize_tag(t) for t in candidate.tags}
    query_lower = candidate.search_query.lower()
    for tag in preference_tags:
        normalized = _normalize_tag(tag)
        if normalized in template_tags and normalized not in query_lower:
            query = f"{candidate.search_query} {tag.strip()}".strip()
            return candidate.model_copy(update={"search_query": query})
    return candidate


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

def _load_templates(
    category: Category,
    locale: Locale,
    config: ResolutionConfig,
) -> list[Candidate]:
    try:
        return get_template_pool(locale, category)
    except TemplateBankError:
        if not config.is_production:
            raise
        logger.error("Template bank is empty for %s/%s; returning no fallbacks", locale.value, category.value)
        return []


def _pick_kinds(
    ordered: Sequence[Candidate],
    kinds: Sequence[str],
    history: list[HistoryItem],
    exclude_titles: list[str],
    lookup_cap: int,
) -> list[Candidate]:
    """Pick one fresh template per kind, never reusing a title picked earlier."""
    selected: list[Candidate] = []
    picked_titles: list[str] = []
    for kind in kinds:
        pool = [c for c in ordered if c.kind == kind]
        if not pool:
            continue
        # Picked titles go first so the lookup cap never truncates them away
        picked = dedupe_candidates(
            pool,
            count=1,
            user_history=history,
            exclude_titles=[*picked_titles, *exclude_titles],
            mode=DedupeMode.strict,
            lookup_cap=lookup_cap + len(picked_titles),
        )
        if picked:
            selected.append(picked[0])
            picked_titles.append(picked[0].title)
    return selected


def _clean_titles(titles: Iterable[Any] | None) -> list[str]:
    return [t for t in titles or [] if isinstance(t, str) and t.strip()]


def _drop_excluded(candidates: Iterable[Candidate], exclude_titles: Iterable[str]) -> list[Candidate]:
    excluded = {normalize_text_key(t) for t in exclude_titles}
    excluded.discard("")
    return [c for c in candidates if normalize_text_key(c.title) not in excluded]


def generate_fallback_candidates(
    category: Category,
    locale: Locale,
    count: int,
    client: Client = Client.web,
    exclude_titles: Iterable[Any] | None = None,
    user_history: Iterable[HistoryItem | dict[str, Any]] | None = None,
    user_preference: UserPreference | None = None,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> list[Candidate]:
    """Build up to *count* template candidates covering the category's required kinds.

    The required kinds are picked first, one each, then the remaining slots
    are filled from the preference-ordered bank. Nothing returned shares a
    title key with *exclude_titles* or with the user's history.
    """
    count = min(max(count, 1), config.fallback_max_count)
    pool = _load_templates(category, locale, config)
    if not pool:
        return []

    base_excludes = _clean_titles(exclude_titles)
    # Template pools are small, so the full exclude list is enforced up front
    pool = _drop_excluded(pool, base_excludes)
    preference_tags = _preference_tags(user_preference)
    ordered = [personalize_query(c, preference_tags) for c in order_by_preference(pool, preference_tags)]
    history = parse_history(user_history)

    required = _pick_kinds(
        ordered,
        required_kinds(category, locale, client),
        history,
        base_excludes,
        config.lookup_cap,
    )
    required_titles = [c.title for c in required]

    rest = dedupe_candidates(
        ordered,
        count=count,
        user_history=history,
        exclude_titles=[*required_titles, *base_excludes],
        mode=DedupeMode.strict,
        lookup_cap=config.lookup_cap + len(required_titles),
    )
    merged = dedupe_candidates(
        [*required, *rest],
        count=count,
        user_history=history,
        exclude_titles=base_excludes,
        mode=DedupeMode.strict,
        lookup_cap=config.lookup_cap,
    )
    return merged[:count]


# ---------------------------------------------------------------------------
# Top-up helpers for upstream batches
# ---------------------------------------------------------------------------

def missing_kinds(
    candidates: Iterable[Candidate],
    category: Category,
    locale: Locale = Locale.en,
    client: Client = Client.web,
) -> list[str]:
    present = {c.kind for c in candidates if c.kind}
    return [kind for kind in required_kinds(category, locale, client) if kind not in present]


def supplement_missing_kinds(
    candidates: Sequence[Candidate],
    category: Category,
    locale: Locale,
    client: Client = Client.web,
    exclude_titles: Iterable[Any] | None = None,
    user_history: Iterable[HistoryItem | dict[str, Any]] | None = None,
    user_preference: UserPreference | None = None,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> list[Candidate]:
    """One template candidate for each required kind the batch lacks.

    Returns only the supplements; titles already in the batch are excluded.
    """
    kinds = missing_kinds(candidates, category, locale, client)
    if not kinds:
        return []
    pool = _load_templates(category, locale, config)
    if not pool:
        return []

    excludes = [*_clean_titles(exclude_titles), *_clean_titles(c.title for c in candidates)]
    pool = _drop_excluded(pool, excludes)
    preference_tags = _preference_tags(user_preference)
    ordered = [personalize_query(c, preference_tags) for c in order_by_preference(pool, preference_tags)]
    supplements = _pick_kinds(ordered, kinds, parse_history(user_history), excludes, config.lookup_cap)
    if supplements:
        logger.info(
            "Supplemented %d missing %s kinds: %s",
            len(supplements),
            category.value,
            ", ".join(c.kind for c in supplements),
        )
    return supplements


def prioritize_kinds(candidates: Sequence[Candidate], kinds: Sequence[str]) -> list[Candidate]:
    """Move the first candidate of each kind to the front, in *kinds* order.

    Truncating the result to any length >= len(kinds) keeps every kind that
    was present.
    """
    promoted: list[int] = []
    for kind in kinds:
        for index, candidate in enumerate(candidates):
            if candidate.kind == kind and index not in promoted:
                promoted.append(index)
                break
    head = [candidates[i] for i in promoted]
    tail = [c for i, c in enumerate(candidates) if i not in promoted]
    return [*head, *tail]
