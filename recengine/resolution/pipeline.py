from __future__ import annotations

import logging

from ..candidates.dedupe import dedupe_candidates
from ..candidates.fallback import (
    generate_fallback_candidates,
    prioritize_kinds,
    required_kinds,
    supplement_missing_kinds,
)
from ..candidates.models import Candidate, Category, DedupeMode, Locale, parse_candidates, parse_history
from ..candidates.text_keys import normalize_text_key
from ..config import DEFAULT_RESOLUTION_CONFIG, ResolutionConfig
from ..outbound.resolver import resolve_candidate_link
from ..platforms.normalizer import normalize_cn_mobile_category_platform, strip_cn_food_generic_terms
from ..platforms.provider_mapping import map_search_platform_to_provider
from .cache import CacheScope, cache_get, cache_set
from .models import ResolutionSource, ResolveRequest, ResolveResponse
from .preference_hash import generate_preference_hash

logger = logging.getLogger(__name__)


def _without_excluded(candidates: list[Candidate], exclude_titles: list) -> list[Candidate]:
    excluded = {normalize_text_key(t) for t in exclude_titles}
    excluded.discard("")
    return [c for c in candidates if normalize_text_key(c.title) not in excluded]


def _link_query(candidate: Candidate, category: Category, locale: Locale) -> str:
    query = candidate.search_query.strip() or candidate.title.strip()
    if category == Category.food and locale == Locale.zh:
        return strip_cn_food_generic_terms(query) or query
    return query


def _finalize(candidate: Candidate, index: int, request: ResolveRequest) -> Candidate:
    category = request.category
    platform = normalize_cn_mobile_category_platform(
        category=category,
        platform=candidate.platform,
        client=request.client,
        is_mobile=request.is_mobile,
        locale=request.locale,
        index=index,
        fitness_type=candidate.fitness_type,
    )
    provider = map_search_platform_to_provider(platform, request.locale)
    link = resolve_candidate_link(
        title=candidate.title,
        query=_link_query(candidate, category, request.locale),
        category=category.value,
        locale=request.locale.value,
        region=request.resolved_region.value,
        provider=provider or None,
    )
    return candidate.model_copy(
        update={
            "category": category,
            "platform": platform,
            "link": link,
            "link_type": link.primary.type.value,
        }
    )


def resolve_recommendations(
    request: ResolveRequest,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> ResolveResponse:
    category, locale, count = request.category, request.locale, request.count
    region = request.resolved_region
    preference_hash = generate_preference_hash(request.user_preference, request.recent_interactions, category)

    # 1. Cached batch for the same preference state
    use_cache = not request.skip_cache and (
        request.user_preference is not None or bool(request.recent_interactions)
    )
    scope = CacheScope.from_request(request)
    if use_cache:
        cached = cache_get(scope, preference_hash, ttl=config.cache_ttl_seconds)
        if cached is not None:
            logger.info("Cache hit for %s (%s)", scope.label, preference_hash)
            return ResolveResponse(
                recommendations=_without_excluded(cached, request.exclude_titles),
                source=ResolutionSource.cache,
                preference_hash=preference_hash,
                region=region,
            )

    # 2. Validate upstream records and drop duplicates / seen items
    parsed = [
        c if c.category is not None else c.model_copy(update={"category": category})
        for c in parse_candidates(request.candidates)
    ]
    # Dedupe only consults the first lookup_cap exclude keys; the full list always applies
    parsed = _without_excluded(parsed, request.exclude_titles)
    history = parse_history(request.user_history)
    fresh = dedupe_candidates(
        parsed,
        count=count,
        user_history=history,
        exclude_titles=request.exclude_titles,
        mode=DedupeMode.strict,
        lookup_cap=config.lookup_cap,
    )

    # 3. Fill in required kinds the batch lacks, then keep them ahead of truncation
    kinds = required_kinds(category, locale, request.client)
    supplements: list[Candidate] = []
    if kinds and count >= len(kinds):
        supplements = supplement_missing_kinds(
            fresh,
            category,
            locale,
            client=request.client,
            exclude_titles=request.exclude_titles,
            user_history=history,
            user_preference=request.user_preference,
            config=config,
        )
    batch = prioritize_kinds([*fresh, *supplements], kinds)[:count]

    # 4. Top up with template candidates when still short
    if len(batch) < count:
        batch += generate_fallback_candidates(
            category,
            locale,
            count - len(batch),
            client=request.client,
            exclude_titles=[*request.exclude_titles, *(c.title for c in batch)],
            user_history=history,
            user_preference=request.user_preference,
            config=config,
        )

    # 5. Prefer repeats from history over an empty slot
    batch = dedupe_candidates(
        [*batch, *parsed],
        count=count,
        user_history=history,
        exclude_titles=request.exclude_titles,
        mode=DedupeMode.fill,
        lookup_cap=config.lookup_cap,
    )

    # 6. Region-correct platform labels and allow-listed links
    resolved = [_finalize(c, i, request) for i, c in enumerate(batch)]

    upstream = {id(c) for c in parsed}
    source = ResolutionSource.ai if any(id(c) in upstream for c in batch) else ResolutionSource.fallback
    logger.info(
        "Resolved %d/%d %s candidates (%d upstream, source=%s)",
        len(resolved),
        count,
        category.value,
        len(parsed),
        source.value,
    )

    if use_cache:
        cache_set(scope, preference_hash, resolved)

    return ResolveResponse(
        recommendations=resolved,
        source=source,
        preference_hash=preference_hash,
        region=region,
    )
