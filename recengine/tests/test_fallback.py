from __future__ import annotations

from unittest.mock import patch

import pytest

from recengine.candidates.fallback import (
    generate_fallback_candidates,
    missing_kinds,
    order_by_preference,
    personalize_query,
    prioritize_kinds,
    required_kinds,
    supplement_missing_kinds,
)
from recengine.candidates.models import Candidate, Category, Client, Locale, UserPreference
from recengine.candidates.templates import TemplateBankError, get_template_pool
from recengine.candidates.text_keys import composite_key, normalize_text_key
from recengine.config import ResolutionConfig


def _c(title, **extra) -> Candidate:
    return Candidate.model_validate({"title": title, **extra})


def _kinds(items):
    return {c.kind for c in items}


# ---------------------------------------------------------------------------
# Template bank
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("locale", list(Locale))
@pytest.mark.parametrize("category", list(Category))
def test_every_template_pool_is_populated(locale, category):
    pool = get_template_pool(locale, category)
    assert pool
    assert all(normalize_text_key(c.title) for c in pool)
    assert all(c.category == category for c in pool)


def test_template_pool_returns_copies():
    first = get_template_pool(Locale.en, Category.food)
    first[0].title = "changed"
    assert get_template_pool(Locale.en, Category.food)[0].title != "changed"


# ---------------------------------------------------------------------------
# Diversity coverage
# ---------------------------------------------------------------------------

class TestFitnessFallback:
    def test_covers_required_kinds_for_count_five(self):
        result = generate_fallback_candidates(Category.fitness, Locale.en, 5)
        assert len(result) <= 5
        assert {"tutorial", "equipment", "nearby_place"} <= _kinds(result)

    def test_covers_required_kinds_for_chinese_app(self):
        result = generate_fallback_candidates(Category.fitness, Locale.zh, 5, client=Client.app)
        assert len(result) <= 5
        assert {"tutorial", "equipment", "nearby_place"} <= _kinds(result)

    def test_chinese_web_also_gets_theory_article(self):
        result = generate_fallback_candidates(Category.fitness, Locale.zh, 5, client=Client.web)
        assert {"tutorial", "equipment", "nearby_place", "theory_article"} <= _kinds(result)

    def test_required_kinds_come_first(self):
        result = generate_fallback_candidates(Category.fitness, Locale.en, 3)
        assert [c.kind for c in result] == ["nearby_place", "tutorial", "equipment"]


def test_entertainment_batch_of_four_has_every_kind():
    result = generate_fallback_candidates(Category.entertainment, Locale.en, 4)
    assert len(result) == 4
    assert _kinds(result) == {"video", "game", "music", "review"}


def test_required_kinds_table():
    assert required_kinds(Category.entertainment) == ("video", "game", "music", "review")
    assert required_kinds(Category.fitness, Locale.en, Client.app) == ("nearby_place", "tutorial", "equipment")
    assert required_kinds(Category.shopping) == ()


# ---------------------------------------------------------------------------
# Count, exclusions and history
# ---------------------------------------------------------------------------

def test_count_is_clamped():
    assert len(generate_fallback_candidates(Category.entertainment, Locale.en, 50)) <= 10
    assert len(generate_fallback_candidates(Category.shopping, Locale.en, 0)) == 1


def test_count_clamp_follows_config():
    config = ResolutionConfig(fallback_max_count=3)
    result = generate_fallback_candidates(Category.entertainment, Locale.en, 8, config=config)
    assert len(result) == 3


def test_excluded_titles_never_emitted():
    exclude = ["nearby gym options check reviews first", "Best Protein Powders & Pre-Workout Supplements"]
    result = generate_fallback_candidates(Category.fitness, Locale.en, 10, exclude_titles=exclude)
    keys = {normalize_text_key(c.title) for c in result}
    assert not keys & {normalize_text_key(t) for t in exclude}
    assert "nearby_place" not in _kinds(result)
    assert "equipment" in _kinds(result)


def test_exclusion_beyond_lookup_cap_still_enforced():
    exclude = [f"filler {i}" for i in range(100)] + ["Lo-Fi Focus Playlist (Productivity)"]
    result = generate_fallback_candidates(Category.entertainment, Locale.en, 10, exclude_titles=exclude)
    assert "Lo-Fi Focus Playlist (Productivity)" not in [c.title for c in result]


def test_history_titles_are_skipped():
    history = [{"title": "Lo-Fi Focus Playlist (Productivity)"}]
    result = generate_fallback_candidates(Category.entertainment, Locale.en, 10, user_history=history)
    titles = [c.title for c in result]
    assert "Lo-Fi Focus Playlist (Productivity)" not in titles
    assert "music" in _kinds(result)


def test_no_duplicate_composite_keys():
    result = generate_fallback_candidates(Category.entertainment, Locale.zh, 10)
    keys = [composite_key(c) for c in result]
    assert len(keys) == len(set(keys))


def test_every_fallback_has_title():
    for category in Category:
        for c in generate_fallback_candidates(category, Locale.zh, 10):
            assert c.title.strip()


# ---------------------------------------------------------------------------
# Personalization
# ---------------------------------------------------------------------------

def test_order_by_preference_puts_overlap_first():
    pool = get_template_pool(Locale.en, Category.entertainment)
    ordered = order_by_preference(pool, ["noir", "Classic"])
    assert ordered[0].title == "Classic Film Noir: Must-Watch Essentials"


def test_order_by_preference_is_stable_without_tags():
    pool = get_template_pool(Locale.en, Category.travel)
    assert [c.title for c in order_by_preference(pool, [])] == [c.title for c in pool]


def test_personalize_query_appends_shared_tag():
    candidate = _c("Lo-Fi", searchQuery="lofi focus playlist", tags=["music", "lofi"])
    assert personalize_query(candidate, ["Music"]).search_query == "lofi focus playlist Music"


def test_personalize_query_skips_tags_already_present():
    candidate = _c("Lo-Fi", searchQuery="lofi focus playlist", tags=["music", "lofi"])
    assert personalize_query(candidate, ["lofi"]).search_query == "lofi focus playlist"


def test_personalize_query_ignores_unrelated_tags():
    candidate = _c("Lo-Fi", searchQuery="lofi focus playlist", tags=["music", "lofi"])
    assert personalize_query(candidate, ["hiking"]) is candidate


def test_preference_tags_personalize_generated_queries():
    preference = UserPreference(tags=["music"])
    result = generate_fallback_candidates(Category.entertainment, Locale.en, 4, user_preference=preference)
    music = [c for c in result if c.kind == "music"]
    assert music and music[0].search_query.endswith(" music")


# ---------------------------------------------------------------------------
# Misconfigured bank
# ---------------------------------------------------------------------------

@patch("recengine.candidates.fallback.get_template_pool", side_effect=TemplateBankError("empty"))
def test_empty_bank_raises_outside_production(mock_pool):
    with pytest.raises(TemplateBankError):
        generate_fallback_candidates(Category.food, Locale.en, 3, config=ResolutionConfig(environment="test"))


@patch("recengine.candidates.fallback.get_template_pool", side_effect=TemplateBankError("empty"))
def test_empty_bank_returns_nothing_in_production(mock_pool):
    result = generate_fallback_candidates(Category.food, Locale.en, 3, config=ResolutionConfig(environment="production"))
    assert result == []


# ---------------------------------------------------------------------------
# Top-up helpers
# ---------------------------------------------------------------------------

def test_missing_kinds_reports_absent_kinds_in_order():
    batch = [_c("clip", entertainmentType="video"), _c("indie", entertainmentType="game")]
    assert missing_kinds(batch, Category.entertainment) == ["music", "review"]
    assert missing_kinds(batch, Category.shopping) == []


def test_supplement_missing_kinds_adds_only_missing():
    batch = [_c("clip", entertainmentType="video"), _c("indie", entertainmentType="game")]
    supplements = supplement_missing_kinds(batch, Category.entertainment, Locale.en)
    assert [c.kind for c in supplements] == ["music", "review"]


def test_supplement_missing_kinds_respects_batch_titles():
    batch = [
        _c("Lo-Fi Focus Playlist (Productivity)", entertainmentType="video"),
    ]
    supplements = supplement_missing_kinds(batch, Category.entertainment, Locale.en)
    assert "Lo-Fi Focus Playlist (Productivity)" not in [c.title for c in supplements]
    assert "music" in _kinds(supplements)


def test_supplement_nothing_when_complete():
    batch = [_c(k, entertainmentType=k) for k in ("video", "game", "music", "review")]
    assert supplement_missing_kinds(batch, Category.entertainment, Locale.en) == []


def test_prioritize_kinds_moves_first_of_each_kind_forward():
    music1 = _c("m1", entertainmentType="music")
    video1 = _c("v1", entertainmentType="video")
    music2 = _c("m2", entertainmentType="music")
    game1 = _c("g1", entertainmentType="game")
    result = prioritize_kinds([music1, video1, music2, game1], ("video", "game", "music", "review"))
    assert [c.title for c in result] == ["v1", "g1", "m1", "m2"]


def test_prioritize_kinds_without_kinds_keeps_order():
    batch = [_c("a"), _c("b")]
    assert prioritize_kinds(batch, ()) == batch
