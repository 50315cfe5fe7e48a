from __future__ import annotations

from recengine.candidates.dedupe import dedupe_candidates
from recengine.candidates.models import Candidate, DedupeMode
from recengine.candidates.text_keys import capped_key_set, composite_key, normalize_text_key


def _c(title, query="", **extra) -> Candidate:
    return Candidate.model_validate({"title": title, "searchQuery": query, **extra})


def _titles(items):
    return [c.title for c in items]


HISTORY = [{"title": "流浪地球2", "metadata": {"searchQuery": "流浪地球2 豆瓣 评分"}}]
EXCLUDE = ["狂飙"]


def _drama_batch():
    return [
        _c("流浪地球 2", "流浪地球2 豆瓣评分", entertainmentType="review"),
        _c("狂飙", "狂飙 全集", entertainmentType="video"),
        _c("三体", "三体 电视剧", entertainmentType="video"),
        _c("漫长的季节", "漫长的季节 评分", entertainmentType="review"),
        _c("三体", "三体 电视剧", entertainmentType="video"),
    ]


# ---------------------------------------------------------------------------
# Text keys
# ---------------------------------------------------------------------------

class TestNormalizeTextKey:
    def test_whitespace_and_case(self):
        assert normalize_text_key("  Lo Fi  Beats ") == "lofibeats"
        assert normalize_text_key("流浪地球 2") == normalize_text_key("流浪地球2")

    def test_cjk_punctuation_and_brackets(self):
        assert normalize_text_key("《狂飙》！") == "狂飙"
        assert normalize_text_key("【推荐】三体·第一季") == "推荐三体第一季"
        assert normalize_text_key('say "hi", (now)?') == "sayhinow"

    def test_backslash_removed(self):
        assert normalize_text_key("a\\b") == "ab"

    def test_total_over_bad_input(self):
        assert normalize_text_key(None) == ""
        assert normalize_text_key(42) == ""
        assert normalize_text_key("   ") == ""
        assert normalize_text_key("！？。") == ""


def test_composite_key_includes_kind():
    tutorial = _c("Core Workout", "core", fitnessType="tutorial")
    equipment = _c("Core Workout", "core", fitnessType="equipment")
    assert composite_key(tutorial) == "coreworkout|core|tutorial"
    assert composite_key(tutorial) != composite_key(equipment)


def test_composite_key_none_for_untitled():
    assert composite_key(_c("  ", "query")) is None


def test_capped_key_set_skips_empty_before_capping():
    keys = capped_key_set(["", None, "A", "  ", "B", "C"], cap=2)
    assert keys == {"a", "b"}


def test_capped_key_set_zero_cap():
    assert capped_key_set(["a"], cap=0) == set()


# ---------------------------------------------------------------------------
# Strict mode
# ---------------------------------------------------------------------------

def test_strict_drops_history_near_duplicate_and_excluded():
    result = dedupe_candidates(_drama_batch(), count=10, user_history=HISTORY, exclude_titles=EXCLUDE)
    assert _titles(result) == ["三体", "漫长的季节"]
    composite = [composite_key(c) for c in result]
    assert len(composite) == len(set(composite))


def test_strict_rejects_history_query_match():
    batch = [_c("地球流浪记", "流浪地球2 豆瓣 评分")]
    assert dedupe_candidates(batch, count=5, user_history=HISTORY) == []


def test_strict_never_exceeds_count():
    batch = [_c(f"item {i}") for i in range(10)]
    assert len(dedupe_candidates(batch, count=3)) == 3


def test_strict_does_not_backfill_from_history():
    result = dedupe_candidates(_drama_batch(), count=4, user_history=HISTORY, exclude_titles=EXCLUDE)
    assert len(result) == 2


def test_untitled_candidates_never_emitted():
    batch = [_c(""), _c("   "), _c("Real")]
    assert _titles(dedupe_candidates(batch, count=5)) == ["Real"]


def test_same_title_different_kind_both_kept():
    batch = [
        _c("Core Workout", "core", fitnessType="tutorial"),
        _c("Core Workout", "core", fitnessType="equipment"),
    ]
    assert len(dedupe_candidates(batch, count=5)) == 2


def test_non_positive_count_returns_empty():
    assert dedupe_candidates([_c("a")], count=0) == []
    assert dedupe_candidates([_c("a")], count=-1) == []


def test_input_order_preserved():
    batch = [_c("c"), _c("a"), _c("b")]
    assert _titles(dedupe_candidates(batch, count=3)) == ["c", "a", "b"]


def test_malformed_history_entries_ignored():
    history = ["not a mapping", {"title": None}, {"title": "Seen", "metadata": "junk"}]
    result = dedupe_candidates([_c("Seen"), _c("Fresh")], count=5, user_history=history)
    assert _titles(result) == ["Fresh"]


def test_lookup_cap_applies_to_exclude_list():
    batch = [_c("狂飙"), _c("三体")]
    result = dedupe_candidates(batch, count=5, exclude_titles=["other", "狂飙"], lookup_cap=1)
    assert _titles(result) == ["狂飙", "三体"]


# ---------------------------------------------------------------------------
# Fill mode
# ---------------------------------------------------------------------------

def test_fill_tops_up_with_history_overlap():
    result = dedupe_candidates(
        _drama_batch(), count=3, user_history=HISTORY, exclude_titles=EXCLUDE, mode=DedupeMode.fill
    )
    assert _titles(result) == ["三体", "漫长的季节", "流浪地球 2"]


def test_fill_never_returns_excluded_titles():
    result = dedupe_candidates(
        _drama_batch(), count=10, user_history=HISTORY, exclude_titles=EXCLUDE, mode=DedupeMode.fill
    )
    assert normalize_text_key("狂飙") not in {normalize_text_key(c.title) for c in result}


def test_fill_at_least_as_long_as_strict():
    for count in range(1, 6):
        strict = dedupe_candidates(_drama_batch(), count=count, user_history=HISTORY, exclude_titles=EXCLUDE)
        fill = dedupe_candidates(
            _drama_batch(), count=count, user_history=HISTORY, exclude_titles=EXCLUDE, mode=DedupeMode.fill
        )
        assert len(fill) >= len(strict)
        assert len(fill) <= count


def test_fill_keeps_composite_keys_unique():
    result = dedupe_candidates(_drama_batch(), count=10, user_history=HISTORY, mode=DedupeMode.fill)
    composite = [composite_key(c) for c in result]
    assert len(composite) == len(set(composite))
