from __future__ import annotations

import re

from recengine.candidates.models import Category, HistoryItem, UserPreference
from recengine.resolution.preference_hash import generate_preference_hash

PREFERENCE = UserPreference(category=Category.entertainment, preferences={"video": 0.8, "music": 0.4})


def test_hash_is_sixteen_hex_chars():
    value = generate_preference_hash(PREFERENCE, ["三体"])
    assert re.fullmatch(r"[0-9a-f]{16}", value)


def test_hash_is_stable():
    assert generate_preference_hash(PREFERENCE, ["a", "b"]) == generate_preference_hash(PREFERENCE, ["a", "b"])


def test_click_order_and_duplicates_do_not_matter():
    first = generate_preference_hash(PREFERENCE, ["三体", "狂飙", "漫长的季节"])
    second = generate_preference_hash(PREFERENCE, ["漫长的季节", "三体", "狂飙", "三体"])
    assert first == second


def test_titles_are_trimmed():
    assert generate_preference_hash(PREFERENCE, [" 三体 "]) == generate_preference_hash(PREFERENCE, ["三体"])


def test_history_items_and_mappings_count_as_titles():
    as_text = generate_preference_hash(PREFERENCE, ["三体", "狂飙"])
    mixed = generate_preference_hash(PREFERENCE, [HistoryItem(title="三体"), {"title": "狂飙"}, {"title": None}, 7])
    assert as_text == mixed


def test_changing_a_title_changes_the_hash():
    assert generate_preference_hash(PREFERENCE, ["三体"]) != generate_preference_hash(PREFERENCE, ["三体2"])
    assert generate_preference_hash(PREFERENCE, ["三体"]) != generate_preference_hash(PREFERENCE, ["三体", "狂飙"])


def test_changing_a_weight_changes_the_hash():
    other = UserPreference(category=Category.entertainment, preferences={"video": 0.9, "music": 0.4})
    assert generate_preference_hash(PREFERENCE, []) != generate_preference_hash(other, [])


def test_weight_order_does_not_matter():
    reordered = UserPreference(category=Category.entertainment, preferences={"music": 0.4, "video": 0.8})
    assert generate_preference_hash(PREFERENCE, []) == generate_preference_hash(reordered, [])


def test_category_changes_the_hash():
    assert generate_preference_hash(None, ["x"], Category.food) != generate_preference_hash(None, ["x"], Category.travel)


def test_explicit_category_overrides_preference_category():
    explicit = generate_preference_hash(PREFERENCE, [], Category.entertainment)
    assert explicit == generate_preference_hash(PREFERENCE, [])
    assert generate_preference_hash(PREFERENCE, [], "food") != explicit


def test_mapping_preference_matches_model():
    raw = {"category": "entertainment", "preferences": {"video": 0.8, "music": 0.4, "label": "ignored"}}
    assert generate_preference_hash(raw, ["三体"]) == generate_preference_hash(PREFERENCE, ["三体"])


def test_empty_inputs_still_hash():
    assert generate_preference_hash(None, None) == generate_preference_hash(None, [])
