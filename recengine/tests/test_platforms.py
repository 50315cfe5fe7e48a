from __future__ import annotations

import pytest

from recengine.candidates.models import Category, Client, FitnessType, Locale
from recengine.platforms.normalizer import (
    is_cn_mobile_scenario,
    normalize_cn_mobile_category_platform,
    strip_cn_food_generic_terms,
)
from recengine.platforms.provider_mapping import map_search_platform_to_provider


def _cn_app(category, platform, index=0, fitness_type=None):
    return normalize_cn_mobile_category_platform(
        category=category,
        platform=platform,
        client=Client.app,
        is_mobile=True,
        locale=Locale.zh,
        index=index,
        fitness_type=fitness_type,
    )


# ---------------------------------------------------------------------------
# Identity outside the Chinese mobile app
# ---------------------------------------------------------------------------

PLATFORMS = ["美团", "B站", "高德地图", "百度地图美食", "京东", "YouTube"]


@pytest.mark.parametrize("category", list(Category))
@pytest.mark.parametrize("platform", PLATFORMS)
@pytest.mark.parametrize(
    "locale,is_mobile,client",
    [
        (Locale.en, True, Client.app),
        (Locale.zh, False, Client.app),
        (Locale.zh, None, Client.app),
        (Locale.zh, True, Client.web),
    ],
)
def test_identity_outside_cn_mobile_app(category, platform, locale, is_mobile, client):
    for index in range(2):
        for fitness_type in (None, FitnessType.equipment, FitnessType.nearby_place):
            result = normalize_cn_mobile_category_platform(
                category=category,
                platform=platform,
                client=client,
                is_mobile=is_mobile,
                locale=locale,
                index=index,
                fitness_type=fitness_type,
            )
            assert result == platform


def test_is_cn_mobile_scenario():
    assert is_cn_mobile_scenario("zh", True)
    assert not is_cn_mobile_scenario("zh", False)
    assert not is_cn_mobile_scenario("en", True)


# ---------------------------------------------------------------------------
# Fitness
# ---------------------------------------------------------------------------

class TestFitnessRewrites:
    def test_equipment_goes_to_shopping_platform(self):
        assert _cn_app(Category.fitness, "京东", fitness_type="equipment") == "美团"

    def test_nearby_place_goes_to_map_overlay(self):
        assert _cn_app(Category.fitness, "大众点评", fitness_type=FitnessType.nearby_place) == "高德地图健身"

    def test_generic_platform_alternates_by_index(self):
        assert _cn_app(Category.fitness, "美团", index=0) == "B站健身"
        assert _cn_app(Category.fitness, "美团", index=1) == "高德地图健身"
        assert _cn_app(Category.fitness, "美团", index=2) == "B站健身"

    def test_alternation_is_deterministic(self):
        assert [_cn_app(Category.fitness, "美团", index=3) for _ in range(5)] == ["高德地图健身"] * 5

    def test_bilibili_labels_become_fitness_channel(self):
        assert _cn_app(Category.fitness, "B站", index=1) == "B站健身"
        assert _cn_app(Category.fitness, "哔哩哔哩") == "B站健身"

    def test_specific_video_platform_passes_through(self):
        assert _cn_app(Category.fitness, "B站健身", index=1) == "B站健身"
        assert _cn_app(Category.fitness, "Keep") == "Keep"


# ---------------------------------------------------------------------------
# Food
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("platform", ["高德地图", "百度地图", "腾讯地图", "百度地图美食", "腾讯地图美食", "高德地图美食"])
def test_food_map_platforms_become_social_discovery(platform):
    assert _cn_app(Category.food, platform) == "小红书"


def test_food_non_map_platform_passes_through():
    assert _cn_app(Category.food, "大众点评") == "大众点评"


@pytest.mark.parametrize("category", [Category.shopping, Category.travel, Category.entertainment])
def test_other_categories_pass_through(category):
    assert _cn_app(category, "高德地图") == "高德地图"
    assert _cn_app(category, "美团") == "美团"


def test_strip_cn_food_generic_terms():
    assert strip_cn_food_generic_terms("附近 川菜 美食 推荐") == "川菜"
    assert strip_cn_food_generic_terms("回锅肉餐厅") == "回锅肉"
    assert strip_cn_food_generic_terms(None) == ""


# ---------------------------------------------------------------------------
# Provider mapping
# ---------------------------------------------------------------------------

def test_cn_scenario_labels_map_to_providers():
    assert map_search_platform_to_provider("高德地图健身", "zh") == "高德地图"
    assert map_search_platform_to_provider("B站健身", Locale.zh) == "B站"
    assert map_search_platform_to_provider("小红书美食", "zh") == "小红书"


def test_intl_labels_map_to_providers():
    assert map_search_platform_to_provider("Amazon Shopping", "en") == "Amazon"
    assert map_search_platform_to_provider("NTC", "en") == "Nike Training Club"


def test_unknown_labels_pass_through():
    assert map_search_platform_to_provider("Something New", "en") == "Something New"
    assert map_search_platform_to_provider("B站健身", "en") == "B站健身"
