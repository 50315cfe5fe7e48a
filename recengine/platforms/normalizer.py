from __future__ import annotations

import re

from ..candidates.models import Category, Client, FitnessType, Locale

# ---------------------------------------------------------------------------
# Rewrite tables (Chinese mobile app only)
# ---------------------------------------------------------------------------

FITNESS_TYPE_PLATFORMS: dict[str, str] = {
    FitnessType.equipment.value: "美团",
    FitnessType.nearby_place.value: "高德地图健身",
}

# A generic 美团 label alternates between these, keyed by index parity
FITNESS_GENERIC_ALTERNATION: dict[str, tuple[str, str]] = {
    "美团": ("B站健身", "高德地图健身"),
}

FITNESS_PLATFORM_REWRITES: dict[str, str] = {
    "B站": "B站健身",
    "哔哩哔哩": "B站健身",
}

# Map apps cannot render food results inside the app container
FOOD_MAP_PLATFORMS: frozenset[str] = frozenset({
    "高德地图",
    "百度地图",
    "腾讯地图",
    "高德地图美食",
    "百度地图美食",
    "腾讯地图美食",
})
FOOD_DISCOVERY_PLATFORM = "小红书"

_CN_FOOD_GENERIC_RE = re.compile(r"美食|餐厅|推荐|附近", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


def is_cn_mobile_scenario(locale: Locale | str, is_mobile: bool | None) -> bool:
    return locale == Locale.zh and bool(is_mobile)


def _normalize_fitness(platform: str, index: int, fitness_type: str | None) -> str:
    if fitness_type in FITNESS_TYPE_PLATFORMS:
        return FITNESS_TYPE_PLATFORMS[fitness_type]
    if platform in FITNESS_GENERIC_ALTERNATION:
        even, odd = FITNESS_GENERIC_ALTERNATION[platform]
        return even if index % 2 == 0 else odd
    return FITNESS_PLATFORM_REWRITES.get(platform, platform)


def _normalize_food(platform: str) -> str:
    if platform in FOOD_MAP_PLATFORMS:
        return FOOD_DISCOVERY_PLATFORM
    return platform


def normalize_cn_mobile_category_platform(
    category: Category | str | None,
    platform: str,
    client: Client | str,
    is_mobile: bool | None,
    locale: Locale | str,
    index: int,
    fitness_type: FitnessType | str | None = None,
) -> str:
    """Platform label to show for one item of a batch.

    Only Chinese mobile traffic inside the app is rewritten; every other
    combination returns *platform* unchanged.
    """
    if not is_cn_mobile_scenario(locale, is_mobile) or client != Client.app:
        return platform

    if isinstance(fitness_type, FitnessType):
        fitness_type = fitness_type.value

    if category == Category.fitness:
        return _normalize_fitness(platform, index, fitness_type)
    if category == Category.food:
        return _normalize_food(platform)
    return platform


def strip_cn_food_generic_terms(value: str | None) -> str:
    """Remove filler words like 美食/附近 that make map and note searches too broad."""
    stripped = _CN_FOOD_GENERIC_RE.sub(" ", value or "")
    return _WHITESPACE_RE.sub(" ", stripped).strip()
