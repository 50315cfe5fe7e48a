from __future__ import annotations

from ..candidates.models import Locale

# Scenario-specific labels shown to Chinese users, keyed to the provider they search on
CN_PLATFORM_PROVIDERS: dict[str, str] = {
    "高德地图美食": "高德地图",
    "百度地图美食": "百度地图",
    "腾讯地图美食": "腾讯地图",
    "京东秒送": "京东秒送",
    "淘宝闪购": "淘宝闪购",
    "美团外卖": "美团外卖",
    "高德地图旅游": "高德地图",
    "百度地图旅游": "百度地图",
    "高德地图健身": "高德地图",
    "百度地图健身": "百度地图",
    "腾讯地图健身": "腾讯地图",
    "百度美食": "百度",
    "百度健身": "百度",
    "B站健身": "B站",
    "腾讯视频健身": "腾讯视频",
    "优酷健身": "优酷",
    "小红书美食": "小红书",
    "小红书购物": "小红书",
}

INTL_PLATFORM_PROVIDERS: dict[str, str] = {
    "TripAdvisor Travel": "TripAdvisor",
    "YouTube Fitness": "YouTube Fitness",
    "Fantuan Delivery": "Fantuan Delivery",
    "饭团外卖": "Fantuan Delivery",
    "NTC": "Nike Training Club",
    "NRC": "Nike Run Club",
    "Amazon Shopping": "Amazon",
}


def map_search_platform_to_provider(platform: str, locale: Locale | str) -> str:
    """Provider id for a display label; unknown labels pass through unchanged."""
    table = CN_PLATFORM_PROVIDERS if locale == Locale.zh else INTL_PLATFORM_PROVIDERS
    return table.get(platform, platform)
