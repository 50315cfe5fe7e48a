from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

# encodeURIComponent-compatible: letters, digits and -_.!~*'() stay literal
_QUERY_SAFE = "!~*'()"


def encode_query(query: str) -> str:
    return quote(query, safe=_QUERY_SAFE)


@dataclass(frozen=True)
class ProviderDefinition:
    """One outbound provider. URL templates carry a ``{q}`` placeholder."""

    id: str
    display_zh: str
    display_en: str
    domains: tuple[str, ...]
    has_app: bool
    web_template: str
    universal_template: str | None = None
    query_suffix: str = ""

    def display_name(self, locale: str) -> str:
        return self.display_zh if locale == "zh" else self.display_en

    def _render(self, template: str, query: str) -> str:
        return template.replace("{q}", encode_query(f"{query}{self.query_suffix}"))

    def web_link(self, query: str) -> str:
        return self._render(self.web_template, query)

    def universal_link(self, query: str) -> str | None:
        if self.universal_template is None:
            return None
        return self._render(self.universal_template, query)


_GOOGLE_MAPS = "https://www.google.com/maps/search/?api=1&query={q}"
_GOOGLE_SEARCH = "https://www.google.com/search?q={q}"
_YOUTUBE_SEARCH = "https://www.youtube.com/results?search_query={q}"
_BAIDU_SEARCH = "https://www.baidu.com/s?wd={q}"
_BILIBILI_SEARCH = "https://search.bilibili.com/all?keyword={q}"
_BAIDU_MAP_SEARCH = "https://map.baidu.com/search/{q}"
_TENCENT_MAP_SEARCH = "https://map.qq.com/m/search?keyword={q}"
_JD_DAOJIA_SEARCH = "https://daojia.jd.com/html/index.html?keyword={q}"

# ---------------------------------------------------------------------------
# Mainland China providers
# ---------------------------------------------------------------------------

_CN_PROVIDERS: tuple[ProviderDefinition, ...] = (
    ProviderDefinition("百度", "百度", "Baidu", ("baidu.com",), True, _BAIDU_SEARCH, _BAIDU_SEARCH),
    ProviderDefinition("B站", "哔哩哔哩", "Bilibili", ("bilibili.com",), True, _BILIBILI_SEARCH, _BILIBILI_SEARCH),
    ProviderDefinition(
        "高德地图", "高德地图", "Amap", ("amap.com",), True,
        "https://www.amap.com/search?query={q}", "https://uri.amap.com/search?keyword={q}",
    ),
    ProviderDefinition("百度地图", "百度地图", "Baidu Maps", ("map.baidu.com",), True, _BAIDU_MAP_SEARCH, _BAIDU_MAP_SEARCH),
    ProviderDefinition("腾讯地图", "腾讯地图", "Tencent Maps", ("map.qq.com",), True, _TENCENT_MAP_SEARCH, _TENCENT_MAP_SEARCH),
    ProviderDefinition(
        "腾讯视频", "腾讯视频", "Tencent Video", ("v.qq.com",), True,
        "https://v.qq.com/x/search/?q={q}", "https://v.qq.com/x/search/?q={q}",
    ),
    ProviderDefinition(
        "爱奇艺", "爱奇艺", "iQIYI", ("iqiyi.com",), True,
        "https://so.iqiyi.com/so/q_{q}", "https://so.iqiyi.com/so/q_{q}",
    ),
    ProviderDefinition(
        "优酷", "优酷", "Youku", ("youku.com",), True,
        "https://so.youku.com/search_video/q_{q}", "https://so.youku.com/search_video/q_{q}",
    ),
    ProviderDefinition("豆瓣", "豆瓣", "Douban", ("douban.com",), False, "https://www.douban.com/search?cat=1002&q={q}"),
    ProviderDefinition("QQ音乐", "QQ音乐", "QQ Music", ("y.qq.com",), True, "https://y.qq.com/n/ryqq/search?w={q}"),
    ProviderDefinition(
        "酷狗音乐", "酷狗音乐", "Kugou Music", ("kugou.com",), True,
        "https://www.kugou.com/yy/html/search.html#searchType=song&searchKeyWord={q}",
    ),
    ProviderDefinition("网易云音乐", "网易云音乐", "NetEase Cloud Music", ("music.163.com",), True, "https://music.163.com/#/search/m/?s={q}"),
    ProviderDefinition(
        "TapTap", "TapTap", "TapTap", ("taptap.cn", "taptap.com"), True,
        "https://www.taptap.cn/search/{q}", "https://www.taptap.cn/search/{q}",
    ),
    ProviderDefinition(
        "小红书", "小红书", "Xiaohongshu", ("xiaohongshu.com",), True,
        "https://www.xiaohongshu.com/search_result?keyword={q}&type=note",
    ),
    ProviderDefinition("大众点评", "大众点评", "Dianping", ("dianping.com",), True, "https://www.dianping.com/search/keyword/1/0_{q}"),
    ProviderDefinition("下厨房", "下厨房", "Xiachufang", ("xiachufang.com",), True, "https://www.xiachufang.com/search/?keyword={q}&cat=1001"),
    ProviderDefinition(
        "知乎", "知乎", "Zhihu", ("zhihu.com",), True,
        "https://www.zhihu.com/search?type=content&q={q}", "https://www.zhihu.com/search?type=content&q={q}",
    ),
    ProviderDefinition(
        "慢慢买", "慢慢买", "Manmanbuy", ("manmanbuy.com",), False,
        "https://s.manmanbuy.com/pc/search/result?keyword={q}&btnSearch=%E6%90%9C%E7%B4%A2",
    ),
    ProviderDefinition("淘宝", "淘宝", "Taobao", ("taobao.com",), True, "https://s.taobao.com/search?q={q}"),
    ProviderDefinition("京东", "京东", "JD", ("jd.com",), True, "https://search.jd.com/Search?keyword={q}"),
    ProviderDefinition("拼多多", "拼多多", "Pinduoduo", ("yangkeduo.com",), True, "https://mobile.yangkeduo.com/search_result.html?search_key={q}"),
    ProviderDefinition("什么值得买", "什么值得买", "SMZDM", ("smzdm.com",), True, "https://search.smzdm.com/?c=home&s={q}&v=b&mx_v=a"),
    ProviderDefinition("苏宁易购", "苏宁易购", "Suning", ("suning.com",), True, "https://search.suning.com/{q}/"),
    ProviderDefinition("唯品会", "唯品会", "VIP.com", ("vip.com",), True, "https://category.vip.com/suggest.php?keyword={q}"),
    ProviderDefinition("1688", "1688", "1688", ("1688.com",), True, "https://s.1688.com/selloffer/offer_search.htm?keywords={q}"),
    ProviderDefinition("美团", "美团", "Meituan", ("meituan.com",), True, "https://www.meituan.com/s/{q}/"),
    ProviderDefinition("美团外卖", "美团外卖", "Meituan Waimai", ("meituan.com",), True, "https://waimai.meituan.com/search?query={q}"),
    ProviderDefinition("饿了么", "饿了么", "Eleme", ("ele.me",), True, "https://www.ele.me/search/{q}"),
    ProviderDefinition("京东到家", "京东到家", "JD Daojia", ("jd.com",), True, _JD_DAOJIA_SEARCH),
    ProviderDefinition("京东秒送", "京东秒送", "JD Instant Delivery", ("jd.com",), True, _JD_DAOJIA_SEARCH),
    ProviderDefinition("淘宝闪购", "淘宝闪购", "Taobao Now", ("taobao.com",), True, "https://s.taobao.com/search?q={q}"),
    ProviderDefinition("Keep", "Keep", "Keep", ("gotokeep.com",), True, "https://www.gotokeep.com/search?q={q}"),
    ProviderDefinition("携程", "携程", "Ctrip", ("ctrip.com",), True, "https://you.ctrip.com/globalsearch/?keyword={q}"),
    ProviderDefinition("去哪儿", "去哪儿", "Qunar", ("qunar.com",), True, "https://www.qunar.com/search?searchWord={q}"),
    ProviderDefinition("马蜂窝", "马蜂窝", "Mafengwo", ("mafengwo.cn",), True, "https://www.mafengwo.cn/search/q.php?t=sales&q={q}"),
    ProviderDefinition("穷游", "穷游", "Qyer", ("qyer.com",), True, "https://search.qyer.com/qp/?keyword={q}&tab=bbs"),
)

# ---------------------------------------------------------------------------
# International providers
# ---------------------------------------------------------------------------

_INTL_PROVIDERS: tuple[ProviderDefinition, ...] = (
    ProviderDefinition("Google", "Google", "Google", ("google.com",), True, _GOOGLE_SEARCH, _GOOGLE_SEARCH),
    ProviderDefinition("Google Maps", "Google Maps", "Google Maps", ("google.com",), True, _GOOGLE_MAPS, _GOOGLE_MAPS),
    ProviderDefinition("YouTube", "YouTube", "YouTube", ("youtube.com",), True, _YOUTUBE_SEARCH, _YOUTUBE_SEARCH),
    ProviderDefinition(
        "YouTube Fitness", "YouTube", "YouTube", ("youtube.com",), True,
        _YOUTUBE_SEARCH, _YOUTUBE_SEARCH, query_suffix=" fitness",
    ),
    ProviderDefinition(
        "Steam", "Steam", "Steam", ("steampowered.com",), True,
        "https://store.steampowered.com/search/?term={q}&supportedlang=schinese&ndl=1",
    ),
    ProviderDefinition(
        "Uber Eats", "Uber Eats", "Uber Eats", ("ubereats.com", "uber.com"), True,
        "https://www.ubereats.com/search?q={q}&sc=SEARCH_BAR&searchType=GLOBAL_SEARCH&vertical=ALL",
    ),
    ProviderDefinition("DoorDash", "DoorDash", "DoorDash", ("doordash.com",), True, "https://www.doordash.com/search/store/{q}/"),
    ProviderDefinition("Yelp", "Yelp", "Yelp", ("yelp.com",), True, "https://www.yelp.com/search?find_desc={q}"),
    ProviderDefinition("OpenTable", "OpenTable", "OpenTable", ("opentable.com",), True, "https://www.opentable.com/s?term={q}"),
    ProviderDefinition("Amazon", "Amazon", "Amazon", ("amazon.com",), True, "https://www.amazon.com/s?k={q}"),
    ProviderDefinition("eBay", "eBay", "eBay", ("ebay.com",), True, "https://www.ebay.com/sch/i.html?_nkw={q}"),
    ProviderDefinition("Walmart", "Walmart", "Walmart", ("walmart.com",), True, "https://www.walmart.com/search?q={q}"),
    ProviderDefinition("Target", "Target", "Target", ("target.com",), True, "https://www.target.com/s?searchTerm={q}"),
    ProviderDefinition("Netflix", "Netflix", "Netflix", ("netflix.com",), True, "https://www.netflix.com/search?q={q}"),
    ProviderDefinition("IMDb", "IMDb", "IMDb", ("imdb.com",), False, "https://www.imdb.com/find?q={q}"),
    ProviderDefinition(
        "Rotten Tomatoes", "Rotten Tomatoes", "Rotten Tomatoes", ("rottentomatoes.com",), False,
        "https://www.rottentomatoes.com/search?search={q}",
    ),
    ProviderDefinition("Metacritic", "Metacritic", "Metacritic", ("metacritic.com",), False, "https://www.metacritic.com/search/{q}"),
    ProviderDefinition("TripAdvisor", "TripAdvisor", "TripAdvisor", ("tripadvisor.com",), True, "https://www.tripadvisor.com/Search?q={q}"),
    ProviderDefinition("Booking.com", "Booking.com", "Booking.com", ("booking.com",), True, "https://www.booking.com/searchresults.html?ss={q}"),
    ProviderDefinition("Agoda", "Agoda", "Agoda", ("agoda.com",), True, "https://www.agoda.com/search/{q}.html"),
    ProviderDefinition("Airbnb", "Airbnb", "Airbnb", ("airbnb.com",), True, "https://www.airbnb.com/s/{q}/homes"),
    ProviderDefinition("MyFitnessPal", "MyFitnessPal", "MyFitnessPal", ("myfitnesspal.com",), True, "https://www.myfitnesspal.com/food/search?search={q}"),
    ProviderDefinition("Peloton", "Peloton", "Peloton", ("onepeloton.com",), True, "https://www.onepeloton.com/search?q={q}"),
    ProviderDefinition(
        "Muscle & Strength", "Muscle & Strength", "Muscle & Strength", ("muscleandstrength.com",), False,
        "https://www.muscleandstrength.com/store/search?q={q}",
    ),
    ProviderDefinition("Love and Lemons", "Love and Lemons", "Love and Lemons", ("loveandlemons.com",), False, "https://www.loveandlemons.com/?s={q}"),
    ProviderDefinition("SANParks", "SANParks", "SANParks", ("sanparks.org",), False, "https://www.sanparks.org/search?q={q}"),
    ProviderDefinition("Spotify", "Spotify", "Spotify", ("spotify.com",), True, "https://open.spotify.com/search/{q}"),
    ProviderDefinition(
        "TikTok", "TikTok", "TikTok", ("tiktok.com",), True,
        "https://www.tiktok.com/search?q={q}", "https://www.tiktok.com/search?q={q}",
    ),
    ProviderDefinition("JustWatch", "JustWatch", "JustWatch", ("justwatch.com",), True, "https://www.justwatch.com/us/search?q={q}"),
    ProviderDefinition("Medium", "Medium", "Medium", ("medium.com",), False, "https://medium.com/search?q={q}"),
    ProviderDefinition("Etsy", "Etsy", "Etsy", ("etsy.com",), True, "https://www.etsy.com/search?q={q}"),
    ProviderDefinition("Slickdeals", "Slickdeals", "Slickdeals", ("slickdeals.net",), True, "https://slickdeals.net/newsearch.php?q={q}"),
    ProviderDefinition("Pinterest", "Pinterest", "Pinterest", ("pinterest.com",), True, "https://www.pinterest.com/search/pins/?q={q}"),
    ProviderDefinition("Fantuan Delivery", "饭团外卖", "Fantuan Delivery", ("fantuanorder.com",), True, "https://www.fantuanorder.com"),
    ProviderDefinition("HungryPanda", "HungryPanda", "HungryPanda", ("hungrypanda.co",), True, "https://www.hungrypanda.co/"),
    ProviderDefinition("Wanderlog", "Wanderlog", "Wanderlog", ("wanderlog.com",), True, "https://wanderlog.com/search?q={q}"),
    ProviderDefinition("Visit A City", "Visit A City", "Visit A City", ("visitacity.com",), False, "https://www.visitacity.com/en/search?q={q}"),
    ProviderDefinition("GetYourGuide", "GetYourGuide", "GetYourGuide", ("getyourguide.com",), True, "https://www.getyourguide.com/s/?q={q}"),
    ProviderDefinition("Nike Training Club", "Nike Training Club", "Nike Training Club", ("nike.com",), True, "https://www.nike.com/ntc-app"),
    ProviderDefinition("Strava", "Strava", "Strava", ("strava.com",), True, "https://www.strava.com/search"),
    ProviderDefinition("Nike Run Club", "Nike Run Club", "Nike Run Club", ("nike.com",), True, "https://www.nike.com/nrc-app"),
    ProviderDefinition("Hevy", "Hevy", "Hevy", ("hevyapp.com",), True, "https://www.hevyapp.com"),
    ProviderDefinition("Strong", "Strong", "Strong", ("strong.app",), True, "https://www.strong.app"),
    ProviderDefinition("Down Dog", "Down Dog", "Down Dog", ("downdogapp.com",), True, "https://www.downdogapp.com"),
)

PROVIDERS: dict[str, ProviderDefinition] = {p.id: p for p in (*_CN_PROVIDERS, *_INTL_PROVIDERS)}

# Providers always reachable in each region; used whenever nothing better survives
GENERIC_SEARCH_PROVIDER: dict[str, str] = {"CN": "百度", "INTL": "Google"}
GENERIC_SEARCH_HOMEPAGES: dict[str, str] = {"百度": "https://www.baidu.com/", "Google": "https://www.google.com/"}

MAP_PROVIDERS: frozenset[str] = frozenset({"Google Maps", "高德地图", "百度地图"})
VIDEO_PROVIDERS: frozenset[str] = frozenset({"YouTube", "B站", "YouTube Fitness"})

FALLBACK_PROVIDERS: dict[tuple[str, str], tuple[str, ...]] = {
    ("CN", "food"): ("高德地图", "百度地图", "百度", "B站"),
    ("CN", "shopping"): ("百度", "高德地图", "百度地图", "B站"),
    ("CN", "entertainment"): ("B站", "百度"),
    ("CN", "travel"): ("高德地图", "百度地图", "百度", "B站"),
    ("CN", "fitness"): ("Keep", "B站", "百度", "高德地图"),
    ("INTL", "food"): ("Google Maps", "Google", "YouTube"),
    ("INTL", "shopping"): ("Google", "YouTube", "Google Maps"),
    ("INTL", "entertainment"): ("YouTube", "Google"),
    ("INTL", "travel"): ("Google Maps", "Google", "YouTube"),
    ("INTL", "fitness"): ("YouTube Fitness", "Google", "Google Maps"),
}

# App store search pages offered for providers that ship an app
APP_STORE_TEMPLATES: dict[str, tuple[tuple[str, str], ...]] = {
    "CN": (
        ("App Store", "https://apps.apple.com/search?term={q}"),
        ("应用宝", "https://sj.qq.com/myapp/search.htm?kw={q}"),
    ),
    "INTL": (
        ("App Store", "https://apps.apple.com/search?term={q}"),
        ("Google Play", "https://play.google.com/store/search?q={q}&c=apps"),
    ),
}


def fallback_providers(category: str, region: str) -> tuple[str, ...]:
    return FALLBACK_PROVIDERS.get((region, category), (GENERIC_SEARCH_PROVIDER.get(region, "Google"),))


def find_provider(name: str | None) -> ProviderDefinition | None:
    """Look a provider up by id, then by zh/en display name (case-insensitive)."""
    if not name:
        return None
    direct = PROVIDERS.get(name)
    if direct is not None:
        return direct
    wanted = name.strip().lower()
    for provider in PROVIDERS.values():
        if wanted in (provider.id.lower(), provider.display_zh.lower(), provider.display_en.lower()):
            return provider
    return None
