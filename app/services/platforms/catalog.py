from urllib.parse import quote

from pydantic import BaseModel, ConfigDict

from app.models.recommendation import Category, EntertainmentType, FitnessType, Region, SubType


class Platform(BaseModel):
    """
    A destination a recommendation can link to.

    ``web`` and ``app`` are URL templates with a single ``{q}`` placeholder which
    receives the percent-encoded query. Templates without a placeholder point to a
    landing page and are flagged with ``is_search=False``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    web: str
    app: str | None = None
    aliases: tuple[str, ...] = ()
    is_search: bool = True

    def web_url(self, query: str) -> str:
        return self.web.format(q=quote(query, safe=""))

    def app_url(self, query: str) -> str | None:
        if not self.app:
            return None
        return self.app.format(q=quote(query, safe=""))


_CN_PLATFORMS = [
    # video / entertainment
    Platform(
        name="腾讯视频",
        web="https://v.qq.com/x/search/?q={q}",
        app="tenvideo://search?keyword={q}",
        aliases=("腾讯", "Tencent Video"),
    ),
    Platform(
        name="爱奇艺",
        web="https://so.iqiyi.com/so/q_{q}",
        app="iqiyi://mobile/search?keyword={q}&from=deeplink",
        aliases=("iQIYI",),
    ),
    Platform(
        name="优酷",
        web="https://so.youku.com/search_video/q_{q}",
        app="youku://search?keyword={q}",
        aliases=("Youku",),
    ),
    Platform(
        name="B站",
        web="https://search.bilibili.com/all?keyword={q}",
        app="bilibili://search?keyword={q}",
        aliases=("哔哩哔哩", "bilibili"),
    ),
    Platform(name="豆瓣", web="https://www.douban.com/search?cat=1002&q={q}", aliases=("Douban",)),
    Platform(
        name="TapTap",
        web="https://www.taptap.cn/search/{q}",
        app="taptap://taptap.cn/search?keyword={q}",
    ),
    Platform(name="Steam", web="https://store.steampowered.com/search/?term={q}&supportedlang=schinese&ndl=1"),
    Platform(
        name="网易云音乐",
        web="https://music.163.com/#/search/m/?s={q}",
        app="orpheus://search?keyword={q}",
        aliases=("网易云", "NetEase Cloud Music"),
    ),
    Platform(
        name="QQ音乐",
        web="https://y.qq.com/n/ryqq/search?w={q}",
        app="qqmusic://qq.com/ui/search?keyword={q}",
        aliases=("QQ Music",),
    ),
    Platform(
        name="酷狗音乐",
        web="https://www.kugou.com/yy/html/search.html#searchType=song&searchKeyWord={q}",
        app="kugouURL://kg/search?keyword={q}",
        aliases=("酷狗", "Kugou"),
    ),
    Platform(name="笔趣阁", web="https://m.bqgde.de/s?q={q}"),
    Platform(name="知乎", web="https://www.zhihu.com/search?type=content&q={q}", aliases=("Zhihu",)),
    # shopping
    Platform(
        name="京东",
        web="https://search.jd.com/Search?keyword={q}",
        app="openapp.jdmobile://virtual?params=%7B%22des%22%3A%22productList%22%2C%22keyWord%22%3A%22{q}%22%7D",
        aliases=("JD", "京东商城"),
    ),
    Platform(
        name="淘宝",
        web="https://s.taobao.com/search?q={q}",
        app="taobao://s.taobao.com/search?q={q}",
        aliases=("Taobao",),
    ),
    Platform(name="天猫", web="https://list.tmall.com/search_product.htm?q={q}", aliases=("Tmall",)),
    Platform(
        name="拼多多",
        web="https://mobile.yangkeduo.com/search_result.html?search_key={q}",
        app="pinduoduo://com.xunmeng.pinduoduo/search_result.html?search_key={q}",
        aliases=("Pinduoduo",),
    ),
    Platform(name="什么值得买", web="https://search.smzdm.com/?c=home&s={q}&v=b&mx_v=a", aliases=("SMZDM",)),
    Platform(name="慢慢买", web="https://s.manmanbuy.com/pc/search/result?keyword={q}"),
    # food / local
    Platform(
        name="大众点评",
        web="https://www.dianping.com/search/keyword/1/0_{q}",
        app="dianping://search?keyword={q}",
        aliases=("点评", "Dianping"),
    ),
    Platform(
        name="美团",
        web="https://www.meituan.com/s/{q}/",
        app="imeituan://www.meituan.com/search?q={q}",
        aliases=("Meituan",),
    ),
    Platform(name="下厨房", web="https://www.xiachufang.com/search/?keyword={q}&cat=1001", aliases=("Xiachufang",)),
    Platform(
        name="高德地图美食",
        web="https://www.amap.com/search?query={q}",
        app="iosamap://poi?keywords={q}",
        aliases=("高德地图", "高德", "Amap"),
    ),
    # travel
    Platform(
        name="携程",
        web="https://you.ctrip.com/globalsearch/?keyword={q}",
        app="ctrip://wireless/h5?type=search&keyword={q}&from=deeplink",
        aliases=("携程旅行", "Ctrip", "Trip.com"),
    ),
    Platform(
        name="去哪儿",
        web="https://www.qunar.com/search?searchWord={q}",
        app="qunarphone://hotel/hotelList?keyword={q}&from=deeplink",
        aliases=("Qunar",),
    ),
    Platform(
        name="马蜂窝",
        web="https://www.mafengwo.cn/search/q.php?t=sales&q={q}",
        app="mafengwo://search?keyword={q}&from=deeplink",
        aliases=("Mafengwo",),
    ),
    Platform(name="穷游", web="https://search.qyer.com/qp/?keyword={q}&tab=bbs", aliases=("Qyer",)),
    Platform(
        name="小红书",
        web="https://www.xiaohongshu.com/search_result?keyword={q}&type=note",
        app="xhsdiscover://search/result?keyword={q}&target_search=notes&source=deeplink",
        aliases=("Xiaohongshu", "RED"),
    ),
    Platform(name="飞猪", web="https://s.fliggy.com/?q={q}", aliases=("Fliggy",)),
    Platform(name="Booking.com", web="https://www.booking.com/searchresults.html?ss={q}", aliases=("Booking",)),
    # fitness
    Platform(
        name="B站健身",
        web="https://search.bilibili.com/all?keyword={q}",
        app="bilibili://search?keyword={q}",
    ),
    Platform(
        name="Keep",
        web="https://www.gotokeep.com/search?q={q}",
        app="keep://search?keyword={q}",
    ),
    Platform(
        name="优酷健身",
        web="https://so.youku.com/search_video/q_{q}",
        app="youku://search?keyword={q}",
    ),
    Platform(
        name="高德地图健身",
        web="https://www.amap.com/search?query={q}",
        app="iosamap://poi?keywords={q}",
    ),
    # generic engine
    Platform(name="百度", web="https://www.baidu.com/s?wd={q}", aliases=("Baidu",)),
]

_INTL_PLATFORMS = [
    # entertainment
    Platform(name="YouTube", web="https://www.youtube.com/results?search_query={q}", aliases=("YT",)),
    Platform(name="Netflix", web="https://www.netflix.com/search?q={q}"),
    Platform(name="IMDb", web="https://www.imdb.com/find?q={q}"),
    Platform(name="TikTok", web="https://www.tiktok.com/search?q={q}"),
    Platform(name="Steam", web="https://store.steampowered.com/search/?term={q}"),
    Platform(name="MiniReview", web="https://minireview.io/search?q={q}"),
    Platform(name="Metacritic", web="https://www.metacritic.com/search/{q}"),
    Platform(name="Rotten Tomatoes", web="https://www.rottentomatoes.com/search?search={q}"),
    Platform(name="JustWatch", web="https://www.justwatch.com/us/search?q={q}"),
    Platform(name="Medium", web="https://medium.com/search?q={q}"),
    Platform(name="Spotify", web="https://open.spotify.com/search/{q}", app="spotify:search:{q}"),
    # shopping
    Platform(name="Amazon", web="https://www.amazon.com/s?k={q}", aliases=("Amazon Shopping",)),
    Platform(name="eBay", web="https://www.ebay.com/sch/i.html?_nkw={q}"),
    Platform(name="Walmart", web="https://www.walmart.com/search?q={q}"),
    Platform(name="Target", web="https://www.target.com/s?searchTerm={q}"),
    Platform(name="Etsy", web="https://www.etsy.com/search?q={q}"),
    # food / local
    Platform(name="Allrecipes", web="https://www.allrecipes.com/search?q={q}"),
    Platform(name="Love and Lemons", web="https://www.loveandlemons.com/?s={q}"),
    Platform(name="Google Maps", web="https://www.google.com/maps/search/?api=1&query={q}", aliases=("Maps",)),
    Platform(name="OpenTable", web="https://www.opentable.com/s?term={q}"),
    Platform(name="Yelp", web="https://www.yelp.com/search?find_desc={q}"),
    Platform(
        name="Uber Eats",
        web="https://www.ubereats.com/search?q={q}&sc=SEARCH_BAR&searchType=GLOBAL_SEARCH&vertical=ALL",
        aliases=("UberEats",),
    ),
    Platform(name="DoorDash", web="https://www.doordash.com/search/store/{q}/"),
    # travel
    Platform(name="TripAdvisor", web="https://www.tripadvisor.com/Search?q={q}", aliases=("TripAdvisor Travel",)),
    Platform(name="Booking.com", web="https://www.booking.com/searchresults.html?ss={q}", aliases=("Booking",)),
    Platform(name="Agoda", web="https://www.agoda.com/search/{q}.html"),
    Platform(name="Airbnb", web="https://www.airbnb.com/s/{q}/homes"),
    Platform(name="Expedia", web="https://www.expedia.com/things-to-do/search?q={q}"),
    Platform(name="Klook", web="https://www.klook.com/search?keyword={q}"),
    Platform(name="GetYourGuide", web="https://www.getyourguide.com/s/?q={q}"),
    Platform(name="SANParks", web="https://www.sanparks.org/search?q={q}"),
    # fitness
    Platform(name="YouTube Fitness", web="https://www.youtube.com/results?search_query={q}"),
    Platform(name="Muscle & Strength", web="https://www.muscleandstrength.com/store/search?q={q}"),
    Platform(name="GarageGymReviews", web="https://www.garagegymreviews.com/?s={q}", aliases=("Garage Gym Reviews",)),
    Platform(name="FitnessVolt", web="https://fitnessvolt.com/?s={q}"),
    Platform(name="Best Buy", web="https://www.bestbuy.com/site/searchpage.jsp?st={q}"),
    Platform(name="Peloton", web="https://www.onepeloton.com/search?q={q}"),
    Platform(name="MyFitnessPal", web="https://www.myfitnesspal.com/food/search?search={q}"),
    Platform(
        name="Nike Training Club",
        web="https://www.nike.com/ntc-app",
        aliases=("NTC",),
        is_search=False,
    ),
    # generic engine
    Platform(name="Google", web="https://www.google.com/search?q={q}"),
]

_E = EntertainmentType
_F = FitnessType

BucketKey = tuple[Region, Category, SubType | None]

# Ordered rotation lists. The first entry is the default pick for the bucket.
BUCKETS: dict[BucketKey, tuple[str, ...]] = {
    # CN
    (Region.CN, Category.ENTERTAINMENT, _E.VIDEO): ("腾讯视频", "爱奇艺", "优酷", "B站", "豆瓣"),
    (Region.CN, Category.ENTERTAINMENT, _E.GAME): ("TapTap", "Steam", "B站"),
    (Region.CN, Category.ENTERTAINMENT, _E.MUSIC): ("网易云音乐", "QQ音乐", "酷狗音乐"),
    (Region.CN, Category.ENTERTAINMENT, _E.REVIEW): ("豆瓣", "笔趣阁", "知乎", "B站"),
    (Region.CN, Category.ENTERTAINMENT, None): ("腾讯视频", "豆瓣", "B站"),
    (Region.CN, Category.SHOPPING, None): ("京东", "淘宝", "拼多多", "天猫", "什么值得买", "慢慢买"),
    (Region.CN, Category.FOOD, None): ("大众点评", "美团", "下厨房", "高德地图美食"),
    (Region.CN, Category.TRAVEL, None): ("携程", "去哪儿", "马蜂窝", "穷游", "小红书", "飞猪", "Booking.com"),
    (Region.CN, Category.FITNESS, _F.NEARBY_PLACE): ("大众点评", "美团", "高德地图健身"),
    (Region.CN, Category.FITNESS, _F.TUTORIAL): ("B站健身", "Keep", "优酷健身"),
    (Region.CN, Category.FITNESS, _F.EQUIPMENT): ("什么值得买", "B站健身", "京东"),
    (Region.CN, Category.FITNESS, _F.THEORY_ARTICLE): ("知乎", "小红书"),
    (Region.CN, Category.FITNESS, None): ("B站健身", "Keep", "知乎"),
    # INTL
    (Region.INTL, Category.ENTERTAINMENT, _E.VIDEO): ("YouTube", "Netflix", "TikTok", "IMDb"),
    (Region.INTL, Category.ENTERTAINMENT, _E.GAME): ("Steam", "MiniReview", "Metacritic", "YouTube"),
    (Region.INTL, Category.ENTERTAINMENT, _E.MUSIC): ("Spotify", "YouTube"),
    (Region.INTL, Category.ENTERTAINMENT, _E.REVIEW): ("IMDb", "Metacritic", "Rotten Tomatoes", "JustWatch", "Medium"),
    (Region.INTL, Category.ENTERTAINMENT, None): ("YouTube", "IMDb", "Spotify"),
    (Region.INTL, Category.SHOPPING, None): ("Amazon", "eBay", "Walmart", "Target", "Etsy", "Google Maps"),
    (Region.INTL, Category.FOOD, None): (
        "Allrecipes",
        "Google Maps",
        "OpenTable",
        "Yelp",
        "Uber Eats",
        "DoorDash",
        "Love and Lemons",
    ),
    (Region.INTL, Category.TRAVEL, None): (
        "TripAdvisor",
        "Booking.com",
        "Agoda",
        "Airbnb",
        "Expedia",
        "Klook",
        "GetYourGuide",
        "YouTube",
        "Google Maps",
        "SANParks",
    ),
    (Region.INTL, Category.FITNESS, _F.NEARBY_PLACE): ("Google Maps", "Yelp"),
    (Region.INTL, Category.FITNESS, _F.TUTORIAL): ("YouTube Fitness", "YouTube", "Peloton", "Nike Training Club"),
    (Region.INTL, Category.FITNESS, _F.EQUIPMENT): ("Muscle & Strength", "GarageGymReviews", "Amazon", "Best Buy"),
    (Region.INTL, Category.FITNESS, _F.THEORY_ARTICLE): ("Muscle & Strength", "FitnessVolt", "Medium"),
    (Region.INTL, Category.FITNESS, None): ("YouTube Fitness", "Muscle & Strength", "MyFitnessPal"),
}

GENERIC_ENGINES: dict[Region, str] = {
    Region.CN: "百度",
    Region.INTL: "Google",
}


class PlatformCatalog:
    """Static registry of destination platforms per region and (category, sub-type) bucket."""

    def __init__(
        self,
        platforms: dict[Region, list[Platform]] | None = None,
        buckets: dict[BucketKey, tuple[str, ...]] | None = None,
        generic_engines: dict[Region, str] | None = None,
    ):
        if platforms is None:
            platforms = {Region.CN: _CN_PLATFORMS, Region.INTL: _INTL_PLATFORMS}
        self._platforms: dict[Region, dict[str, Platform]] = {
            region: {p.name: p for p in items} for region, items in platforms.items()
        }
        self._buckets = BUCKETS if buckets is None else buckets
        self._generic = GENERIC_ENGINES if generic_engines is None else generic_engines

    @staticmethod
    def region_for_locale(locale: str) -> Region:
        return Region.CN if locale == "zh" else Region.INTL

    def get(self, region: Region, name: str) -> Platform | None:
        return self._platforms.get(region, {}).get(name)

    def generic(self, region: Region) -> Platform:
        return self._platforms[region][self._generic[region]]

    def bucket(self, region: Region, category: Category, sub_type: SubType | None = None) -> tuple[str, ...]:
        """
        Rotation list for a bucket.

        Falls back from (category, sub_type) to (category, None). Empty when the
        region has no entry for the category at all.
        """
        if sub_type is not None:
            names = self._buckets.get((region, category, sub_type))
            if names:
                return names
        return self._buckets.get((region, category, None), ())

    def names_for_category(self, region: Region, category: Category) -> set[str]:
        """Every platform name an item of ``category`` may end up on, including the generic engine."""
        names = {self._generic[region]}
        for (bucket_region, bucket_category, _), bucket_names in self._buckets.items():
            if bucket_region == region and bucket_category == category:
                names.update(bucket_names)
        return names


platform_catalog = PlatformCatalog()
