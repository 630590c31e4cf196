import re

from loguru import logger
from pydantic import BaseModel, ConfigDict

from app.models.recommendation import (
    Category,
    EntertainmentType,
    FitnessType,
    LinkType,
    Locale,
    RecommendationCandidate,
    SubType,
)
from app.services.platforms.catalog import Platform, PlatformCatalog, platform_catalog

_E = EntertainmentType
_F = FitnessType

LODGING_PATTERN = re.compile(
    r"hotel|resort|hostel|motel|\blodge|\binn\b|\bspa\b|guesthouse|酒店|民宿|度假村|温泉|客栈|旅馆|住宿",
    re.IGNORECASE,
)


class QueryRule(BaseModel):
    """Suffix appended to the outbound query unless one of ``unless`` already appears in it."""

    model_config = ConfigDict(frozen=True)

    suffix: str
    unless: tuple[str, ...] = ()
    lodging_only: bool = False

    def apply(self, query: str) -> str:
        if self.lodging_only and not LODGING_PATTERN.search(query):
            return query
        lowered = query.casefold()
        if any(token.casefold() in lowered for token in self.unless):
            return query
        return f"{query} {self.suffix}"


RuleKey = tuple[Category | None, SubType | None, str]

_WATCH_ONLINE = QueryRule(suffix="在线观看", unless=("在线观看",))
_TOURS = QueryRule(suffix="tours activities", unless=("tours", "activities", "tickets"))
_FITNESS_GEAR = QueryRule(suffix="健身器材", unless=("购买", "buy", "器材", "equipment"))
_LODGING = QueryRule(suffix="hotels", unless=("hotels",), lodging_only=True)

# Lookup order: (category, sub_type, platform) then (category, None, platform)
QUERY_RULES: dict[RuleKey, QueryRule] = {
    (Category.ENTERTAINMENT, _E.VIDEO, "豆瓣"): QueryRule(suffix="豆瓣评分", unless=("豆瓣评分",)),
    (Category.ENTERTAINMENT, _E.VIDEO, "B站"): QueryRule(suffix="观看 全集", unless=("观看", "全集")),
    (Category.ENTERTAINMENT, _E.VIDEO, "爱奇艺"): _WATCH_ONLINE,
    (Category.ENTERTAINMENT, _E.VIDEO, "腾讯视频"): _WATCH_ONLINE,
    (Category.ENTERTAINMENT, _E.VIDEO, "优酷"): _WATCH_ONLINE,
    (Category.ENTERTAINMENT, _E.VIDEO, "Netflix"): QueryRule(suffix="Netflix", unless=("netflix",)),
    (Category.ENTERTAINMENT, _E.GAME, "Steam"): QueryRule(suffix="Steam", unless=("steam",)),
    (Category.ENTERTAINMENT, _E.MUSIC, "网易云音乐"): QueryRule(suffix="网易云音乐", unless=("网易云",)),
    (Category.ENTERTAINMENT, _E.REVIEW, "豆瓣"): QueryRule(suffix="影评 解析", unless=("影评", "解析", "评测")),
    (Category.ENTERTAINMENT, _E.REVIEW, "B站"): QueryRule(suffix="解析", unless=("影评", "解析", "评测")),
    (Category.ENTERTAINMENT, _E.REVIEW, "YouTube"): QueryRule(suffix="review", unless=("review", "explained")),
    (Category.FOOD, None, "TripAdvisor"): QueryRule(suffix="restaurant", unless=("restaurant", "餐厅", "美食")),
    (Category.FOOD, None, "大众点评"): QueryRule(suffix="美食", unless=("餐厅", "美食")),
    (Category.FOOD, None, "高德地图美食"): QueryRule(suffix="美食", unless=("餐厅", "美食")),
    (Category.FOOD, None, "OpenTable"): QueryRule(suffix="reservation", unless=("reservation", "booking", "table")),
    (Category.TRAVEL, None, "Booking.com"): _LODGING,
    (Category.TRAVEL, None, "Agoda"): _LODGING,
    (Category.TRAVEL, None, "Airbnb"): QueryRule(suffix="homes stays", unless=("homes", "stays"), lodging_only=True),
    (Category.TRAVEL, None, "Expedia"): _TOURS,
    (Category.TRAVEL, None, "Klook"): _TOURS,
    (Category.TRAVEL, None, "GetYourGuide"): _TOURS,
    (Category.FITNESS, None, "YouTube Fitness"): QueryRule(suffix="fitness", unless=("fitness",)),
    (Category.FITNESS, None, "高德地图健身"): QueryRule(suffix="健身房", unless=("健身",)),
    (Category.FITNESS, _F.EQUIPMENT, "京东"): _FITNESS_GEAR,
    (Category.FITNESS, _F.EQUIPMENT, "淘宝"): _FITNESS_GEAR,
}

# Lookup order: (category, sub_type, platform), (category, None, platform), (None, None, platform).
# Anything unmapped is a plain search link.
LINK_TYPES: dict[RuleKey, LinkType] = {
    # video
    (None, None, "YouTube"): LinkType.VIDEO,
    (None, None, "YouTube Fitness"): LinkType.VIDEO,
    (None, None, "TikTok"): LinkType.VIDEO,
    (None, None, "B站"): LinkType.VIDEO,
    (None, None, "B站健身"): LinkType.VIDEO,
    (None, None, "腾讯视频"): LinkType.VIDEO,
    (None, None, "爱奇艺"): LinkType.VIDEO,
    (None, None, "优酷"): LinkType.VIDEO,
    (None, None, "优酷健身"): LinkType.VIDEO,
    # movies
    (None, None, "Netflix"): LinkType.MOVIE,
    (None, None, "IMDb"): LinkType.MOVIE,
    (None, None, "豆瓣"): LinkType.MOVIE,
    (None, None, "Rotten Tomatoes"): LinkType.MOVIE,
    (None, None, "JustWatch"): LinkType.MOVIE,
    # music / games / books
    (None, None, "Spotify"): LinkType.MUSIC,
    (None, None, "网易云音乐"): LinkType.MUSIC,
    (None, None, "QQ音乐"): LinkType.MUSIC,
    (None, None, "酷狗音乐"): LinkType.MUSIC,
    (None, None, "Steam"): LinkType.GAME,
    (None, None, "TapTap"): LinkType.GAME,
    (None, None, "MiniReview"): LinkType.GAME,
    (None, None, "笔趣阁"): LinkType.BOOK,
    # articles
    (None, None, "Metacritic"): LinkType.ARTICLE,
    (None, None, "Medium"): LinkType.ARTICLE,
    (None, None, "知乎"): LinkType.ARTICLE,
    (None, None, "小红书"): LinkType.ARTICLE,
    (None, None, "马蜂窝"): LinkType.ARTICLE,
    (None, None, "穷游"): LinkType.ARTICLE,
    (None, None, "FitnessVolt"): LinkType.ARTICLE,
    (None, None, "GarageGymReviews"): LinkType.ARTICLE,
    (None, None, "Muscle & Strength"): LinkType.ARTICLE,
    # products
    (None, None, "Amazon"): LinkType.PRODUCT,
    (None, None, "eBay"): LinkType.PRODUCT,
    (None, None, "Walmart"): LinkType.PRODUCT,
    (None, None, "Target"): LinkType.PRODUCT,
    (None, None, "Etsy"): LinkType.PRODUCT,
    (None, None, "Best Buy"): LinkType.PRODUCT,
    (None, None, "京东"): LinkType.PRODUCT,
    (None, None, "淘宝"): LinkType.PRODUCT,
    (None, None, "天猫"): LinkType.PRODUCT,
    (None, None, "拼多多"): LinkType.PRODUCT,
    (None, None, "什么值得买"): LinkType.PRODUCT,
    (None, None, "慢慢买"): LinkType.PRODUCT,
    # food
    (None, None, "Allrecipes"): LinkType.RECIPE,
    (None, None, "Love and Lemons"): LinkType.RECIPE,
    (None, None, "下厨房"): LinkType.RECIPE,
    (None, None, "大众点评"): LinkType.RESTAURANT,
    (None, None, "美团"): LinkType.RESTAURANT,
    (None, None, "OpenTable"): LinkType.RESTAURANT,
    (None, None, "Yelp"): LinkType.RESTAURANT,
    (None, None, "Uber Eats"): LinkType.RESTAURANT,
    (None, None, "DoorDash"): LinkType.RESTAURANT,
    # places / lodging
    (None, None, "Google Maps"): LinkType.LOCATION,
    (None, None, "高德地图美食"): LinkType.LOCATION,
    (None, None, "高德地图健身"): LinkType.LOCATION,
    (None, None, "TripAdvisor"): LinkType.LOCATION,
    (None, None, "SANParks"): LinkType.LOCATION,
    (None, None, "Booking.com"): LinkType.HOTEL,
    (None, None, "Agoda"): LinkType.HOTEL,
    (None, None, "Airbnb"): LinkType.HOTEL,
    # apps
    (None, None, "Keep"): LinkType.APP,
    (None, None, "Peloton"): LinkType.APP,
    (None, None, "MyFitnessPal"): LinkType.APP,
    (None, None, "Nike Training Club"): LinkType.APP,
    # category / sub-type overrides
    (Category.FOOD, None, "Google Maps"): LinkType.RESTAURANT,
    (Category.ENTERTAINMENT, _E.REVIEW, "豆瓣"): LinkType.ARTICLE,
    (Category.FITNESS, _F.NEARBY_PLACE, "大众点评"): LinkType.LOCATION,
    (Category.FITNESS, _F.NEARBY_PLACE, "美团"): LinkType.LOCATION,
    (Category.FITNESS, _F.NEARBY_PLACE, "Yelp"): LinkType.LOCATION,
    (Category.FITNESS, _F.TUTORIAL, "Keep"): LinkType.COURSE,
    (Category.FITNESS, _F.TUTORIAL, "Peloton"): LinkType.COURSE,
    (Category.FITNESS, _F.EQUIPMENT, "Muscle & Strength"): LinkType.PRODUCT,
}


def _lookup(table: dict, category: Category | None, sub_type: SubType | None, platform: str, wildcard: bool):
    keys = [(category, sub_type, platform), (category, None, platform)]
    if wildcard:
        keys.append((None, None, platform))
    for key in keys:
        if key in table:
            return table[key]
    return None


class SynthesizedLink(BaseModel):
    url: str
    display_name: str
    link_type: LinkType
    query: str
    is_search: bool = True
    app_url: str | None = None


class LinkSynthesizer:
    """
    Builds the outbound link for one item on its chosen platform.

    Never raises: a platform that is not registered for the locale's region is
    replaced by the region's generic search engine.
    """

    def __init__(self, catalog: PlatformCatalog = platform_catalog):
        self.catalog = catalog

    def resolve_platform(self, name: str, locale: Locale) -> Platform:
        region = self.catalog.region_for_locale(locale)
        platform = self.catalog.get(region, name) if name else None
        if platform is None:
            platform = self.catalog.generic(region)
            logger.debug(f"Platform '{name}' not registered for {region.value}, degrading to {platform.name}")
        return platform

    @staticmethod
    def augment_query(query: str, category: Category | None, sub_type: SubType | None, platform: str) -> str:
        rule = _lookup(QUERY_RULES, category, sub_type, platform, wildcard=False)
        return rule.apply(query) if rule else query

    @staticmethod
    def link_type_for(category: Category | None, sub_type: SubType | None, platform: str) -> LinkType:
        return _lookup(LINK_TYPES, category, sub_type, platform, wildcard=True) or LinkType.SEARCH

    def synthesize(
        self,
        item: RecommendationCandidate,
        platform: str,
        locale: Locale,
        client: str = "web",
    ) -> SynthesizedLink:
        resolved = self.resolve_platform(platform, locale)
        base_query = item.effective_query
        query = self.augment_query(base_query, item.category, item.sub_type, resolved.name)

        return SynthesizedLink(
            url=resolved.web_url(query),
            display_name=resolved.name,
            link_type=self.link_type_for(item.category, item.sub_type, resolved.name),
            query=query,
            is_search=resolved.is_search,
            app_url=resolved.app_url(query) if client == "app" else None,
        )
