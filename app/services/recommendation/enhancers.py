import re
from collections.abc import Callable

from app.models.recommendation import Category, FitnessType, Locale, RecommendationCandidate

CandidateEnhancer = Callable[[RecommendationCandidate, Locale], RecommendationCandidate]

# ---------------------------------------------------------------------------
# Travel
# ---------------------------------------------------------------------------

_TRAVEL_SEPARATORS = re.compile(r"[·•,，:：|]")
_TRAVEL_SUFFIXES = ("旅游攻略", "游玩指南", "一日游", "两日游", "Travel Guide", "Day Trip", "Experience", "Tour")
_GENERIC_TRAVEL_TAGS = {"旅行", "旅游", "travel", "trip"}

COUNTRIES = {
    "中国": "China",
    "日本": "Japan",
    "韩国": "South Korea",
    "泰国": "Thailand",
    "葡萄牙": "Portugal",
    "法国": "France",
    "意大利": "Italy",
    "英国": "United Kingdom",
    "美国": "United States",
    "印度尼西亚": "Indonesia",
    "新加坡": "Singapore",
}

ENGLISH_PLACE_NAMES = {
    "北京": "Beijing",
    "上海": "Shanghai",
    "西安": "Xi'an",
    "杭州": "Hangzhou",
    "成都": "Chengdu",
    "东京": "Tokyo",
    "京都": "Kyoto",
    "大阪": "Osaka",
    "首尔": "Seoul",
    "曼谷": "Bangkok",
    "巴厘岛": "Bali",
    "普吉岛": "Phuket",
    "新加坡": "Singapore",
    "巴黎": "Paris",
    "伦敦": "London",
    "里斯本": "Lisbon",
    "迪拜": "Dubai",
}

_TRAVEL_TYPE_KEYWORDS: tuple[tuple[tuple[str, ...], str, str], ...] = (
    (("寺", "庙", "temple"), "寺庙", "temple"),
    (("博物馆", "museum", "宫"), "博物馆", "museum"),
    (("塔", "tower"), "观景", "tower observation deck"),
    (("海滩", "beach", "岛", "island"), "海滩", "beach"),
    (("美食", "food"), "美食路线", "food tour"),
    (("骑行", "路线", "itinerary", "route"), "路线", "itinerary"),
    (("酒店", "民宿", "度假村", "hotel", "resort"), "住宿", "hotels"),
)


def extract_destination(title: str) -> dict[str, str]:
    """Split "国家·城市·景点" style titles into a destination record."""
    name = title
    for suffix in _TRAVEL_SUFFIXES:
        name = name.replace(suffix, "")
    parts = [part.strip() for part in _TRAVEL_SEPARATORS.split(name) if part.strip()]
    destination: dict[str, str] = {}
    if parts and parts[0] in COUNTRIES:
        destination["country"] = parts[0]
        parts = parts[1:]
    if not parts:
        destination["name"] = title.strip()
        return destination

    # "城市·景点" keeps both, "Tokyo: Neighborhood Guide" keeps only the place
    place = parts[0]
    if len(parts) > 1 and "country" in destination:
        place = f"{parts[0]} {parts[1]}"
    destination["name"] = re.sub(r"[（(].*?[）)]", "", place).strip() or place

    english = ENGLISH_PLACE_NAMES.get(parts[0])
    if english:
        destination["nameEn"] = english
    return destination


def _travel_keyword(item: RecommendationCandidate, locale: Locale) -> str:
    text = f"{item.title} {' '.join(item.tags)}".lower()
    for tokens, zh_keyword, en_keyword in _TRAVEL_TYPE_KEYWORDS:
        if any(token in text for token in tokens):
            return zh_keyword if locale == "zh" else en_keyword
    return "攻略" if locale == "zh" else "travel guide"


def enhance_travel(item: RecommendationCandidate, locale: Locale) -> RecommendationCandidate:
    destination = extract_destination(item.title)
    highlights = [tag for tag in item.tags if tag.lower() not in _GENERIC_TRAVEL_TAGS][:4]

    search_query = item.search_query
    if not search_query or search_query == item.title:
        search_query = f"{destination['name']} {_travel_keyword(item, locale)}"

    metadata = {**item.metadata, "destination": destination, "highlights": highlights}
    return item.model_copy(update={"search_query": search_query, "metadata": metadata})


# ---------------------------------------------------------------------------
# Fitness
# ---------------------------------------------------------------------------

# (tokens that make the query good enough, suffix to append otherwise)
_FITNESS_QUERY_RULES: dict[str, dict[FitnessType, tuple[tuple[str, ...], str]]] = {
    "zh": {
        FitnessType.TUTORIAL: (("教程", "跟练", "视频", "课程"), "视频课程"),
        FitnessType.EQUIPMENT: (("评测", "推荐", "购买指南", "教程"), "评测推荐"),
        FitnessType.THEORY_ARTICLE: (("原理", "机制", "科学", "小白", "误区", "科普"), "原理 科普"),
    },
    "en": {
        FitnessType.TUTORIAL: (("video", "tutorial", "course", "follow along"), "video course"),
        FitnessType.EQUIPMENT: (("review", "best", "guide"), "review"),
        FitnessType.THEORY_ARTICLE: (("science", "explained", "principle", "why"), "explained"),
    },
}

_BUY_WORDS = {
    "zh": (re.compile(r"购买|买"), "评测"),
    "en": (re.compile(r"\bbuy\b", re.IGNORECASE), "review"),
}


def optimize_fitness_query(query: str, fitness_type: FitnessType | None, locale: Locale) -> str:
    if fitness_type is None or not query:
        return query
    if fitness_type == FitnessType.EQUIPMENT:
        pattern, replacement = _BUY_WORDS[locale]
        query = pattern.sub(replacement, query)
    rule = _FITNESS_QUERY_RULES[locale].get(fitness_type)
    if rule is None:
        return query
    tokens, suffix = rule
    lowered = query.lower()
    if any(token in lowered for token in tokens):
        return query
    return f"{query} {suffix}"


def enhance_fitness(item: RecommendationCandidate, locale: Locale) -> RecommendationCandidate:
    fitness_type = item.sub_type if isinstance(item.sub_type, FitnessType) else None
    search_query = optimize_fitness_query(item.effective_query, fitness_type, locale)
    metadata = dict(item.metadata)
    if fitness_type is not None:
        metadata["fitnessType"] = fitness_type.value
    return item.model_copy(update={"search_query": search_query, "metadata": metadata})


ENHANCERS: dict[Category, CandidateEnhancer] = {
    Category.TRAVEL: enhance_travel,
    Category.FITNESS: enhance_fitness,
}


def enhance(item: RecommendationCandidate, locale: Locale) -> RecommendationCandidate:
    """Apply the category's enhancer, if any. Category and sub-type are never changed."""
    enhancer = ENHANCERS.get(item.category)
    if enhancer is None:
        return item
    enhanced = enhancer(item, locale)
    if enhanced.category != item.category or enhanced.sub_type != item.sub_type:
        return enhanced.model_copy(update={"category": item.category, "sub_type": item.sub_type})
    return enhanced
