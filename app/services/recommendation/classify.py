from app.models.recommendation import (
    Category,
    EntertainmentType,
    FitnessType,
    RecommendationCandidate,
    SubType,
    parse_sub_type,
)

_ENTERTAINMENT_KEYWORDS: dict[EntertainmentType, tuple[str, ...]] = {
    EntertainmentType.VIDEO: (
        "电影", "电视剧", "综艺", "动漫", "纪录片", "剧集", "短剧", "观看", "在线看",
        "movie", "series", "anime", "documentary", "watch", "stream", "season", "episode", "film", "comedy",
    ),
    EntertainmentType.GAME: (
        "游戏", "手游", "下载", "游玩", "通关", "rpg", "fps", "moba",
        "game", "gaming", "console", "co-op", "puzzle",
    ),
    EntertainmentType.MUSIC: (
        "音乐", "歌曲", "歌单", "专辑", "演唱会", "音乐节", "单曲", "歌手", "乐队",
        "music", "song", "album", "concert", "playlist", "track", "artist", "band",
    ),
    EntertainmentType.REVIEW: (
        "影评", "解析", "评测", "盘点", "排行榜", "评论", "资讯", "小说",
        "review", "analysis", "critique", "ranking", "must-watch", "essentials", "news",
    ),
}

_ENTERTAINMENT_PLATFORMS: dict[EntertainmentType, tuple[str, ...]] = {
    EntertainmentType.VIDEO: ("B站", "YouTube", "爱奇艺", "腾讯视频", "优酷", "Netflix", "TikTok"),
    EntertainmentType.GAME: ("Steam", "TapTap", "MiniReview", "Epic Games", "Nintendo", "PlayStation", "Xbox"),
    EntertainmentType.MUSIC: ("网易云音乐", "QQ音乐", "酷狗音乐", "Spotify", "Apple Music", "SoundCloud"),
    EntertainmentType.REVIEW: ("豆瓣", "IMDb", "Rotten Tomatoes", "Metacritic", "知乎", "笔趣阁", "Medium"),
}

# Order matters: it is the tie-break order
_ENTERTAINMENT_PRIORITY = (
    EntertainmentType.VIDEO,
    EntertainmentType.GAME,
    EntertainmentType.MUSIC,
    EntertainmentType.REVIEW,
)

_FITNESS_KEYWORDS: dict[FitnessType, tuple[str, ...]] = {
    FitnessType.EQUIPMENT: (
        "哑铃", "器材", "跑步机", "瑜伽垫", "杠铃", "壶铃", "弹力带", "蛋白粉", "补剂",
        "dumbbell", "equipment", "barbell", "treadmill", "yoga mat", "kettlebell", "gear",
        "resistance band", "supplement", "protein powder",
    ),
    FitnessType.THEORY_ARTICLE: (
        "原理", "科学", "机制", "误区", "科普", "为什么",
        "principle", "science", "explained", "explainer", "myth", "why ",
    ),
    FitnessType.NEARBY_PLACE: (
        "附近", "周边", "健身房", "场馆", "步行",
        "near me", "nearby", "gym near", "studio near", "local gym",
    ),
    FitnessType.TUTORIAL: (
        "教程", "跟练", "视频", "课程", "拉伸",
        "tutorial", "follow along", "follow-along", "video", "workout", "class", "routine",
    ),
}

# First matching type wins
_FITNESS_PRIORITY = (
    FitnessType.EQUIPMENT,
    FitnessType.THEORY_ARTICLE,
    FitnessType.NEARBY_PLACE,
    FitnessType.TUTORIAL,
)


def _item_text(item: RecommendationCandidate) -> str:
    return f"{item.title} {item.description} {' '.join(item.tags)} {item.search_query}".lower()


def infer_entertainment_type(item: RecommendationCandidate) -> EntertainmentType | None:
    """Score keyword and platform evidence per type. None when there is no evidence at all."""
    text = _item_text(item)
    platform = item.platform.lower()
    scores = {t: sum(1 for kw in _ENTERTAINMENT_KEYWORDS[t] if kw.lower() in text) for t in _ENTERTAINMENT_PRIORITY}
    for sub_type, platforms in _ENTERTAINMENT_PLATFORMS.items():
        if platform and any(p.lower() in platform for p in platforms):
            scores[sub_type] += 2

    best = max(scores.values())
    if best == 0:
        return None
    return next(t for t in _ENTERTAINMENT_PRIORITY if scores[t] == best)


def infer_fitness_type(item: RecommendationCandidate) -> FitnessType:
    text = _item_text(item)
    for sub_type in _FITNESS_PRIORITY:
        if any(kw in text for kw in _FITNESS_KEYWORDS[sub_type]):
            return sub_type
    return FitnessType.TUTORIAL


def resolve_sub_type(item: RecommendationCandidate, category: Category) -> SubType | None:
    """
    Sub-type an item of ``category`` should carry.

    A declared sub-type is kept when it belongs to the category, otherwise it is
    inferred from the item's text. Categories without sub-types always get None.
    """
    declared = parse_sub_type(category, item.sub_type.value if item.sub_type else None)
    if declared is not None:
        return declared
    if category == Category.ENTERTAINMENT:
        return infer_entertainment_type(item)
    if category == Category.FITNESS:
        return infer_fitness_type(item)
    return None


def classify(item: RecommendationCandidate, category: Category) -> RecommendationCandidate:
    """Return a copy of ``item`` bound to ``category`` with a consistent sub-type."""
    return item.model_copy(update={"category": category, "sub_type": resolve_sub_type(item, category)})
