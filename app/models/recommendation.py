from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.constants import (
    ANONYMOUS_USER_ID,
    DEFAULT_COUNT,
    DEFAULT_HISTORY_LIMIT,
    MAX_COUNT,
    MAX_HISTORY_LIMIT,
    MIN_COUNT,
)

Locale = Literal["zh", "en"]
Client = Literal["app", "web"]


class Category(str, Enum):
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    FOOD = "food"
    TRAVEL = "travel"
    FITNESS = "fitness"


class EntertainmentType(str, Enum):
    VIDEO = "video"
    GAME = "game"
    MUSIC = "music"
    REVIEW = "review"


class FitnessType(str, Enum):
    NEARBY_PLACE = "nearby_place"
    TUTORIAL = "tutorial"
    EQUIPMENT = "equipment"
    THEORY_ARTICLE = "theory_article"


SubType = EntertainmentType | FitnessType


class LinkType(str, Enum):
    ARTICLE = "article"
    MUSIC = "music"
    RECIPE = "recipe"
    RESTAURANT = "restaurant"
    PRODUCT = "product"
    VIDEO = "video"
    SEARCH = "search"
    BOOK = "book"
    LOCATION = "location"
    APP = "app"
    MOVIE = "movie"
    GAME = "game"
    HOTEL = "hotel"
    COURSE = "course"


class Source(str, Enum):
    CACHE = "cache"
    AI = "ai"
    FALLBACK = "fallback"


class Region(str, Enum):
    CN = "CN"
    INTL = "INTL"


# Categories whose items carry a sub-type
SUB_TYPE_ENUMS: dict[Category, type[Enum]] = {
    Category.ENTERTAINMENT: EntertainmentType,
    Category.FITNESS: FitnessType,
}


def parse_sub_type(category: Category, value: Any) -> SubType | None:
    """Coerce a raw sub-type value into the enum declared for ``category``.

    Returns None for categories without sub-types or for unknown values.
    """
    enum_cls = SUB_TYPE_ENUMS.get(category)
    if enum_cls is None or value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return None


def _clean_tags(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = [value]
    seen: set[str] = set()
    tags = []
    for tag in value:
        if not isinstance(tag, str):
            continue
        cleaned = tag.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            tags.append(cleaned)
    return tags


class RecommendationCandidate(BaseModel):
    """Raw item as produced by the generator or the fallback pool, before shaping."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    reason: str = ""
    tags: list[str] = Field(default_factory=list)
    category: Category | None = None
    search_query: str = Field(default="", alias="searchQuery")
    platform: str = Field(default="", description="Platform suggested by the source, not yet validated")
    sub_type: SubType | None = Field(default=None, alias="subType")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title", "description", "reason", "search_query", "platform", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value: Any) -> list[str]:
        return _clean_tags(value)

    @property
    def effective_query(self) -> str:
        return self.search_query or self.title


class RecommendationItem(BaseModel):
    """Shaped recommendation as returned to callers."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    reason: str = ""
    tags: list[str] = Field(default_factory=list)
    category: Category
    sub_type: SubType | None = Field(default=None, alias="subType")
    search_query: str = Field(default="", alias="searchQuery")
    platform: str
    link: str
    link_type: LinkType = Field(default=LinkType.SEARCH, alias="linkType")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value: Any) -> list[str]:
        return _clean_tags(value)


class UserPreference(BaseModel):
    """Per (user, category) preference record. Read-only for the pipeline."""

    user_id: str | None = None
    category: Category | None = None
    tags: list[str] = Field(default_factory=list)
    weights: dict[str, float] = Field(default_factory=dict, description="Tag → weight, used for prompting only")

    @field_validator("tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value: Any) -> list[str]:
        return _clean_tags(value)


class HistoryEntry(BaseModel):
    title: str = ""
    category: Category | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def search_query(self) -> str:
        value = self.metadata.get("searchQuery")
        return value if isinstance(value, str) else ""


def _clamp(value: Any, default: int, low: int, high: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = default
    return min(max(number, low), high)


class RecommendParams(BaseModel):
    """Caller-tunable request fields, shared by the query string and the JSON body."""

    model_config = ConfigDict(populate_by_name=True)

    locale: Locale = "zh"
    user_id: str | None = Field(default=None, alias="userId")
    count: int = DEFAULT_COUNT
    skip_cache: bool = Field(default=False, alias="skipCache")
    client: Client = "web"
    exclude_titles: list[str] = Field(default_factory=list, alias="excludeTitles")
    history_limit: int = Field(default=DEFAULT_HISTORY_LIMIT, alias="historyLimit")

    @field_validator("locale", mode="before")
    @classmethod
    def _coerce_locale(cls, value: Any) -> str:
        return "en" if str(value or "").strip().lower().startswith("en") else "zh"

    @field_validator("client", mode="before")
    @classmethod
    def _coerce_client(cls, value: Any) -> str:
        return "app" if str(value or "").strip().lower() == "app" else "web"

    @field_validator("count", mode="before")
    @classmethod
    def _clamp_count(cls, value: Any) -> int:
        # Out-of-range counts are clamped rather than rejected
        return _clamp(value, DEFAULT_COUNT, MIN_COUNT, MAX_COUNT)

    @field_validator("history_limit", mode="before")
    @classmethod
    def _clamp_history_limit(cls, value: Any) -> int:
        return _clamp(value, DEFAULT_HISTORY_LIMIT, 1, MAX_HISTORY_LIMIT)

    @field_validator("exclude_titles", mode="before")
    @classmethod
    def _clean_excludes(cls, value: Any) -> list[str]:
        return _clean_tags(value)

    @field_validator("user_id", mode="before")
    @classmethod
    def _blank_user(cls, value: Any) -> str | None:
        if value is None:
            return None
        value = str(value).strip()
        return value or None


class RecommendRequest(RecommendParams):
    category: Category

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None or self.user_id == ANONYMOUS_USER_ID


class RecommendResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    recommendations: list[RecommendationItem] = Field(default_factory=list)
    source: Source
    error: str | None = None
