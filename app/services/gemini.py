import asyncio
import json
import re
from collections.abc import Sequence
from typing import Any

from google import genai
from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from app.core.exceptions import GeneratorFailure, GeneratorUnavailable
from app.models.recommendation import (
    SUB_TYPE_ENUMS,
    Category,
    HistoryEntry,
    Locale,
    RecommendationCandidate,
    UserPreference,
    parse_sub_type,
)
from app.services.platforms import PlatformCatalog, platform_catalog

CATEGORY_NAMES: dict[Category, dict[str, str]] = {
    Category.ENTERTAINMENT: {"zh": "娱乐", "en": "Entertainment"},
    Category.SHOPPING: {"zh": "购物", "en": "Shopping"},
    Category.FOOD: {"zh": "美食", "en": "Food"},
    Category.TRAVEL: {"zh": "旅行", "en": "Travel"},
    Category.FITNESS: {"zh": "健身", "en": "Fitness"},
}

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
# Sub-type keys models tend to invent instead of "subType"
_SUB_TYPE_KEYS = ("subType", "sub_type", "type", "entertainmentType", "fitnessType")


def _extract_json(text: str) -> Any:
    """Best-effort decode of the first JSON array (or object) in a model reply."""
    cleaned = _CODE_FENCE.sub("", text).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass
    start, end = cleaned.find("["), cleaned.rfind("]")
    if start == -1 or end <= start:
        start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end <= start:
        raise GeneratorFailure("Generator reply contains no JSON")
    try:
        return json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as e:
        raise GeneratorFailure(f"Generator reply is not valid JSON: {e}") from e


def parse_candidates(text: str, category: Category) -> list[RecommendationCandidate]:
    """Turn a raw model reply into validated candidates, skipping malformed entries."""
    if not text or not text.strip():
        raise GeneratorFailure("Generator returned an empty reply")

    payload = _extract_json(text)
    if isinstance(payload, dict):
        payload = payload.get("recommendations", [payload])
    if not isinstance(payload, list):
        raise GeneratorFailure("Generator reply is not a list of recommendations")

    candidates = []
    for raw in payload:
        if not isinstance(raw, dict):
            continue
        entry = {k: v for k, v in raw.items() if k not in _SUB_TYPE_KEYS and k != "category"}
        # Unknown sub-types are dropped here and inferred later
        declared = next((raw[k] for k in _SUB_TYPE_KEYS if raw.get(k)), None)
        entry["subType"] = parse_sub_type(category, declared)
        try:
            candidate = RecommendationCandidate.model_validate(entry)
        except ValidationError as e:
            logger.debug(f"Skipping malformed generator entry: {e.error_count()} error(s)")
            continue
        if candidate.title:
            candidates.append(candidate.model_copy(update={"category": category}))

    if not candidates:
        raise GeneratorFailure("Generator reply contained no usable recommendations")
    return candidates


class GeminiGenerator:
    def __init__(
        self,
        model: str = settings.DEFAULT_GEMINI_MODEL,
        api_key: str | None = settings.GEMINI_API_KEY,
        catalog: PlatformCatalog = platform_catalog,
    ):
        self.model = model
        self.catalog = catalog
        self.client = None
        if api_key:
            try:
                self.client = genai.Client(api_key=api_key)
            except Exception as e:
                logger.warning(f"Failed to initialize Gemini client: {e}")
        else:
            logger.warning("GEMINI_API_KEY not set. AI recommendations will be disabled.")

    @property
    def configured(self) -> bool:
        return self.client is not None

    @staticmethod
    def get_prompt(locale: Locale) -> str:
        if locale == "zh":
            return "你是一个智能推荐助手，只返回 JSON 格式的推荐结果，不要有任何其他文字。"
        return "You are a smart recommendation assistant. Return ONLY JSON-formatted recommendations, no other text."

    def build_prompt(
        self,
        category: Category,
        locale: Locale,
        history: Sequence[HistoryEntry],
        preference: UserPreference | None,
        count: int,
    ) -> str:
        name = CATEGORY_NAMES[category][locale]
        region = self.catalog.region_for_locale(locale)
        platforms = ", ".join(sorted(self.catalog.names_for_category(region, category)))
        history_titles = ", ".join(entry.title for entry in history[:10] if entry.title)
        tags = ", ".join(preference.tags) if preference else ""
        weighted = ""
        if preference and preference.weights:
            top = sorted(preference.weights.items(), key=lambda kv: kv[1], reverse=True)[:5]
            weighted = ", ".join(tag for tag, _ in top)

        sub_type_rule = sub_type_field = ""
        enum_cls = SUB_TYPE_ENUMS.get(category)
        if enum_cls is not None:
            sub_types = "/".join(member.value for member in enum_cls)
            if locale == "zh":
                sub_type_rule = f"4. subType 必须是 {sub_types} 之一，并尽量覆盖所有类型"
                sub_type_field = ', "subType": "类型"'
            else:
                sub_type_rule = f"4. subType must be one of {sub_types}; cover every type where possible"
                sub_type_field = ', "subType": "type"'

        if locale == "zh":
            return f"""你是一个智能推荐助手，专门为用户提供{name}类的个性化推荐。

## 用户信息
- 历史选择: {history_titles or "暂无历史记录（新用户）"}
- 偏好标签: {tags or "暂无明确偏好"}
- 推测偏好: {weighted or "暂无推测"}

## 任务
请基于用户历史和偏好，推荐 {count} 个{name}相关的内容，不要重复历史选择。

## 要求
1. 不要编造链接，只给出可以在平台上直接搜索的 searchQuery
2. platform 必须从以下平台中选择: {platforms}
3. 推荐理由要个性化，提到用户的偏好
{sub_type_rule}

## 返回格式
请严格返回 JSON 数组格式，不要有任何其他文字：
[{{"title": "推荐标题", "description": "详细描述（30-50字）", "reason": "为什么推荐给你", "tags": ["标签"], "searchQuery": "搜索关键词", "platform": "平台名"{sub_type_field}}}]"""

        return f"""You are a smart recommendation assistant specializing in {name} recommendations.

## User Information
- History: {history_titles or "No history (new user)"}
- Preference Tags: {tags or "No explicit preferences"}
- Inferred Preferences: {weighted or "No inferences"}

## Task
Based on user history and preferences, recommend {count} {name}-related items. Do not repeat history.

## Requirements
1. Never invent links, give a searchQuery that works on the platform's own search
2. platform must be one of: {platforms}
3. Reasons should be personalized, mentioning user preferences
{sub_type_rule}

## Response Format
Return ONLY a JSON array, no other text:
[{{"title": "Recommendation title", "description": "Detailed description (30-50 words)", "reason": "Why we recommend this", "tags": ["tag"], "searchQuery": "search keywords", "platform": "Platform name"{sub_type_field}}}]"""

    def generate_content(self, prompt: str, locale: Locale) -> str:
        if not self.client:
            raise GeneratorUnavailable("Gemini client not initialized")
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=self.get_prompt(locale) + "\n\n" + prompt,
            )
        except Exception as e:
            raise GeneratorFailure(f"Gemini request failed: {e}") from e
        return (response.text or "").strip()

    async def generate(
        self,
        history: Sequence[HistoryEntry],
        category: Category,
        locale: Locale,
        preference: UserPreference | None = None,
        count: int = 12,
    ) -> list[RecommendationCandidate]:
        """Ask the model for ``count`` candidates. The blocking call runs in the default executor."""
        if not self.client:
            raise GeneratorUnavailable("Gemini client not initialized")
        prompt = self.build_prompt(category, locale, history, preference, count)
        loop = asyncio.get_running_loop()
        text = await loop.run_in_executor(None, lambda: self.generate_content(prompt, locale))
        candidates = parse_candidates(text, category)
        logger.info(f"Gemini returned {len(candidates)} {category.value} candidates")
        return candidates
