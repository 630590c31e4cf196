"""
Tests for the Gemini generator: reply parsing, prompting, and client error mapping.
"""
import json
from types import SimpleNamespace

import pytest

from app.core.exceptions import GeneratorFailure, GeneratorUnavailable
from app.models.recommendation import Category, EntertainmentType, FitnessType, UserPreference
from app.services.gemini import GeminiGenerator, parse_candidates
from tests.helpers import history_of

pytestmark = pytest.mark.unit


class FakeModels:
    def __init__(self, text: str | None = None, error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[dict] = []

    def generate_content(self, model, contents):
        self.calls.append({"model": model, "contents": contents})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


def generator_with(text: str | None = None, error: Exception | None = None) -> GeminiGenerator:
    generator = GeminiGenerator(model="gemini-test", api_key=None)
    generator.client = SimpleNamespace(models=FakeModels(text, error))
    return generator


REPLY = json.dumps(
    [
        {"title": "Severance", "searchQuery": "severance", "platform": "YouTube", "subType": "video"},
        {"title": "Hades II", "platform": "Steam", "type": "game"},
        {"title": "Mystery", "subType": "podcast"},
    ]
)


# ============================================================================
# Reply parsing
# ============================================================================


class TestParseCandidates:
    def test_plain_array(self):
        candidates = parse_candidates(REPLY, Category.ENTERTAINMENT)
        assert [c.title for c in candidates] == ["Severance", "Hades II", "Mystery"]
        assert all(c.category == Category.ENTERTAINMENT for c in candidates)

    def test_alternative_sub_type_keys(self):
        candidates = parse_candidates(REPLY, Category.ENTERTAINMENT)
        assert candidates[0].sub_type == EntertainmentType.VIDEO
        assert candidates[1].sub_type == EntertainmentType.GAME

    def test_unknown_sub_type_is_dropped_not_the_entry(self):
        assert parse_candidates(REPLY, Category.ENTERTAINMENT)[2].sub_type is None

    def test_sub_type_is_scoped_to_category(self):
        reply = json.dumps([{"title": "Kettlebell", "subType": "equipment"}])
        assert parse_candidates(reply, Category.FITNESS)[0].sub_type == FitnessType.EQUIPMENT
        assert parse_candidates(reply, Category.SHOPPING)[0].sub_type is None

    def test_code_fences_and_surrounding_prose(self):
        reply = "Here you go:\n```json\n" + REPLY + "\n```\nEnjoy!"
        assert len(parse_candidates(reply, Category.ENTERTAINMENT)) == 3

    def test_wrapped_object(self):
        reply = json.dumps({"recommendations": [{"title": "Ramen Lab"}]})
        assert [c.title for c in parse_candidates(reply, Category.FOOD)] == ["Ramen Lab"]

    def test_malformed_entries_are_skipped(self):
        reply = json.dumps(["just a string", {"description": "no title"}, {"title": "  "}, {"title": "Kept"}])
        assert [c.title for c in parse_candidates(reply, Category.FOOD)] == ["Kept"]

    @pytest.mark.parametrize(
        "reply",
        ["", "   ", "no json at all", "[not valid", json.dumps("a string"), json.dumps([{"title": ""}])],
    )
    def test_unusable_replies_raise(self, reply):
        with pytest.raises(GeneratorFailure):
            parse_candidates(reply, Category.FOOD)


# ============================================================================
# Prompting
# ============================================================================


class TestBuildPrompt:
    def test_chinese_prompt_lists_history_and_sub_types(self):
        prompt = GeminiGenerator(api_key=None).build_prompt(
            Category.ENTERTAINMENT,
            "zh",
            history_of("三体", "流浪地球"),
            UserPreference(tags=["科幻"], weights={"科幻": 0.9, "悬疑": 0.4}),
            8,
        )
        assert "娱乐" in prompt
        assert "三体, 流浪地球" in prompt
        assert "科幻" in prompt
        assert "video/game/music/review" in prompt
        assert "B站" in prompt
        assert "推荐 8 个" in prompt

    def test_english_prompt_for_new_user(self):
        prompt = GeminiGenerator(api_key=None).build_prompt(Category.FOOD, "en", [], None, 12)
        assert "No history (new user)" in prompt
        assert "recommend 12 Food-related items" in prompt
        assert "Google Maps" in prompt
        assert "subType" not in prompt

    def test_history_is_capped_at_ten_titles(self):
        history = history_of(*[f"Title {i}" for i in range(15)])
        prompt = GeminiGenerator(api_key=None).build_prompt(Category.ENTERTAINMENT, "en", history, None, 5)
        assert "Title 9" in prompt
        assert "Title 10" not in prompt


# ============================================================================
# Generation
# ============================================================================


class TestGenerate:
    async def test_unconfigured_generator_is_unavailable(self):
        generator = GeminiGenerator(api_key=None)
        assert not generator.configured
        with pytest.raises(GeneratorUnavailable):
            await generator.generate([], Category.FOOD, "en")

    async def test_generate_parses_client_reply(self):
        generator = generator_with(text=REPLY)
        candidates = await generator.generate(history_of("Dark"), Category.ENTERTAINMENT, "en", count=3)
        assert [c.title for c in candidates] == ["Severance", "Hades II", "Mystery"]

        call = generator.client.models.calls[0]
        assert call["model"] == "gemini-test"
        assert call["contents"].startswith(GeminiGenerator.get_prompt("en"))
        assert "Dark" in call["contents"]

    async def test_client_errors_become_generator_failures(self):
        generator = generator_with(error=RuntimeError("quota exceeded"))
        with pytest.raises(GeneratorFailure, match="quota exceeded"):
            await generator.generate([], Category.FOOD, "en")

    async def test_empty_reply_is_a_failure(self):
        with pytest.raises(GeneratorFailure):
            await generator_with(text=None).generate([], Category.FOOD, "zh")
