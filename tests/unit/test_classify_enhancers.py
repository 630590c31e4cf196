"""
Tests for sub-type classification and the per-category candidate enhancers.
"""
import pytest

from app.models.recommendation import Category, EntertainmentType, FitnessType
from app.services.recommendation.classify import classify, infer_entertainment_type, infer_fitness_type
from app.services.recommendation.enhancers import (
    enhance,
    enhance_travel,
    extract_destination,
    optimize_fitness_query,
)
from tests.helpers import make_candidate

pytestmark = pytest.mark.unit


# ============================================================================
# Classification
# ============================================================================


class TestClassify:
    def test_declared_sub_type_is_kept(self):
        item = classify(make_candidate("Anything", "music"), Category.ENTERTAINMENT)
        assert item.sub_type == EntertainmentType.MUSIC
        assert item.category == Category.ENTERTAINMENT

    def test_foreign_sub_type_is_reinferred(self):
        item = classify(make_candidate("Elden Ring co-op", "tutorial", "Steam"), Category.ENTERTAINMENT)
        assert item.sub_type == EntertainmentType.GAME

    def test_categories_without_sub_types_clear_it(self):
        item = classify(make_candidate("Headphones", "video"), Category.SHOPPING)
        assert item.sub_type is None

    def test_entertainment_inference_uses_platform_evidence(self):
        assert infer_entertainment_type(make_candidate("Focus mix", platform="Spotify")) == EntertainmentType.MUSIC

    def test_entertainment_inference_without_evidence(self):
        assert infer_entertainment_type(make_candidate("Something")) is None

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Adjustable dumbbell set", FitnessType.EQUIPMENT),
            ("Gyms near me with pools", FitnessType.NEARBY_PLACE),
            ("为什么要做热身", FitnessType.THEORY_ARTICLE),
            ("Untitled", FitnessType.TUTORIAL),
        ],
    )
    def test_fitness_inference(self, title, expected):
        assert infer_fitness_type(make_candidate(title)) == expected


# ============================================================================
# Travel
# ============================================================================


class TestTravelEnhancer:
    def test_extract_destination_with_country(self):
        assert extract_destination("中国·西安·大雁塔") == {"country": "中国", "name": "西安 大雁塔", "nameEn": "Xi'an"}

    def test_extract_destination_english_title(self):
        assert extract_destination("Tokyo: Neighborhood Guide (First-Time)") == {"name": "Tokyo"}

    def test_query_built_from_destination_when_missing(self):
        item = classify(make_candidate("Tokyo: Neighborhood Guide (First-Time)"), Category.TRAVEL)
        enhanced = enhance_travel(item, "en")
        assert enhanced.search_query == "Tokyo travel guide"
        assert enhanced.metadata["destination"] == {"name": "Tokyo"}

    def test_existing_query_is_kept(self):
        item = classify(make_candidate("中国·西安·大雁塔", query="西安 大雁塔 夜景"), Category.TRAVEL)
        assert enhance_travel(item, "zh").search_query == "西安 大雁塔 夜景"

    def test_highlights_skip_generic_tags(self):
        item = classify(
            make_candidate("Kyoto", tags=["travel", "temples", "food", "night", "views", "tea"]),
            Category.TRAVEL,
        )
        assert enhance_travel(item, "en").metadata["highlights"] == ["temples", "food", "night", "views"]


# ============================================================================
# Fitness
# ============================================================================


class TestFitnessEnhancer:
    def test_equipment_purchase_words_become_reviews(self):
        assert optimize_fitness_query("哑铃 购买", FitnessType.EQUIPMENT, "zh") == "哑铃 评测"
        assert optimize_fitness_query("buy kettlebell", FitnessType.EQUIPMENT, "en") == "review kettlebell"

    def test_tutorial_gets_course_suffix(self):
        assert optimize_fitness_query("full body workout", FitnessType.TUTORIAL, "en") == "full body workout video course"
        assert optimize_fitness_query("跟练 全身", FitnessType.TUTORIAL, "zh") == "跟练 全身"

    def test_nearby_query_is_untouched(self):
        assert optimize_fitness_query("gym near me", FitnessType.NEARBY_PLACE, "en") == "gym near me"

    def test_enhance_records_fitness_type(self):
        item = classify(make_candidate("Mobility routine", "tutorial", query="mobility routine"), Category.FITNESS)
        enhanced = enhance(item, "en")
        assert enhanced.metadata["fitnessType"] == "tutorial"
        assert enhanced.search_query == "mobility routine video course"


class TestEnhanceContract:
    @pytest.mark.parametrize("category", list(Category))
    def test_category_and_sub_type_are_preserved(self, category):
        item = classify(make_candidate("中国·杭州·西湖骑行路线", "tutorial", tags=["骑行"]), category)
        enhanced = enhance(item, "zh")
        assert enhanced.category == item.category
        assert enhanced.sub_type == item.sub_type
