"""
Tests for the platform catalog, platform selection and link synthesis.
"""
import pytest

from app.models.recommendation import Category, EntertainmentType, FitnessType, LinkType, Region
from app.services.platforms import LinkSynthesizer, PlatformCatalog, PlatformSelector, platform_catalog
from app.services.platforms.catalog import BUCKETS
from app.services.recommendation.classify import classify
from tests.helpers import make_candidate

pytestmark = pytest.mark.unit


@pytest.fixture
def selector() -> PlatformSelector:
    return PlatformSelector(platform_catalog)


@pytest.fixture
def links() -> LinkSynthesizer:
    return LinkSynthesizer(platform_catalog)


# ============================================================================
# Catalog
# ============================================================================


class TestCatalog:
    def test_every_bucket_entry_is_registered(self):
        for (region, _, _), names in BUCKETS.items():
            for name in names:
                assert platform_catalog.get(region, name) is not None, f"{region.value}/{name}"

    def test_every_template_builds_https_urls(self):
        for (region, _, _), names in BUCKETS.items():
            for name in names:
                assert platform_catalog.get(region, name).web_url("test query").startswith("https://")

    def test_region_for_locale(self):
        assert platform_catalog.region_for_locale("zh") == Region.CN
        assert platform_catalog.region_for_locale("en") == Region.INTL

    def test_bucket_falls_back_to_category_rotation(self):
        assert platform_catalog.bucket(Region.CN, Category.ENTERTAINMENT) == ("腾讯视频", "豆瓣", "B站")
        assert platform_catalog.bucket(Region.INTL, Category.SHOPPING, EntertainmentType.VIDEO)[0] == "Amazon"

    def test_generic_engines(self):
        assert platform_catalog.generic(Region.CN).name == "百度"
        assert platform_catalog.generic(Region.INTL).name == "Google"

    def test_web_url_percent_encodes_query(self):
        platform = platform_catalog.get(Region.INTL, "YouTube")
        assert platform.web_url("lo-fi & chill") == "https://www.youtube.com/results?search_query=lo-fi%20%26%20chill"


# ============================================================================
# Selector
# ============================================================================


class TestSelector:
    def test_exact_suggestion_wins(self, selector):
        assert selector.choose(Category.ENTERTAINMENT, EntertainmentType.GAME, "en", "Metacritic") == "Metacritic"

    def test_alias_suggestion(self, selector):
        assert selector.choose(Category.ENTERTAINMENT, EntertainmentType.VIDEO, "zh", "Douban") == "豆瓣"

    def test_containment_suggestion(self, selector):
        assert selector.choose(Category.FITNESS, FitnessType.TUTORIAL, "zh", "B站") == "B站健身"

    def test_suggestion_outside_bucket_uses_rotation_head(self, selector):
        assert selector.choose(Category.ENTERTAINMENT, EntertainmentType.MUSIC, "en", "Netflix") == "Spotify"

    def test_index_rotates_through_bucket(self, selector):
        rotation = platform_catalog.bucket(Region.INTL, Category.FOOD)
        picks = [selector.choose(Category.FOOD, None, "en", None, index=i) for i in range(len(rotation) + 1)]
        assert picks[: len(rotation)] == list(rotation)
        assert picks[-1] == rotation[0]

    def test_unconfigured_bucket_uses_generic_engine(self):
        empty = PlatformSelector(PlatformCatalog(buckets={}))
        assert empty.choose(Category.FOOD, None, "zh", "大众点评") == "百度"
        assert empty.choose(Category.FOOD, None, "en") == "Google"

    @pytest.mark.parametrize("category", list(Category))
    @pytest.mark.parametrize("locale", ["zh", "en"])
    def test_choice_always_belongs_to_category(self, selector, category, locale):
        region = platform_catalog.region_for_locale(locale)
        allowed = platform_catalog.names_for_category(region, category)
        for index in range(6):
            assert selector.choose(category, None, locale, "Nonexistent", index) in allowed


# ============================================================================
# Links
# ============================================================================


class TestLinkSynthesis:
    def test_video_link(self, links):
        item = classify(make_candidate("Severance", "video", "YouTube", "severance season 2"), Category.ENTERTAINMENT)
        link = links.synthesize(item, "YouTube", "en")
        assert link.url == "https://www.youtube.com/results?search_query=severance%20season%202"
        assert link.link_type == LinkType.VIDEO
        assert link.display_name == "YouTube"
        assert link.is_search
        assert link.app_url is None

    def test_unregistered_platform_degrades_to_generic(self, links):
        item = classify(make_candidate("Mystery", query="mystery"), Category.SHOPPING)
        link = links.synthesize(item, "MadeUpShop", "en")
        assert link.display_name == "Google"
        assert link.url == "https://www.google.com/search?q=mystery"
        assert link.link_type == LinkType.SEARCH

    def test_platform_from_other_region_degrades(self, links):
        item = classify(make_candidate("耳机", query="降噪耳机"), Category.SHOPPING)
        assert links.synthesize(item, "Amazon", "zh").display_name == "百度"

    def test_query_rule_appends_suffix_once(self, links):
        item = classify(make_candidate("三体", "video", query="三体"), Category.ENTERTAINMENT)
        assert links.synthesize(item, "腾讯视频", "zh").query == "三体 在线观看"
        already = item.model_copy(update={"search_query": "三体 在线观看"})
        assert links.synthesize(already, "腾讯视频", "zh").query == "三体 在线观看"

    def test_lodging_rule_only_for_lodging_queries(self, links):
        hotel = classify(make_candidate("Lisbon stay", query="Lisbon boutique hotel"), Category.TRAVEL)
        sights = classify(make_candidate("Lisbon walk", query="Lisbon old town"), Category.TRAVEL)
        assert links.synthesize(hotel, "Booking.com", "en").query == "Lisbon boutique hotel hotels"
        assert links.synthesize(sights, "Booking.com", "en").query == "Lisbon old town"

    def test_empty_query_uses_title(self, links):
        item = classify(make_candidate("Stardew Valley", "game"), Category.ENTERTAINMENT)
        assert links.synthesize(item, "Steam", "en").query == "Stardew Valley Steam"

    @pytest.mark.parametrize(
        "category,sub_type,platform,expected",
        [
            (Category.FOOD, None, "Google Maps", LinkType.RESTAURANT),
            (Category.SHOPPING, None, "Google Maps", LinkType.LOCATION),
            (Category.FITNESS, FitnessType.NEARBY_PLACE, "大众点评", LinkType.LOCATION),
            (Category.FOOD, None, "大众点评", LinkType.RESTAURANT),
            (Category.ENTERTAINMENT, EntertainmentType.REVIEW, "豆瓣", LinkType.ARTICLE),
            (Category.ENTERTAINMENT, EntertainmentType.VIDEO, "豆瓣", LinkType.MOVIE),
            (Category.FITNESS, FitnessType.TUTORIAL, "Keep", LinkType.COURSE),
            (Category.TRAVEL, None, "飞猪", LinkType.SEARCH),
        ],
    )
    def test_link_type_lookup(self, category, sub_type, platform, expected):
        assert LinkSynthesizer.link_type_for(category, sub_type, platform) == expected

    def test_app_link_only_for_app_clients(self, links):
        item = classify(make_candidate("三体", "video", query="三体"), Category.ENTERTAINMENT)
        web = links.synthesize(item, "B站", "zh", client="web")
        app = links.synthesize(item, "B站", "zh", client="app")
        assert web.app_url is None
        assert app.app_url.startswith("bilibili://search?keyword=")
        assert app.url == web.url

    def test_landing_page_platform_is_not_a_search(self, links):
        item = classify(make_candidate("Core workout", "tutorial", query="core"), Category.FITNESS)
        link = links.synthesize(item, "Nike Training Club", "en")
        assert link.url == "https://www.nike.com/ntc-app"
        assert not link.is_search
