from loguru import logger

from app.models.recommendation import Category, Locale, SubType
from app.services.platforms.catalog import PlatformCatalog, platform_catalog

# Categories whose default pick rotates with the item position on a page
ROTATING_CATEGORIES = frozenset({Category.FOOD})


def _norm(name: str) -> str:
    return "".join(name.split()).casefold()


class PlatformSelector:
    """
    Chooses the destination platform for an item.

    Priority: a suggestion that matches the bucket (exact name, alias, then
    containment either way), then the bucket rotation, then the generic engine
    of the region when the bucket is not configured.
    """

    def __init__(self, catalog: PlatformCatalog = platform_catalog):
        self.catalog = catalog

    def choose(
        self,
        category: Category,
        sub_type: SubType | None,
        locale: Locale,
        suggested: str | None = None,
        index: int | None = None,
    ) -> str:
        region = self.catalog.region_for_locale(locale)
        rotation = self.catalog.bucket(region, category, sub_type)
        if not rotation:
            generic = self.catalog.generic(region).name
            logger.debug(f"No platform bucket for {region.value}/{category.value}, using {generic}")
            return generic

        if suggested:
            matched = self._match(region, rotation, suggested)
            if matched:
                return matched

        if index is not None:
            return rotation[index % len(rotation)]
        return rotation[0]

    def _match(self, region, rotation: tuple[str, ...], suggested: str) -> str | None:
        wanted = _norm(suggested)
        if not wanted:
            return None

        for name in rotation:
            if _norm(name) == wanted:
                return name

        for name in rotation:
            platform = self.catalog.get(region, name)
            if platform and any(_norm(alias) == wanted for alias in platform.aliases):
                return name

        # Fuzzy: "B站" suggested for a bucket holding "B站健身", or "YouTube video" for "YouTube"
        for name in rotation:
            key = _norm(name)
            if key in wanted or wanted in key:
                return name
        return None
