from collections.abc import Sequence
from typing import TypeVar

from loguru import logger

from app.core.config import settings
from app.models.recommendation import (
    Category,
    Client,
    EntertainmentType,
    FitnessType,
    HistoryEntry,
    Locale,
    RecommendationCandidate,
    Region,
    SubType,
)
from app.services.recommendation.dedupe import DedupeMode, Deduplicator

T = TypeVar("T", bound=RecommendationCandidate)

REQUIRED_SUB_TYPES: dict[Category, tuple[SubType, ...]] = {
    Category.ENTERTAINMENT: (
        EntertainmentType.VIDEO,
        EntertainmentType.GAME,
        EntertainmentType.MUSIC,
        EntertainmentType.REVIEW,
    ),
    Category.FITNESS: (
        FitnessType.NEARBY_PLACE,
        FitnessType.TUTORIAL,
        FitnessType.EQUIPMENT,
    ),
}

# Venue picks are not actionable from the CN web channel, so theory articles replace them
FITNESS_THEORY_SUB_TYPES: tuple[SubType, ...] = (
    FitnessType.TUTORIAL,
    FitnessType.THEORY_ARTICLE,
    FitnessType.EQUIPMENT,
)


class DiversityEnforcer:
    """Guarantees one item per required sub-type, best effort, before any generic fill."""

    def __init__(
        self,
        deduplicator: Deduplicator,
        deployment_region: str = settings.DEPLOYMENT_REGION,
        fitness_theory_variant: bool = settings.FITNESS_THEORY_VARIANT,
    ):
        self.deduplicator = deduplicator
        self.deployment_region = Region(deployment_region)
        self.fitness_theory_variant = fitness_theory_variant

    def uses_fitness_theory_variant(self, locale: Locale, client: Client) -> bool:
        return (
            self.fitness_theory_variant
            and self.deployment_region == Region.CN
            and locale == "zh"
            and client == "web"
        )

    def required_sub_types(self, category: Category, locale: Locale, client: Client = "web") -> tuple[SubType, ...]:
        if category == Category.FITNESS and self.uses_fitness_theory_variant(locale, client):
            return FITNESS_THEORY_SUB_TYPES
        return REQUIRED_SUB_TYPES.get(category, ())

    def enforce(
        self,
        pool: Sequence[T],
        required: Sequence[SubType],
        history: Sequence[HistoryEntry] | None = None,
        exclude_titles: Sequence[str] | None = None,
    ) -> list[T]:
        """
        Pick at most one item per required sub-type, in required order.

        Each pick joins the exclusion list before the next sub-type is processed, so
        no item is chosen twice. Sub-types with no eligible candidate are skipped.

        Args:
            pool: Candidates, already in preference order.
            required: Sub-types to cover.
            history: Recent history used for strict duplicate suppression.
            exclude_titles: Titles the caller does not want to see.

        Returns:
            The required picks, in required order.
        """
        selected: list[T] = []
        rolling = list(exclude_titles or [])
        for sub_type in required:
            matching = [item for item in pool if item.sub_type == sub_type]
            picked = self.deduplicator.select(matching, 1, history, rolling, DedupeMode.STRICT)
            if not picked:
                logger.debug(f"No candidate left for required sub-type '{sub_type.value}'")
                continue
            selected.append(picked[0])
            # Newest first so the pick survives the exclusion cap
            rolling = [picked[0].title, *rolling]
        return selected
