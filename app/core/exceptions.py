class RecommendationError(Exception):
    """Base class for recommendation pipeline errors."""


class GeneratorUnavailable(RecommendationError):
    """The content generator is not configured (missing key, disabled)."""


class GeneratorFailure(RecommendationError):
    """The content generator was called but produced nothing usable."""


class InvalidCategory(RecommendationError):
    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Invalid category: {category}")


class PersistenceFailure(RecommendationError):
    """A history or cache write did not complete."""
