"""
Destination platforms: the static catalog, platform selection and outbound link synthesis.
"""

from app.services.platforms.catalog import Platform, PlatformCatalog, platform_catalog
from app.services.platforms.links import LinkSynthesizer, SynthesizedLink
from app.services.platforms.selector import ROTATING_CATEGORIES, PlatformSelector

__all__ = [
    "Platform",
    "PlatformCatalog",
    "platform_catalog",
    "LinkSynthesizer",
    "SynthesizedLink",
    "PlatformSelector",
    "ROTATING_CATEGORIES",
]
