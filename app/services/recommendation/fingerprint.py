import hashlib
from collections.abc import Iterable

from app.core.constants import NO_PREFERENCE_FINGERPRINT
from app.models.recommendation import UserPreference

FINGERPRINT_LENGTH = 16
_SEPARATOR = "|"


def normalize_tag(tag: str) -> str:
    """Trim, lower-case and collapse inner whitespace."""
    return " ".join(tag.split()).lower()


def normalized_tag_set(tags: Iterable[str]) -> list[str]:
    return sorted({normalize_tag(t) for t in tags if isinstance(t, str) and normalize_tag(t)})


def fingerprint(pref: UserPreference | None) -> str:
    """
    Short, stable digest of a preference's tag set.

    Equivalent tag sets (case, whitespace, order and duplicates aside) give the same
    value. A missing preference or an empty tag set maps to a shared sentinel.
    """
    if pref is None:
        return NO_PREFERENCE_FINGERPRINT
    tags = normalized_tag_set(pref.tags)
    if not tags:
        return NO_PREFERENCE_FINGERPRINT
    joined = _SEPARATOR.join(tags)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]
