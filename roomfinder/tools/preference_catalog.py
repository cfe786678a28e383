"""Authoritative catalog of scored roommate preferences.

Each category maps its allowed values to an ordinal expressing "how much of
this trait" the value represents. Scoring, request validation and the
catalog endpoint all read from ``CATALOG`` so option lists cannot drift.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from roomfinder.utils.errors import UnknownPreferenceValueError


@dataclass(frozen=True)
class PreferenceCategory:
    """One scored preference dimension and its ordinal scale."""

    name: str
    label: str
    ordinals: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.ordinals) < 2:
            raise ValueError(f"Category {self.name} needs at least two values")
        ranks = list(self.ordinals.values())
        if any(rank <= 0 for rank in ranks):
            raise ValueError(f"Category {self.name} has non-positive ordinals")
        if len(set(ranks)) != len(ranks):
            raise ValueError(f"Category {self.name} has duplicate ordinals")
        if self.span <= 0:
            raise ValueError(f"Category {self.name} has an empty span")

    @property
    def values(self) -> list[str]:
        """Allowed values ordered by ordinal."""

        return sorted(self.ordinals, key=self.ordinals.__getitem__)

    @property
    def span(self) -> int:
        ranks = self.ordinals.values()
        return max(ranks) - min(ranks)


CATALOG: dict[str, PreferenceCategory] = {
    category.name: category
    for category in (
        PreferenceCategory(
            "cleanliness",
            "Cleanliness Level",
            {"Messy": 1, "Somewhat Messy": 2, "Moderately Clean": 3, "Very Clean": 4},
        ),
        PreferenceCategory(
            "smoking",
            "Smoking Preferences",
            {"No Smoking": 1, "Outside Only": 2, "Smoking Friendly": 3},
        ),
        PreferenceCategory(
            "pets",
            "Pet Preferences",
            {"No Pets": 1, "Pet Friendly": 2, "Has Pets": 3},
        ),
        PreferenceCategory(
            "workSchedule",
            "Work Schedule",
            {"Regular Hours": 1, "Flexible Hours": 2, "Night Owl": 3},
        ),
        PreferenceCategory(
            "socialLevel",
            "Social Preferences",
            {
                "Not Social": 1,
                "Occasionally Social": 2,
                "Moderately Social": 3,
                "Very Social": 4,
            },
        ),
        PreferenceCategory(
            "guestPreference",
            "Guest Policy",
            {
                "No Guests": 1,
                "Rare Guests": 2,
                "Occasional Guests": 3,
                "Frequent Guests": 4,
            },
        ),
        PreferenceCategory(
            "music",
            "Music/Noise Preferences",
            {"Quiet Environment": 1, "With Headphones": 2, "Shared Music OK": 3},
        ),
    )
}

SCORED_CATEGORIES: tuple[str, ...] = tuple(CATALOG)

# Values written by older versions of the preference form.
LEGACY_VALUE_ALIASES: dict[str, dict[str, str]] = {
    "cleanliness": {"Clean": "Moderately Clean", "Relaxed": "Somewhat Messy"},
    "smoking": {"Yes": "Smoking Friendly"},
    "workSchedule": {"Early Bird": "Regular Hours", "Flexible": "Flexible Hours"},
    "socialLevel": {"Private": "Not Social", "Varies": "Occasionally Social"},
}


def get_category(category: str) -> PreferenceCategory:
    """Look up a category, raising ``UnknownPreferenceValueError`` if absent."""

    try:
        return CATALOG[category]
    except KeyError:
        raise UnknownPreferenceValueError(category, None) from None


def ordinal_of(category: str, value: str) -> int:
    """Return the ordinal of ``value`` within ``category``."""

    ordinals = get_category(category).ordinals
    if value not in ordinals:
        raise UnknownPreferenceValueError(category, value)
    return ordinals[value]


def category_span(category: str) -> int:
    """Return max(ordinal) - min(ordinal) for ``category``."""

    return get_category(category).span


def canonicalize_preferences(preferences: Mapping[str, object]) -> dict:
    """Rewrite retired option labels to their current catalog values.

    Keys without aliases and values that are already current pass through
    untouched; unknown values are kept so scoring can treat them as
    uncomparable.
    """

    canonical = dict(preferences)
    for category, aliases in LEGACY_VALUE_ALIASES.items():
        value = canonical.get(category)
        if isinstance(value, str) and value in aliases:
            canonical[category] = aliases[value]
    return canonical


def describe_catalog() -> list[dict]:
    """JSON-friendly catalog description for clients rendering the form."""

    return [
        {
            "name": category.name,
            "label": category.label,
            "values": category.values,
        }
        for category in CATALOG.values()
    ]
