"""Deterministic scoring utilities for roommate matching."""

from __future__ import annotations

from dataclasses import dataclass, field
from math import floor
from typing import Mapping, Optional

from roomfinder.tools.preference_catalog import (
    SCORED_CATEGORIES,
    category_span,
    ordinal_of,
)
from roomfinder.utils.errors import UnknownPreferenceValueError

PreferenceMap = Mapping[str, Optional[str]]


@dataclass
class CompatibilityResult:
    """Aggregate compatibility between two preference mappings."""

    match_percentage: int
    category_scores: dict[str, float] = field(default_factory=dict)

    @property
    def compared_categories(self) -> int:
        return len(self.category_scores)


def calculate_category_score(
    category: str, value_a: Optional[str], value_b: Optional[str]
) -> Optional[float]:
    """Similarity of two values within one category, in [0, 1].

    Returns None when the pair is uncomparable: either side unset, not a
    string, or a value the catalog does not know.
    """

    if not isinstance(value_a, str) or not isinstance(value_b, str):
        return None
    if not value_a or not value_b:
        return None

    try:
        diff = abs(ordinal_of(category, value_a) - ordinal_of(category, value_b))
    except UnknownPreferenceValueError:
        return None

    return 1 - diff / category_span(category)


def calculate_compatibility(
    prefs_a: PreferenceMap, prefs_b: PreferenceMap
) -> CompatibilityResult:
    """Calculate the 0-100 match percentage between two users' preferences.

    Categories that either user left unset are skipped rather than
    penalised. With nothing to compare the percentage is 0.
    """

    category_scores: dict[str, float] = {}
    for category in SCORED_CATEGORIES:
        score = calculate_category_score(
            category, prefs_a.get(category), prefs_b.get(category)
        )
        if score is not None:
            category_scores[category] = score

    if not category_scores:
        return CompatibilityResult(match_percentage=0)

    mean = sum(category_scores.values()) / len(category_scores)
    # Round half up.
    percentage = int(floor(100 * mean + 0.5))

    return CompatibilityResult(
        match_percentage=max(0, min(percentage, 100)),
        category_scores=category_scores,
    )


def is_location_match(prefs_a: PreferenceMap, prefs_b: PreferenceMap) -> bool:
    """True when both users chose the same non-empty location.

    Comparison is exact and case-sensitive: "Mumbai" and "mumbai" differ.
    """

    location_a = prefs_a.get("location")
    location_b = prefs_b.get("location")
    return bool(location_a) and bool(location_b) and location_a == location_b
