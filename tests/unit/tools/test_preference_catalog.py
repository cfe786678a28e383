"""
Unit tests for the preference catalog.

The catalog is the single source of allowed values and ordinals used by
scoring, request validation and the catalog endpoint.
"""

import pytest

from roomfinder.tools.preference_catalog import (
    CATALOG,
    SCORED_CATEGORIES,
    PreferenceCategory,
    canonicalize_preferences,
    category_span,
    describe_catalog,
    ordinal_of,
)
from roomfinder.utils.errors import UnknownPreferenceValueError


class TestCatalogContents:
    """The shipped catalog is complete and well formed."""

    def test_seven_scored_categories(self):
        assert SCORED_CATEGORIES == (
            "cleanliness",
            "smoking",
            "pets",
            "workSchedule",
            "socialLevel",
            "guestPreference",
            "music",
        )

    def test_every_span_positive(self):
        for name in SCORED_CATEGORIES:
            assert category_span(name) > 0

    def test_cleanliness_ordinals(self):
        assert ordinal_of("cleanliness", "Messy") == 1
        assert ordinal_of("cleanliness", "Moderately Clean") == 3
        assert ordinal_of("cleanliness", "Very Clean") == 4
        assert category_span("cleanliness") == 3

    def test_values_ordered_by_ordinal(self):
        assert CATALOG["music"].values == [
            "Quiet Environment",
            "With Headphones",
            "Shared Music OK",
        ]


class TestOrdinalLookup:
    """ordinal_of raises on values outside the catalog."""

    def test_unknown_value_raises(self):
        with pytest.raises(UnknownPreferenceValueError) as exc_info:
            ordinal_of("smoking", "Sometimes")
        assert exc_info.value.category == "smoking"
        assert exc_info.value.value == "Sometimes"

    def test_unknown_category_raises(self):
        with pytest.raises(UnknownPreferenceValueError):
            category_span("budget")

    def test_lookup_is_case_sensitive(self):
        with pytest.raises(UnknownPreferenceValueError):
            ordinal_of("pets", "no pets")


class TestCategoryConstruction:
    """Invalid categories are rejected when they are built."""

    def test_duplicate_ordinals_rejected(self):
        with pytest.raises(ValueError, match="duplicate"):
            PreferenceCategory("x", "X", {"a": 1, "b": 1})

    def test_single_value_rejected(self):
        with pytest.raises(ValueError, match="at least two"):
            PreferenceCategory("x", "X", {"a": 1})

    def test_non_positive_ordinal_rejected(self):
        with pytest.raises(ValueError, match="non-positive"):
            PreferenceCategory("x", "X", {"a": 0, "b": 1})


class TestLegacyValues:
    """Retired form labels are rewritten before preferences are stored."""

    def test_private_social_level_becomes_not_social(self):
        result = canonicalize_preferences({"socialLevel": "Private"})
        assert result["socialLevel"] == "Not Social"

    def test_current_and_unknown_values_untouched(self):
        prefs = {"cleanliness": "Very Clean", "smoking": "Sometimes", "location": "Pune"}
        assert canonicalize_preferences(prefs) == prefs

    def test_input_not_mutated(self):
        prefs = {"smoking": "Yes"}
        canonicalize_preferences(prefs)
        assert prefs == {"smoking": "Yes"}

    def test_none_values_pass_through(self):
        assert canonicalize_preferences({"socialLevel": None}) == {"socialLevel": None}


def test_describe_catalog_lists_every_category():
    described = describe_catalog()
    assert [c["name"] for c in described] == list(SCORED_CATEGORIES)
    assert described[0]["label"] == "Cleanliness Level"
    assert described[0]["values"][0] == "Messy"
