"""Pydantic models for users, preferences and match results.

Stored and wire field names are camelCase; Python attributes are snake_case
via alias generation.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from roomfinder.tools.preference_catalog import SCORED_CATEGORIES
from roomfinder.utils.logging_config import logger


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either naming."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Preferences(CamelModel):
    """Scored preference categories plus the free-text location.

    Unknown keys are rejected here so scoring only ever sees known categories.
    Values are not checked against the catalog: an unrecognised value is
    simply uncomparable during scoring.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    cleanliness: Optional[str] = None
    smoking: Optional[str] = None
    pets: Optional[str] = None
    work_schedule: Optional[str] = None
    social_level: Optional[str] = None
    guest_preference: Optional[str] = None
    music: Optional[str] = None
    location: Optional[str] = None

    def as_mapping(self) -> dict[str, Optional[str]]:
        """Preferences keyed by category wire name."""

        return self.model_dump(by_alias=True)

    def has_any_scored(self) -> bool:
        mapping = self.as_mapping()
        return any(mapping.get(category) for category in SCORED_CATEGORIES)


KNOWN_PREFERENCE_KEYS = frozenset(to_camel(name) for name in Preferences.model_fields)


class Profile(CamelModel):
    """Display fields of a user profile."""

    full_name: str = ""
    bio: str = ""
    address: str = ""
    phone: str = ""
    occupation: str = ""
    photo_url: Optional[str] = None


class User(CamelModel):
    """A user record as consumed by matching (read-only)."""

    id: str
    username: str = ""
    profile: Profile = Field(default_factory=Profile)
    preferences: Preferences = Field(default_factory=Preferences)
    profile_completed: bool = False

    @classmethod
    def from_document(cls, user_id: str, data: dict[str, Any]) -> "User":
        """Build a User from a stored document, tolerating bad preference data.

        Unknown preference keys and non-string values are dropped so a single
        malformed record cannot break a ranking pass. A ``preferences`` or
        ``profile`` field that is not a mapping is read as empty, and only a
        stored boolean ``True`` marks the profile as completed.
        """

        raw_prefs = data.get("preferences") or {}
        if not isinstance(raw_prefs, dict):
            logger.debug("Ignoring non-mapping preferences for user %s", user_id)
            raw_prefs = {}
        preferences: dict[str, Optional[str]] = {}
        for key, value in raw_prefs.items():
            if key not in KNOWN_PREFERENCE_KEYS:
                logger.debug("Dropping unknown preference key %s for user %s", key, user_id)
                continue
            if value is not None and not isinstance(value, str):
                logger.debug("Dropping non-string preference %s for user %s", key, user_id)
                continue
            preferences[key] = value

        raw_profile = data.get("profile") or {}
        if not isinstance(raw_profile, dict):
            logger.debug("Ignoring non-mapping profile for user %s", user_id)
            raw_profile = {}
        profile = {
            key: value
            for key, value in raw_profile.items()
            if isinstance(value, str) or value is None
        }
        for key in ("fullName", "bio", "address", "phone", "occupation"):
            if profile.get(key) is None:
                profile.pop(key, None)

        return cls(
            id=user_id,
            username=str(data.get("username") or ""),
            profile=Profile.model_validate(profile),
            preferences=Preferences.model_validate(preferences),
            profile_completed=data.get("profileCompleted") is True,
        )


class MatchResult(CamelModel):
    """One ranked candidate as returned to clients."""

    user_id: str
    username: str
    profile: dict[str, Any]
    preferences: dict[str, Any]
    match_percentage: int
    is_location_match: bool
    distance_km: Optional[float] = None
    category_scores: dict[str, float] = Field(default_factory=dict)


class MatchResponse(CamelModel):
    """Ranked matches, location matches first."""

    matches: list[MatchResult]
    location_match_count: int
    other_match_count: int


class PreferencesUpdate(BaseModel):
    """Request body for updating a user's preferences."""

    preferences: Preferences


class PreferencesUpdateResponse(BaseModel):
    message: str
    preferences: dict[str, Any]
