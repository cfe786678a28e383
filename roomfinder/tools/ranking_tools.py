"""Ranking of candidate roommates for one requesting user.

Location matches always come first; each partition is ordered by descending
match percentage with ties kept in input order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from roomfinder.schemas import MatchResponse, MatchResult, User
from roomfinder.tools.geocode_tools import resolve_coordinates
from roomfinder.tools.scoring_tools import calculate_compatibility, is_location_match
from roomfinder.utils.geo import Coordinate, distance_km
from roomfinder.utils.logging_config import logger


@dataclass
class MatchRanking:
    """Result of one ranking pass."""

    location_matches: list[MatchResult] = field(default_factory=list)
    other_matches: list[MatchResult] = field(default_factory=list)

    @property
    def matches(self) -> list[MatchResult]:
        return self.location_matches + self.other_matches

    def to_response(self) -> MatchResponse:
        return MatchResponse(
            matches=self.matches,
            location_match_count=len(self.location_matches),
            other_match_count=len(self.other_matches),
        )


def resolve_user_coordinates(user: User) -> Optional[Coordinate]:
    """Coordinates from the profile address, else the location preference.

    A non-empty address always wins, even one naming no known city, which
    then resolves to the default city.
    """

    if user.profile.address and user.profile.address.strip():
        return resolve_coordinates(user.profile.address)
    return resolve_coordinates(user.preferences.location)


def build_match_result(
    requester: User,
    candidate: User,
    requester_coordinates: Optional[Coordinate],
) -> MatchResult:
    """Score one candidate against the requester."""

    requester_prefs = requester.preferences.as_mapping()
    candidate_prefs = candidate.preferences.as_mapping()
    compatibility = calculate_compatibility(requester_prefs, candidate_prefs)

    distance = None
    if requester_coordinates is not None:
        candidate_coordinates = resolve_user_coordinates(candidate)
        if candidate_coordinates is not None:
            distance = distance_km(requester_coordinates, candidate_coordinates)

    return MatchResult(
        user_id=candidate.id,
        username=candidate.username,
        profile=candidate.profile.model_dump(by_alias=True),
        preferences=candidate_prefs,
        match_percentage=compatibility.match_percentage,
        is_location_match=is_location_match(requester_prefs, candidate_prefs),
        distance_km=distance,
        category_scores={
            category: round(score, 3)
            for category, score in compatibility.category_scores.items()
        },
    )


def rank_matches(requester: User, candidates: Iterable[User]) -> MatchRanking:
    """Score and order ``candidates`` for ``requester``.

    The requester is skipped if it appears in the pool. An empty pool yields
    an empty ranking.
    """

    requester_coordinates = resolve_user_coordinates(requester)
    ranking = MatchRanking()

    for candidate in candidates:
        if candidate.id == requester.id:
            continue
        result = build_match_result(requester, candidate, requester_coordinates)
        if result.is_location_match:
            ranking.location_matches.append(result)
        else:
            ranking.other_matches.append(result)

    # sorted() is stable, including with reverse=True.
    ranking.location_matches = sorted(
        ranking.location_matches, key=lambda m: m.match_percentage, reverse=True
    )
    ranking.other_matches = sorted(
        ranking.other_matches, key=lambda m: m.match_percentage, reverse=True
    )

    logger.debug(
        "rank_matches location=%s other=%s",
        len(ranking.location_matches),
        len(ranking.other_matches),
    )
    return ranking
