"""Shared LangGraph state definitions.

Graph states are TypedDicts so state is explicit, serializable, and
consistent across graph nodes.
"""

from __future__ import annotations

from typing import TypedDict

JsonDict = dict[str, object]
JsonList = list[JsonDict]


class MatchingState(TypedDict, total=False):
    """State for the matching graph.

    Fields are optional at runtime because nodes populate them progressively.
    Every field is JSON-serializable for LangGraph persistence/debugging.
    """

    # Identifies the requesting user.
    user_id: str
    # Requesting user's document from users/{user_id}.
    user: JsonDict
    # Completed profiles of every other user.
    candidates: JsonList
    # Ranked matches, location matches first (camelCase MatchResult dicts).
    matches: JsonList
    location_match_count: int
    other_match_count: int
    # Human readable error if any node fails.
    error: str
    # Machine readable error: user_not_found, preferences_incomplete,
    # store_unavailable, ranking_failed.
    error_code: str
    # Response metadata for observability.
    response_metadata: JsonDict
