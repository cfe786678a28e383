"""Matching graph: load the requester, gather candidates, rank them."""

from __future__ import annotations

from langgraph.graph import StateGraph

from roomfinder.config import config
from roomfinder.graphs.base_graph import BaseGraph
from roomfinder.schemas import User
from roomfinder.state import MatchingState
from roomfinder.tools.firestore_tools import get_completed_profiles, get_user
from roomfinder.tools.ranking_tools import rank_matches
from roomfinder.utils.errors import FirestoreUnavailableError
from roomfinder.utils.logging_config import logger

INCOMPLETE_PREFERENCES_MESSAGE = "Please complete your preferences first"


def _with_state(state: MatchingState, **updates) -> MatchingState:
    """Return a new state dict with updates applied."""

    return {**state, **updates}


class MatchingGraph(BaseGraph):
    """Deterministic roommate matching for one requesting user."""

    def build_graph(self) -> StateGraph:
        graph = StateGraph(MatchingState)

        graph.add_node("fetch_user_profile", self.node_fetch_user_profile)
        graph.add_node("check_eligibility", self.node_check_eligibility)
        graph.add_node("query_candidates", self.node_query_candidates)
        graph.add_node("rank_candidates", self.node_rank_candidates)
        graph.add_node("finalize_response", self.node_finalize_response)

        graph.set_entry_point("fetch_user_profile")
        graph.add_edge("fetch_user_profile", "check_eligibility")
        graph.add_edge("check_eligibility", "query_candidates")
        graph.add_edge("query_candidates", "rank_candidates")
        graph.add_edge("rank_candidates", "finalize_response")
        graph.set_finish_point("finalize_response")

        return graph

    def node_fetch_user_profile(self, state: MatchingState) -> MatchingState:
        """Load the requesting user's document."""

        try:
            self._log_node_execution("fetch_user_profile", state)
            user = get_user(state["user_id"])
            if not user:
                return _with_state(
                    state,
                    error=f"User not found: {state['user_id']}",
                    error_code="user_not_found",
                )

            return _with_state(state, user=user)
        except FirestoreUnavailableError as exc:
            self._log_node_error("fetch_user_profile", exc)
            return _with_state(
                state,
                error="Firestore unavailable. Returning empty matches.",
                error_code="store_unavailable",
            )

    def node_check_eligibility(self, state: MatchingState) -> MatchingState:
        """Reject requesters who have not completed their preferences."""

        if state.get("error"):
            return state

        self._log_node_execution("check_eligibility", state)
        requester = User.from_document(state["user_id"], state.get("user", {}))
        if not requester.profile_completed or not requester.preferences.has_any_scored():
            return _with_state(
                state,
                error=INCOMPLETE_PREFERENCES_MESSAGE,
                error_code="preferences_incomplete",
            )
        return state

    def node_query_candidates(self, state: MatchingState) -> MatchingState:
        """Query every other user with a completed profile."""

        if state.get("error"):
            return state

        try:
            self._log_node_execution("query_candidates", state)
            candidates = get_completed_profiles(
                exclude_user_id=state["user_id"],
                limit=config.MAX_CANDIDATES,
            )
            return _with_state(state, candidates=candidates)
        except FirestoreUnavailableError as exc:
            self._log_node_error("query_candidates", exc)
            return _with_state(
                state,
                error="Failed to query candidates. Returning empty matches.",
                error_code="store_unavailable",
                candidates=[],
            )

    def node_rank_candidates(self, state: MatchingState) -> MatchingState:
        """Score every candidate and order location matches first."""

        if state.get("error"):
            return state

        try:
            self._log_node_execution("rank_candidates", state)
            requester = User.from_document(state["user_id"], state["user"])
            candidates = [
                User.from_document(str(doc.get("id", "")), doc)
                for doc in state.get("candidates", [])
            ]
            response = rank_matches(requester, candidates).to_response()
            payload = response.model_dump(by_alias=True, mode="json")

            return _with_state(
                state,
                matches=payload["matches"],
                location_match_count=payload["locationMatchCount"],
                other_match_count=payload["otherMatchCount"],
            )
        except Exception as exc:
            self._log_node_error("rank_candidates", exc)
            return _with_state(
                state,
                error="Ranking failed. Returning empty matches.",
                error_code="ranking_failed",
                matches=[],
            )

    def node_finalize_response(self, state: MatchingState) -> MatchingState:
        """Attach response metadata."""

        if state.get("error"):
            return _with_state(
                state,
                matches=[],
                location_match_count=0,
                other_match_count=0,
                response_metadata={
                    "success": False,
                    "error": state.get("error"),
                    "error_code": state.get("error_code"),
                    "total_candidates": len(state.get("candidates", [])),
                },
            )

        metadata = {
            "success": True,
            "error": None,
            "error_code": None,
            "total_candidates": len(state.get("candidates", [])),
        }
        logger.info(
            "Matched user %s: candidates=%s location_matches=%s",
            state["user_id"],
            metadata["total_candidates"],
            state.get("location_match_count", 0),
        )

        return _with_state(state, response_metadata=metadata)


def create_matching_graph():
    """Build and compile the matching graph for server usage."""

    graph_builder = MatchingGraph(timeout=config.GRAPH_TIMEOUT)
    return graph_builder.compile()
