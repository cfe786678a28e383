"""
Unit tests for match ranking.

Ranking invariants:
  - every location match precedes every other match, whatever the scores
  - each partition is non-increasing in match percentage, ties stable
  - distance is reported only when both users can be placed
"""

from roomfinder.tools.ranking_tools import rank_matches, resolve_user_coordinates
from roomfinder.tools.geocode_tools import CITY_COORDINATES


class TestRankOrdering:
    """Partitioning and ordering of ranked matches."""

    def test_location_matches_outrank_higher_scores(self, make_user):
        requester = make_user(
            "me", location="Mumbai", cleanliness="Very Clean", smoking="No Smoking"
        )
        # 2/3 + 1 -> 83, 0 + 1 -> 50, identical -> 100
        near_good = make_user(
            "near_good", location="Mumbai", cleanliness="Moderately Clean", smoking="No Smoking"
        )
        near_poor = make_user(
            "near_poor", location="Mumbai", cleanliness="Messy", smoking="No Smoking"
        )
        far_best = make_user(
            "far_best", location="Pune", cleanliness="Very Clean", smoking="No Smoking"
        )

        ranking = rank_matches(requester, [far_best, near_poor, near_good])
        ordered = [(m.user_id, m.match_percentage) for m in ranking.matches]

        assert ordered == [("near_good", 83), ("near_poor", 50), ("far_best", 100)]

    def test_partitions_sorted_descending(self, make_user):
        requester = make_user("me", location="Delhi", pets="No Pets", music="Quiet Environment")
        pool = [
            make_user("a", location="Delhi", pets="Has Pets"),
            make_user("b", location="Noida", pets="No Pets"),
            make_user("c", location="Delhi", pets="No Pets", music="Quiet Environment"),
            make_user("d", location="Noida", pets="Pet Friendly"),
        ]

        ranking = rank_matches(requester, pool)

        assert all(m.is_location_match for m in ranking.location_matches)
        assert not any(m.is_location_match for m in ranking.other_matches)
        for group in (ranking.location_matches, ranking.other_matches):
            scores = [m.match_percentage for m in group]
            assert scores == sorted(scores, reverse=True)

    def test_ties_keep_input_order(self, make_user):
        requester = make_user("me", smoking="No Smoking")
        pool = [make_user(uid, smoking="No Smoking") for uid in ("x", "y", "z")]

        ranking = rank_matches(requester, pool)

        assert [m.user_id for m in ranking.matches] == ["x", "y", "z"]

    def test_empty_pool(self, make_user):
        ranking = rank_matches(make_user("me", smoking="No Smoking"), [])
        response = ranking.to_response()
        assert response.matches == []
        assert response.location_match_count == 0
        assert response.other_match_count == 0

    def test_requester_excluded_from_pool(self, make_user):
        requester = make_user("me", smoking="No Smoking")
        ranking = rank_matches(requester, [requester, make_user("other", smoking="Outside Only")])
        assert [m.user_id for m in ranking.matches] == ["other"]


class TestDistances:
    """Coordinates come from the profile address, then the location preference."""

    def test_address_preferred_over_location(self, make_user):
        user = make_user("u", address="12 Park Road, Noida", location="Mumbai")
        assert resolve_user_coordinates(user) == CITY_COORDINATES["noida"]

    def test_unrecognised_address_uses_default_city(self, make_user):
        """A non-empty address always wins over the location preference.

        An address naming no known city therefore resolves to the default
        city, even when the location preference would place the user.
        """
        user = make_user("u", address="Flat 4B", location="Mumbai")
        assert resolve_user_coordinates(user) == CITY_COORDINATES["delhi"]

    def test_location_used_without_address(self, make_user):
        user = make_user("u", location="Pune")
        assert resolve_user_coordinates(user) == CITY_COORDINATES["pune"]

    def test_no_location_information(self, make_user):
        assert resolve_user_coordinates(make_user("u", smoking="Yes")) is None

    def test_distance_omitted_when_requester_unplaced(self, make_user):
        requester = make_user("me", smoking="No Smoking")
        candidate = make_user("c", location="Pune", smoking="No Smoking")
        [match] = rank_matches(requester, [candidate]).matches
        assert match.distance_km is None

    def test_distance_omitted_when_candidate_unplaced(self, make_user):
        requester = make_user("me", location="Pune", smoking="No Smoking")
        candidate = make_user("c", smoking="No Smoking")
        [match] = rank_matches(requester, [candidate]).matches
        assert match.distance_km is None

    def test_same_city_distance_zero(self, make_user):
        requester = make_user("me", address="Baner, Pune", smoking="No Smoking")
        candidate = make_user("c", location="Pune", smoking="No Smoking")
        [match] = rank_matches(requester, [candidate]).matches
        assert match.distance_km == 0.0
        # Address city is not the location preference.
        assert match.is_location_match is False


class TestResponseShape:
    """Serialized results use camelCase keys and pass display fields through."""

    def test_response_payload(self, make_user):
        requester = make_user("me", location="Mumbai", cleanliness="Very Clean")
        candidate = make_user(
            "c", username="asha", location="Mumbai", cleanliness="Very Clean"
        )

        payload = rank_matches(requester, [candidate]).to_response().model_dump(by_alias=True)

        assert payload["locationMatchCount"] == 1
        assert payload["otherMatchCount"] == 0
        match = payload["matches"][0]
        assert match["userId"] == "c"
        assert match["username"] == "asha"
        assert match["matchPercentage"] == 100
        assert match["isLocationMatch"] is True
        assert match["distanceKm"] == 0.0
        assert match["profile"]["fullName"] == "User c"
        assert match["preferences"]["cleanliness"] == "Very Clean"
        assert match["categoryScores"] == {"cleanliness": 1.0}
