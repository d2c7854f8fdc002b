"""Unit tests for travel/models.py and travel/store.py -- the visited/wishlist state machine.

Covers:
- Country-code normalization and rejection
- Every transition in the None / Visited / Wishlisted table
- Idempotence of all four mutations
- Disjointness after every operation in every sequence of length 3
- Invalid codes change nothing
- Users never see each other's marks
- Concurrent mutations on one user/code keep the invariant (file-backed DB)
"""

import itertools
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.errors import InvalidCountryCode
from travel.models import MarkStatus, TravelState, normalize_country_code
from travel.store import TravelStore

_USER = "user-1"

_OPS = ("mark_visited", "unmark_visited", "add_to_wishlist", "remove_from_wishlist")


def _apply(store: TravelStore, op: str, user_id: str, code: str) -> TravelState:
    return getattr(store, op)(user_id, code)


def _assert_disjoint(state: TravelState) -> None:
    assert not set(state.visited) & set(state.wishlist), state


# ---------------------------------------------------------------------------
# normalize_country_code
# ---------------------------------------------------------------------------


class TestNormalizeCountryCode:
    @pytest.mark.parametrize("raw, expected", [("fr", "FR"), ("FR", "FR"), ("jP", "JP"), ("xx", "XX")])
    def test_accepts_two_letters(self, raw, expected):
        assert normalize_country_code(raw) == expected

    @pytest.mark.parametrize("raw", ["", "F", "FRA", "F1", "12", " fr", "fr\n", "ß", "éé", "--"])
    def test_rejects_everything_else(self, raw):
        with pytest.raises(InvalidCountryCode):
            normalize_country_code(raw)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


class TestTransitions:
    def test_mark_visited_from_none(self, travel_store: TravelStore):
        state = travel_store.mark_visited(_USER, "fr")
        assert state.visited == ["FR"]
        assert state.wishlist == []

    def test_mark_visited_moves_out_of_wishlist(self, travel_store: TravelStore):
        travel_store.add_to_wishlist(_USER, "FR")
        state = travel_store.mark_visited(_USER, "FR")
        assert "FR" in state.visited
        assert "FR" not in state.wishlist

    def test_add_to_wishlist_moves_out_of_visited(self, travel_store: TravelStore):
        travel_store.mark_visited(_USER, "fr")
        state = travel_store.add_to_wishlist(_USER, "FR")
        assert state.wishlist == ["FR"]
        assert state.visited == []

    def test_unmark_visited(self, travel_store: TravelStore):
        travel_store.mark_visited(_USER, "FR")
        assert travel_store.unmark_visited(_USER, "fr").visited == []

    def test_unmark_visited_leaves_wishlist_alone(self, travel_store: TravelStore):
        travel_store.add_to_wishlist(_USER, "FR")
        state = travel_store.unmark_visited(_USER, "FR")
        assert state.wishlist == ["FR"]

    def test_remove_from_wishlist_leaves_visited_alone(self, travel_store: TravelStore):
        travel_store.mark_visited(_USER, "FR")
        state = travel_store.remove_from_wishlist(_USER, "FR")
        assert state.visited == ["FR"]

    def test_removals_from_none_are_noops(self, travel_store: TravelStore):
        assert travel_store.unmark_visited(_USER, "FR") == TravelState()
        assert travel_store.remove_from_wishlist(_USER, "FR") == TravelState()

    def test_state_is_sorted(self, travel_store: TravelStore):
        for code in ("jp", "ar", "fr"):
            travel_store.mark_visited(_USER, code)
        assert travel_store.get_state(_USER).visited == ["AR", "FR", "JP"]

    def test_status_of(self, travel_store: TravelStore):
        travel_store.mark_visited(_USER, "FR")
        state = travel_store.add_to_wishlist(_USER, "JP")
        assert state.status_of("FR") is MarkStatus.visited
        assert state.status_of("JP") is MarkStatus.wishlist
        assert state.status_of("DE") is None


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestProperties:
    @pytest.mark.parametrize("op", _OPS)
    def test_idempotent(self, travel_store: TravelStore, op):
        travel_store.mark_visited(_USER, "DE")
        travel_store.add_to_wishlist(_USER, "IT")
        once = _apply(travel_store, op, _USER, "FR")
        twice = _apply(travel_store, op, _USER, "FR")
        assert once == twice

    def test_invariant_holds_for_every_sequence(self, travel_store: TravelStore):
        """All 4^3 sequences over two codes, checked after each step."""
        for i, seq in enumerate(itertools.product(_OPS, repeat=3)):
            user = f"seq-{i}"
            for step, op in enumerate(seq):
                code = "FR" if step % 2 == 0 else "fr"
                _assert_disjoint(_apply(travel_store, op, user, code))
                _assert_disjoint(_apply(travel_store, op, user, "JP"))

    def test_invalid_code_changes_nothing(self, travel_store: TravelStore):
        travel_store.mark_visited(_USER, "FR")
        before = travel_store.get_state(_USER)
        for op in _OPS:
            with pytest.raises(InvalidCountryCode):
                _apply(travel_store, op, _USER, "F1")
        assert travel_store.get_state(_USER) == before

    def test_users_are_isolated(self, travel_store: TravelStore):
        travel_store.mark_visited("alice", "FR")
        travel_store.add_to_wishlist("bob", "FR")
        assert travel_store.get_state("alice") == TravelState(visited=["FR"], wishlist=[])
        assert travel_store.get_state("bob") == TravelState(visited=[], wishlist=["FR"])


class TestConcurrency:
    def test_concurrent_flips_keep_invariant(self, tmp_path):
        """Threads racing mark_visited against add_to_wishlist on one code.

        Whatever order the database applies them in, FR must end up in exactly
        one of the two sets and never in both.
        """
        store = TravelStore(f"sqlite:///{tmp_path / 'travel.db'}")
        try:

            def flip(i: int) -> TravelState:
                op = "mark_visited" if i % 2 == 0 else "add_to_wishlist"
                return _apply(store, op, _USER, "FR")

            with ThreadPoolExecutor(max_workers=4) as pool:
                results = list(pool.map(flip, range(40)))

            for state in results:
                _assert_disjoint(state)
            final = store.get_state(_USER)
            _assert_disjoint(final)
            assert (final.visited + final.wishlist) == ["FR"]
        finally:
            store.close()
