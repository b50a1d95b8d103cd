"""Tests for the ripple sweep."""

import random

import pytest

from make_way.exceptions import GeometryResolutionError, MutationError
from make_way.geometry import get_absolute_bounding_box
from make_way.models import SceneNode
from make_way.ripple import find_right_neighbours, propagate_shift


class TestFindRightNeighbours:
    """Tests for candidate selection."""

    def test_filters_and_sorts(self, shape, section, scene):
        start = shape("start", x=100, y=0, width=80, height=100)
        far = shape("far", x=400, y=10, width=10, height=10)
        near = shape("near", x=200, y=50, width=10, height=10)
        left = shape("left", x=0, y=0, width=50, height=100)
        below = shape("below", x=300, y=100, width=10, height=10)
        locked = shape("locked", x=250, y=0, width=10, height=10, locked=True)
        s = section("s", width=1000, children=[start, far, near, left, below, locked])
        scene(s)

        assert [n.id for n in find_right_neighbours(start, s)] == ["near", "far"]

    def test_ties_on_left_edge_included(self, shape, section, scene):
        start = shape("start", x=100, width=80)
        twin = shape("twin", x=100, width=20)
        s = section("s", children=[start, twin])
        scene(s)
        assert find_right_neighbours(start, s) == [twin]

    def test_equal_x_keeps_child_order(self, shape, section, scene):
        start = shape("start", x=0, width=10)
        first = shape("first", x=50, width=10)
        second = shape("second", x=50, width=10)
        s = section("s", children=[start, second, first])
        scene(s)
        assert [n.id for n in find_right_neighbours(start, s)] == ["second", "first"]


class TestPropagateShift:
    """Tests for the left-to-right sweep."""

    def test_chain_propagates_transitively(self, shape, section, scene):
        """Scenario C: the frontier advances across a chain of siblings."""
        start = shape("start", x=100, y=0, width=80, height=100)
        first = shape("first", x=150, y=0, width=50, height=100)
        second = shape("second", x=210, y=0, width=30, height=100)
        s = section("s", width=1000, children=[start, first, second])
        scene(s)

        frontier = propagate_shift(start, s, 80)

        assert first.x == 230
        assert second.x == 290
        assert frontier == 320

    def test_locked_sibling_truncates_ripple(self, shape, section, scene):
        """Scenario D: a locked sibling is not moved and does not push the frontier."""
        start = shape("start", x=0, y=0, width=100, height=100)
        locked = shape("locked", x=50, y=0, width=100, height=100, locked=True)
        beyond = shape("beyond", x=160, y=0, width=50, height=100)
        s = section("s", width=1000, children=[start, locked, beyond])
        scene(s)

        frontier = propagate_shift(start, s, 80)

        assert locked.x == 50
        assert beyond.x == 160
        assert frontier == 100

    def test_gap_stops_scan(self, shape, section, scene):
        """Once a candidate clears the frontier, nothing after it moves."""
        start = shape("start", x=0, width=100)
        hit = shape("hit", x=90, width=20)
        clear = shape("clear", x=500, width=20)
        after = shape("after", x=510, width=20)
        s = section("s", width=1000, children=[start, hit, clear, after])
        scene(s)

        frontier = propagate_shift(start, s, 30)

        assert hit.x == 120
        assert clear.x == 500
        assert after.x == 510
        assert frontier == 140

    def test_no_candidates_returns_start_edge(self, shape, section, scene):
        start = shape("start", x=40, width=60)
        s = section("s", children=[start])
        scene(s)
        assert propagate_shift(start, s, 50) == 100

    def test_vertically_separate_siblings_untouched(self, shape, section, scene):
        start = shape("start", x=0, y=0, width=100, height=50)
        touching = shape("touching", x=50, y=50, width=10, height=10)
        s = section("s", children=[start, touching])
        scene(s)
        propagate_shift(start, s, 80)
        assert touching.x == 50

    def test_frontier_never_decreases(self, shape, section, scene):
        """A small sibling moved inside a wide push source cannot pull the frontier back."""
        start = shape("start", x=0, width=500)
        small = shape("small", x=10, width=10)
        s = section("s", width=1000, children=[start, small])
        scene(s)

        frontier = propagate_shift(start, s, 50)

        assert small.x == 60
        assert frontier == 500

    def test_unresolvable_start_raises(self, shape, section):
        start = shape("start")
        s = section("s", children=[start])
        start.remove()
        with pytest.raises(GeometryResolutionError):
            propagate_shift(start, s, 10)

    def test_rejected_move_is_skipped(self, shape, section, scene, monkeypatch):
        """A node that refuses to move stays put, and later colliding siblings still move."""
        start = shape("start", x=0, width=100)
        stuck = shape("stuck", x=50, width=10)
        later = shape("later", x=70, width=10)
        s = section("s", width=1000, children=[start, stuck, later])
        scene(s)

        original = SceneNode.translate

        def translate(self, dx, dy=0.0):
            if self.id == "stuck":
                raise MutationError("constraint conflict")
            original(self, dx, dy)

        monkeypatch.setattr(SceneNode, "translate", translate)

        frontier = propagate_shift(start, s, 40)

        assert stuck.x == 50
        assert later.x == 110
        assert frontier == 120

    @pytest.mark.parametrize("seed", range(10))
    def test_sweep_properties(self, shape, section, scene, seed):
        """Monotone frontier, single moves, and moved nodes form a sorted prefix."""
        rng = random.Random(seed)
        start = shape("start", x=100, y=0, width=80, height=100)
        siblings = [
            shape(
                f"n{i}",
                x=rng.randint(0, 800),
                y=rng.randint(-50, 150),
                width=rng.randint(5, 60),
                height=rng.randint(5, 60),
                locked=rng.random() < 0.1,
            )
            for i in range(25)
        ]
        s = section("s", width=2000, height=400, children=[start, *siblings])
        scene(s)
        shift = 40

        order = find_right_neighbours(start, s)
        before = {n.id: n.x for n in siblings}

        frontier = propagate_shift(start, s, shift)

        assert frontier >= 180
        deltas = {n.id: n.x - before[n.id] for n in siblings}
        assert set(deltas.values()) <= {0, shift}

        moved_flags = [deltas[n.id] == shift for n in order]
        if False in moved_flags:
            first_still = moved_flags.index(False)
            assert not any(moved_flags[first_still:])
        for node in siblings:
            if node not in order:
                assert deltas[node.id] == 0

        rights = [get_absolute_bounding_box(n).right for n in order if deltas[n.id]]
        assert all(frontier >= right for right in rights)
