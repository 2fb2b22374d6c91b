"""Tests for Barrier - door placement, layout and scrolling."""
import numpy as np
import pytest

from nyan import DOOR_HEIGHT, WALL_CHAR, Barrier


def brick_rows(barrier):
    return sorted(g.y for g in barrier.glyphs())


@pytest.mark.unit
class TestBarrierLayout:
    """Construction at the right edge around a door."""

    def test_door_rows_are_empty(self, door_at):
        barrier = Barrier(40, 20, door_at(8))

        assert barrier.door_start == 8
        assert brick_rows(barrier) == list(range(0, 8)) + list(range(12, 20))

    def test_bricks_in_rightmost_column(self, door_at):
        barrier = Barrier(40, 20, door_at(5))

        assert {g.x for g in barrier.glyphs()} == {39}
        assert {g.char for g in barrier.glyphs()} == {WALL_CHAR}

    def test_door_at_top(self, door_at):
        barrier = Barrier(40, 20, door_at(0))

        assert brick_rows(barrier) == list(range(DOOR_HEIGHT, 20))

    def test_door_at_lowest_position(self, door_at):
        barrier = Barrier(40, 20, door_at(20 - DOOR_HEIGHT - 1))

        assert brick_rows(barrier) == list(range(0, 15)) + [19]

    def test_rng_range(self, door_at):
        rng = door_at(3)
        Barrier(40, 20, rng)

        assert rng.calls == [(0, 20 - DOOR_HEIGHT)]

    @pytest.mark.parametrize("height", [DOOR_HEIGHT + 1, 10, 20, 57])
    def test_door_invariant_over_many_seeds(self, height):
        rng = np.random.default_rng(1234)
        seen = set()
        for _ in range(200):
            barrier = Barrier(30, height, rng)
            d = barrier.door_start
            seen.add(d)

            assert 0 <= d <= height - DOOR_HEIGHT - 1
            rows = set(brick_rows(barrier))
            assert rows.isdisjoint(range(d, d + DOOR_HEIGHT))
            assert rows | set(range(d, d + DOOR_HEIGHT)) == set(range(height))
            assert len(barrier.glyphs()) == height - DOOR_HEIGHT

        assert max(seen) <= height - DOOR_HEIGHT - 1

    def test_seeded_rng_is_reproducible(self):
        a = [Barrier(30, 20, np.random.default_rng(7)).door_start for _ in range(3)]
        b = [Barrier(30, 20, np.random.default_rng(7)).door_start for _ in range(3)]

        assert a == b

    @pytest.mark.parametrize("height", [0, 3, DOOR_HEIGHT])
    def test_too_short_for_a_door(self, height):
        with pytest.raises(ValueError):
            Barrier(40, height, np.random.default_rng(0))


@pytest.mark.unit
class TestBarrierScroll:
    """Leftward scrolling and exhaustion."""

    def test_update_moves_left_one_column(self, door_at):
        barrier = Barrier(40, 20, door_at(8))
        barrier.update()

        assert {g.x for g in barrier.glyphs()} == {38}
        assert brick_rows(barrier) == list(range(0, 8)) + list(range(12, 20))

    def test_exhausted_after_crossing_playfield(self, door_at):
        barrier = Barrier(40, 20, door_at(8))
        for _ in range(39):
            barrier.update()

        assert {g.x for g in barrier.glyphs()} == {0}
        assert not barrier.exhausted

        barrier.update()
        assert barrier.glyphs() == []
        assert barrier.exhausted
