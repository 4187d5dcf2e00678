"""
Tests for winning pattern evaluation.
"""

import pytest

from bingo_engine.constants import FREE_CELL, GAME_TYPES
from bingo_engine.patterns import (
    PATTERNS, effective_coverage, pattern_count, satisfied_mask, unclaimed_mask,
)


def coverage_of(cells):
    """Coverage with exactly ``cells`` (plus the free cell) covered."""
    covered = set(cells) | {FREE_CELL}
    return [i in covered for i in range(25)]


def test_every_game_type_has_patterns():
    for game_type in GAME_TYPES:
        assert pattern_count(game_type) >= 1
    assert pattern_count("traditional") == 12
    assert pattern_count("postage_stamp") == 4
    assert pattern_count("bogus") == 0


def test_effective_coverage_requires_mark_and_call():
    numbers = [None if i == FREE_CELL else i + 1 for i in range(25)]
    marks = [False] * 25
    marks[0] = True   # marked and called
    marks[1] = True   # marked, not called
    coverage = effective_coverage(numbers, marks, called=[1, 3])

    assert coverage[0]
    assert not coverage[1]
    assert not coverage[2]  # called, not marked
    assert coverage[FREE_CELL]
    assert sum(coverage) == 2


def test_free_cell_alone_satisfies_nothing():
    blank = coverage_of([])
    for game_type in GAME_TYPES:
        assert satisfied_mask(game_type, blank) == 0


def test_traditional_rows_columns_diagonals():
    assert satisfied_mask("traditional", coverage_of([0, 1, 2, 3, 4])) == 1 << 0
    assert satisfied_mask("traditional", coverage_of([20, 21, 22, 23, 24])) == 1 << 4
    # Middle column uses the free cell
    assert satisfied_mask("traditional", coverage_of([2, 7, 17, 22])) == 1 << 7
    assert satisfied_mask("traditional", coverage_of([0, 6, 18, 24])) == 1 << 10
    assert satisfied_mask("traditional", coverage_of([4, 8, 16, 20])) == 1 << 11


def test_traditional_multiple_bits():
    cells = [0, 1, 2, 3, 4, 5, 10, 15, 20]  # row 0 and column 0
    assert satisfied_mask("traditional", coverage_of(cells)) == (1 << 0) | (1 << 5)


def test_four_corners():
    assert satisfied_mask("four_corners", coverage_of([0, 4, 20, 24])) == 1
    assert satisfied_mask("four_corners", coverage_of([0, 4, 20])) == 0


@pytest.mark.parametrize("cells,bit", [
    ([0, 1, 5, 6], 0),
    ([3, 4, 8, 9], 1),
    ([15, 16, 20, 21], 2),
    ([18, 19, 23, 24], 3),
])
def test_postage_stamp_blocks(cells, bit):
    assert satisfied_mask("postage_stamp", coverage_of(cells)) == 1 << bit


def test_cover_all():
    assert satisfied_mask("cover_all", coverage_of(range(25))) == 1
    assert satisfied_mask("cover_all", coverage_of([i for i in range(25) if i != 7])) == 0


def test_x_and_y():
    assert satisfied_mask("x", coverage_of([0, 4, 6, 8, 16, 18, 20, 24])) == 1
    assert satisfied_mask("x", coverage_of([0, 4, 6, 8, 16, 18, 20])) == 0
    assert satisfied_mask("y", coverage_of([0, 4, 6, 8, 17, 22])) == 1
    assert satisfied_mask("y", coverage_of([0, 4, 6, 8, 17])) == 0


def test_frames():
    border = PATTERNS["frame_outside"][0]
    assert len(border) == 16
    assert satisfied_mask("frame_outside", coverage_of(border)) == 1
    inner = PATTERNS["frame_inside"][0]
    assert sorted(inner) == [6, 7, 8, 11, 13, 16, 17, 18]
    assert satisfied_mask("frame_inside", coverage_of(inner)) == 1
    assert satisfied_mask("frame_inside", coverage_of(inner[:-1])) == 0


def test_unclaimed_mask_hides_claimed_bits():
    coverage = coverage_of([0, 1, 2, 3, 4, 5, 10, 15, 20])
    assert unclaimed_mask("traditional", coverage, claimed=1 << 0) == 1 << 5
    assert unclaimed_mask("traditional", coverage, claimed=(1 << 0) | (1 << 5)) == 0
