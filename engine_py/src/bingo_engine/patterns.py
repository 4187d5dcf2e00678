"""
Winning pattern definitions and coverage evaluation.

Every game type maps to an ordered tuple of patterns. A pattern is the set
of cell indices (row-major, 0-24) that must all be covered; pattern ``i``
corresponds to bit ``i`` of a satisfied or claimed mask.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import (
    CELL_COUNT, FREE_CELL, GRID_SIZE,
    GAME_COVER_ALL, GAME_FOUR_CORNERS, GAME_FRAME_INSIDE, GAME_FRAME_OUTSIDE,
    GAME_POSTAGE_STAMP, GAME_TRADITIONAL, GAME_X, GAME_Y,
)

Pattern = Tuple[int, ...]


def _rows() -> List[Pattern]:
    return [tuple(r * GRID_SIZE + c for c in range(GRID_SIZE)) for r in range(GRID_SIZE)]


def _columns() -> List[Pattern]:
    return [tuple(r * GRID_SIZE + c for r in range(GRID_SIZE)) for c in range(GRID_SIZE)]


def _border() -> Pattern:
    last = GRID_SIZE - 1
    return tuple(
        r * GRID_SIZE + c
        for r in range(GRID_SIZE)
        for c in range(GRID_SIZE)
        if r in (0, last) or c in (0, last)
    )


PATTERNS: Dict[str, Tuple[Pattern, ...]] = {
    GAME_TRADITIONAL: tuple(
        _rows() + _columns() + [(0, 6, 12, 18, 24), (4, 8, 12, 16, 20)]
    ),
    GAME_FOUR_CORNERS: ((0, 4, 20, 24),),
    GAME_POSTAGE_STAMP: (
        (0, 1, 5, 6),
        (3, 4, 8, 9),
        (15, 16, 20, 21),
        (18, 19, 23, 24),
    ),
    GAME_COVER_ALL: (tuple(range(CELL_COUNT)),),
    GAME_X: ((0, 4, 6, 8, 12, 16, 18, 20, 24),),
    GAME_Y: ((0, 4, 6, 8, 12, 17, 22),),
    GAME_FRAME_OUTSIDE: (_border(),),
    GAME_FRAME_INSIDE: ((6, 7, 8, 11, 13, 16, 17, 18),),
}


def is_valid_game_type(game_type) -> bool:
    return game_type in PATTERNS


def pattern_count(game_type: str) -> int:
    return len(PATTERNS.get(game_type, ()))


def effective_coverage(
    numbers: Sequence[Optional[int]],
    marks: Sequence[bool],
    called: Iterable[int]
) -> List[bool]:
    """
    Compute which cells count as covered.

    A cell is covered when it is the free cell, or when the player marked it
    and its number has actually been called.

    Args:
        numbers: Card numbers (None for the free cell)
        marks: Player marks
        called: Numbers called so far

    Returns:
        List of 25 booleans
    """
    called_set = set(called)
    coverage = []
    for idx in range(CELL_COUNT):
        if idx == FREE_CELL:
            coverage.append(True)
            continue
        marked = idx < len(marks) and bool(marks[idx])
        number = numbers[idx] if idx < len(numbers) else None
        coverage.append(marked and number is not None and number in called_set)
    return coverage


def satisfied_mask(game_type: str, coverage: Sequence[bool]) -> int:
    """Bitmask of the patterns of ``game_type`` fully covered by ``coverage``."""
    mask = 0
    for bit, pattern in enumerate(PATTERNS.get(game_type, ())):
        if all(coverage[idx] for idx in pattern):
            mask |= 1 << bit
    return mask


def unclaimed_mask(game_type: str, coverage: Sequence[bool], claimed: int) -> int:
    return satisfied_mask(game_type, coverage) & ~claimed
