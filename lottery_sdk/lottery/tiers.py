"""Win-tier mapping for per-tier arrays served by the indexer."""

from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence, TypeVar

S = TypeVar("S")
T = TypeVar("T")


def _identity(value):
    return value


def map_tiers(
    values: Optional[Sequence[S]],
    min_winning_tier: int,
    selection_size: int,
    transform: Callable[[S], T] = _identity,
) -> Dict[int, T]:
    """Key a tier-ordered array by win tier.

    The indexer only returns the highest tiers, in ascending order, so the
    first element belongs to tier ``selection_size - len(values) + 1``.
    Tiers below ``min_winning_tier`` are dropped; so is anything that would
    land below tier 1 when the array is longer than ``selection_size``.
    """
    if not values:
        return {}

    base = selection_size - len(values) + 1
    return {
        base + index: transform(value)
        for index, value in enumerate(values)
        if base + index >= min_winning_tier
    }
