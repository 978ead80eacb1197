"""Conversion between chosen numbers and the packed on-chain ticket.

A ticket is stored on chain as an unsigned integer where bit ``i`` set means
number ``i + 1`` was chosen. Combinations are modelled as ``frozenset`` so the
uniqueness of numbers is carried by the type.
"""

from __future__ import annotations

import secrets
from typing import FrozenSet, Iterable, List

from lottery_sdk.errors import InvalidCombination

Combination = FrozenSet[int]


def as_combination(numbers: Iterable[int]) -> Combination:
    """Normalize any iterable of numbers into a combination."""
    return frozenset(int(n) for n in numbers)


def is_valid_combination(numbers: Iterable[int], selection_size: int, selection_max: int) -> bool:
    """Return True if ``numbers`` holds exactly ``selection_size`` numbers in ``[1, selection_max]``."""
    combination = as_combination(numbers)
    return len(combination) == selection_size and all(1 <= n <= selection_max for n in combination)


def encode_unchecked(numbers: Iterable[int]) -> int:
    """Pack numbers into a ticket without validating them.

    Used for lookup keys built from partial combinations as well as for
    submission after validation.
    """
    ticket = 0
    for n in as_combination(numbers):
        if n < 1:
            raise InvalidCombination(f"Number {n} cannot be packed into a ticket")
        ticket |= 1 << (n - 1)
    return ticket


def encode(numbers: Iterable[int], selection_size: int, selection_max: int) -> int:
    """Pack a valid combination into a ticket.

    :raises InvalidCombination: if the combination fails :func:`is_valid_combination`.
    """
    combination = as_combination(numbers)
    if not is_valid_combination(combination, selection_size, selection_max):
        raise InvalidCombination(
            f"Invalid ticket {sorted(combination)}: expected {selection_size} distinct numbers in [1, {selection_max}]"
        )
    return encode_unchecked(combination)


def decode(ticket: int, selection_max: int) -> Combination:
    """Unpack a ticket into its numbers; bits at or above ``selection_max`` are ignored."""
    ticket = int(ticket)
    return frozenset(i + 1 for i in range(selection_max) if ticket >> i & 1)


def generate_random_ticket(selection_size: int, selection_max: int) -> Combination:
    """Pick ``selection_size`` distinct numbers from ``[1, selection_max]``."""
    if selection_size > selection_max:
        raise InvalidCombination(f"Cannot pick {selection_size} distinct numbers from [1, {selection_max}]")

    numbers = set()
    while len(numbers) < selection_size:
        numbers.add(secrets.randbelow(selection_max) + 1)
    return frozenset(numbers)


def generate_random_tickets(count: int, selection_size: int, selection_max: int) -> List[Combination]:
    return [generate_random_ticket(selection_size, selection_max) for _ in range(count)]
